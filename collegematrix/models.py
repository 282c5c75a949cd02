"""
Data shapes shared by the scoring engine, the session and the store.

Stored documents use camelCase keys (``isPremium``, ``isCustom``,
``createdAt``) so exported records keep the same layout the web client
reads. The ``*_from_doc`` helpers are lenient: missing fields fall back to
empty defaults.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import NET_PRICE_CATEGORY_ID

Weights = Dict[str, float]
Ratings = Dict[str, Dict[str, float]]


@dataclass(frozen=True)
class Identity:
    """The only parts of an authenticated user the core relies on."""
    uid: str
    email: str = ""


@dataclass
class Category:
    id: str
    name: str
    description: str = ""
    is_custom: bool = False

    def to_doc(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "isCustom": self.is_custom,
        }

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "Category":
        return cls(
            id=doc["id"],
            name=doc.get("name", ""),
            description=doc.get("description", ""),
            is_custom=bool(doc.get("isCustom", False)),
        )


@dataclass
class School:
    id: str
    name: str
    location: str = ""
    is_custom: bool = False

    def to_doc(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "isCustom": self.is_custom,
        }

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "School":
        return cls(
            id=doc["id"],
            name=doc.get("name", ""),
            location=doc.get("location", ""),
            is_custom=bool(doc.get("isCustom", False)),
        )


@dataclass
class CostData:
    tuition: float = 0.0
    housing: float = 0.0
    food: float = 0.0
    travel: float = 0.0
    other: float = 0.0
    scholarships: float = 0.0

    def to_doc(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_doc(cls, doc: Optional[Dict[str, Any]]) -> "CostData":
        doc = doc or {}
        return cls(**{f.name: doc.get(f.name, 0.0) for f in fields(cls)})


COST_FIELDS = tuple(f.name for f in fields(CostData))


DEFAULT_CATEGORIES: List[Category] = [
    Category(NET_PRICE_CATEGORY_ID, "Net Price",
             "Total annual cost after scholarships and financial aid"),
    Category("major", "Major", "Strength and reputation of your intended major program"),
    Category("ranking", "Ranking", "Overall academic ranking and prestige"),
    Category("career-entry", "Career Entry", "Job placement rates and career support services"),
    Category("campus", "Campus", "Campus facilities, location, and overall environment"),
    Category("weather", "Weather", "Climate and weather conditions throughout the year"),
    Category("sports", "Sports", "Athletic programs and sports culture"),
    Category("party-scene", "Party Scene", "Social life and party culture"),
    Category("dorms", "Dorms", "Housing quality and living conditions"),
]


def net_price_category() -> Category:
    base = DEFAULT_CATEGORIES[0]
    return Category(base.id, base.name, base.description, base.is_custom)


def parse_timestamp(value: Any) -> datetime:
    """Accept datetimes, ISO strings or epoch seconds; anything else is now."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return datetime.now()


@dataclass
class UserData:
    user_id: str
    email: str = ""
    is_premium: bool = False
    categories: List[Category] = field(default_factory=list)
    weights: Weights = field(default_factory=dict)
    schools: List[School] = field(default_factory=list)
    ratings: Ratings = field(default_factory=dict)
    costs: Dict[str, CostData] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_doc(cls, user_id: str, doc: Dict[str, Any]) -> "UserData":
        return cls(
            user_id=user_id,
            email=doc.get("email") or "",
            is_premium=bool(doc.get("isPremium", False)),
            categories=[Category.from_doc(c) for c in doc.get("categories") or []],
            weights=dict(doc.get("weights") or {}),
            schools=[School.from_doc(s) for s in doc.get("schools") or []],
            ratings={k: dict(v) for k, v in (doc.get("ratings") or {}).items()},
            costs={k: CostData.from_doc(v) for k, v in (doc.get("costs") or {}).items()},
            created_at=parse_timestamp(doc.get("createdAt")),
            updated_at=parse_timestamp(doc.get("updatedAt")),
        )


# Python field name -> stored document key, for fields callers may write
WRITABLE_FIELDS = {
    "email": "email",
    "is_premium": "isPremium",
    "categories": "categories",
    "weights": "weights",
    "schools": "schools",
    "ratings": "ratings",
    "costs": "costs",
}


def _to_doc_value(name: str, value: Any) -> Any:
    if name in ("categories", "schools"):
        return [v.to_doc() if hasattr(v, "to_doc") else dict(v) for v in value]
    if name == "costs":
        return {k: v.to_doc() if isinstance(v, CostData) else dict(v) for k, v in value.items()}
    if name == "ratings":
        return {k: dict(v) for k, v in value.items()}
    if name == "weights":
        return dict(value)
    return value


def to_document_fields(partial: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a partial UserData mapping into stored document fields.

    Raises:
        KeyError: if the mapping names a field callers may not write
            (``user_id``, timestamps) or one that does not exist.
    """
    out: Dict[str, Any] = {}
    for name, value in partial.items():
        if name not in WRITABLE_FIELDS:
            raise KeyError(f"Field '{name}' cannot be written")
        out[WRITABLE_FIELDS[name]] = _to_doc_value(name, value)
    return out
