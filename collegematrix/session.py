"""
Per-user decision session: the working copy of a user's matrix.

A session is an explicit container handed to whatever drives the UI; it
holds the selected categories, weights, schools, ratings and costs, and
asks its PersistenceGuard to auto-save after every mutation.

Auto-save is suppressed until the session is READY:

    UNINITIALIZED --begin_load--> LOADING --finish_load + settle--> READY

``finish_load`` records that the initial load completed (found or not);
``settle`` is called once the caller has applied the loaded state
(one render cycle) and is what finally enables saving.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from . import calculations
from .config import NET_PRICE_CATEGORY_ID, NET_PRICE_CEILING, WEIGHT_TOLERANCE, school_limit
from .errors import MandatoryCategoryError, SchoolLimitError, ValidationError
from .guard import PersistenceGuard
from .models import (
    Category,
    CostData,
    COST_FIELDS,
    Identity,
    School,
    UserData,
    net_price_category,
)
from .normalize import make_category_id, make_school_id, format_location, normalize_text

STEP_CATEGORIES = 1
STEP_WEIGHTS = 2
STEP_SCHOOLS = 3
STEP_DECISION = 4


class LoadState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class DecisionSession:

    def __init__(
        self,
        guard: Optional[PersistenceGuard] = None,
        weight_tolerance: float = WEIGHT_TOLERANCE,
        net_price_ceiling: float = NET_PRICE_CEILING,
    ):
        self.guard = guard
        self.weight_tolerance = weight_tolerance
        self.net_price_ceiling = net_price_ceiling

        self.identity: Optional[Identity] = None
        self.state = LoadState.UNINITIALIZED
        self._load_complete = False
        self._clear()

    def _clear(self) -> None:
        self.is_premium = False
        self.current_step = STEP_CATEGORIES
        self.categories: List[Category] = []
        self.weights: Dict[str, float] = {}
        self.schools: List[School] = []
        self.ratings: Dict[str, Dict[str, float]] = {}
        self.costs: Dict[str, CostData] = {}

    # Load sequencing

    @property
    def data_loaded(self) -> bool:
        return self.state is LoadState.READY

    def begin_load(self, identity: Identity) -> None:
        self.identity = identity
        self.state = LoadState.LOADING
        self._load_complete = False

    def finish_load(self, data: Optional[UserData]) -> None:
        """Apply the result of the initial load. ``None`` means not found."""
        if self.state is not LoadState.LOADING:
            raise RuntimeError(f"finish_load called in state {self.state.value}")
        if data is not None:
            self.is_premium = data.is_premium
            self.categories = list(data.categories) or [net_price_category()]
            self.weights = dict(data.weights)
            self.schools = list(data.schools)
            self.ratings = {k: dict(v) for k, v in data.ratings.items()}
            self.costs = dict(data.costs)
        else:
            self.categories = [net_price_category()]
        self._load_complete = True

    def settle(self) -> bool:
        """Enable auto-save once the initial load has completed."""
        if self.state is LoadState.LOADING and self._load_complete:
            self.state = LoadState.READY
        return self.data_loaded

    def load(self, identity: Identity) -> bool:
        """Run begin_load, guard.load, finish_load and settle in order."""
        self.begin_load(identity)
        data = self.guard.load(identity.uid) if self.guard is not None else None
        self.finish_load(data)
        return self.settle()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "email": self.identity.email if self.identity else "",
            "is_premium": self.is_premium,
            "categories": list(self.categories),
            "weights": dict(self.weights),
            "schools": list(self.schools),
            "ratings": {k: dict(v) for k, v in self.ratings.items()},
            "costs": dict(self.costs),
        }

    def _changed(self) -> None:
        if self.state is not LoadState.READY or self.guard is None or self.identity is None:
            return
        self.guard.debounced_save(self.identity.uid, self.snapshot())

    # Categories

    def has_category(self, category_id: str) -> bool:
        return any(c.id == category_id for c in self.categories)

    def set_categories(self, categories: List[Category]) -> None:
        if not any(c.id == NET_PRICE_CATEGORY_ID for c in categories):
            raise MandatoryCategoryError("Net Price is mandatory and cannot be removed")
        self.categories = list(categories)
        self._changed()

    def add_category(self, category: Category) -> None:
        if self.has_category(category.id):
            return
        self.categories = self.categories + [category]
        self._changed()

    def add_custom_category(self, name: str, description: str = "") -> Optional[Category]:
        name = normalize_text(name)
        if not name:
            return None
        category = Category(
            id=make_category_id(),
            name=name,
            description=normalize_text(description) or "Custom category",
            is_custom=True,
        )
        self.add_category(category)
        return category

    def remove_category(self, category_id: str) -> None:
        if category_id == NET_PRICE_CATEGORY_ID:
            raise MandatoryCategoryError("Net Price is mandatory and cannot be removed")
        self.categories = [c for c in self.categories if c.id != category_id]
        self._changed()

    # Weights

    def set_weight(self, category_id: str, value: Any) -> float:
        weight = calculations.clamp_weight(value)
        self.weights = {**self.weights, category_id: weight}
        self._changed()
        return weight

    def set_weights(self, weights: Dict[str, Any]) -> None:
        self.weights = {k: calculations.clamp_weight(v) for k, v in weights.items()}
        self._changed()

    def distribute_weights(self) -> Dict[str, float]:
        self.weights = calculations.distribute_evenly([c.id for c in self.categories])
        self._changed()
        return dict(self.weights)

    def selected_weights(self) -> Dict[str, float]:
        """Weights of the currently selected categories only."""
        return {c.id: self.weights.get(c.id, 0.0) for c in self.categories}

    def total_weight(self) -> float:
        return calculations.total_weight(self.selected_weights())

    def weights_valid(self) -> bool:
        return calculations.weights_valid(self.selected_weights(), self.weight_tolerance)

    def weight_feedback(self) -> Optional[str]:
        return calculations.weight_feedback(self.selected_weights(), self.weight_tolerance)

    # Schools

    @property
    def max_schools(self) -> int:
        return school_limit(self.is_premium)

    def can_add_school(self) -> bool:
        return len(self.schools) < self.max_schools

    def add_school(self, school: School) -> School:
        if not self.can_add_school():
            raise SchoolLimitError(self.max_schools, self.is_premium)
        self.schools = self.schools + [school]
        self._changed()
        return school

    def add_custom_school(self, name: str, city: str = "", state: str = "") -> Optional[School]:
        name = normalize_text(name)
        if not name:
            return None
        school = School(
            id=make_school_id(custom=True),
            name=name,
            location=format_location(city, state),
            is_custom=True,
        )
        return self.add_school(school)

    def remove_school(self, school_id: str) -> None:
        """Remove a school together with its ratings and costs."""
        self.schools = [s for s in self.schools if s.id != school_id]
        self.ratings = {k: v for k, v in self.ratings.items() if k != school_id}
        self.costs = {k: v for k, v in self.costs.items() if k != school_id}
        self._changed()

    # Ratings and costs

    def set_rating(self, school_id: str, category_id: str, rating: float) -> None:
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            raise ValidationError(f"Rating must be a number, got {rating!r}")
        if not 0 <= rating <= 10:
            raise ValidationError(f"Rating must be between 0 and 10, got {rating}")
        school_ratings = {**self.ratings.get(school_id, {}), category_id: float(rating)}
        self.ratings = {**self.ratings, school_id: school_ratings}
        self._changed()

    def set_cost(self, school_id: str, field: str, value: float) -> CostData:
        if field not in COST_FIELDS:
            raise ValidationError(f"Unknown cost field: {field}")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"Cost '{field}' must be a number, got {value!r}")
        if value < 0:
            raise ValidationError(f"Cost '{field}' cannot be negative")
        current = self.costs.get(school_id) or CostData()
        updated = CostData(**{**current.to_doc(), field: float(value)})
        self.costs = {**self.costs, school_id: updated}
        self._changed()
        return updated

    def net_price(self, school_id: str) -> float:
        return calculations.net_price(self.costs.get(school_id) or CostData())

    def apply_net_price_ratings(self) -> Dict[str, float]:
        """Fill every school's Net Price rating from its cost breakdown."""
        derived = calculations.net_price_ratings(self.schools, self.costs, self.net_price_ceiling)
        ratings = dict(self.ratings)
        for school_id, rating in derived.items():
            ratings[school_id] = {**ratings.get(school_id, {}), NET_PRICE_CATEGORY_ID: rating}
        self.ratings = ratings
        self._changed()
        return derived

    # Derived views

    def scores(self) -> Dict[str, float]:
        return {
            s.id: calculations.composite_score(self.ratings.get(s.id, {}), self.selected_weights())
            for s in self.schools
        }

    def ranking(self) -> List[Tuple[School, float]]:
        return calculations.rank_schools(self.schools, self.ratings, self.selected_weights())

    # Premium and navigation

    def set_premium(self, is_premium: bool) -> None:
        self.is_premium = bool(is_premium)
        self._changed()

    def can_proceed(self, step: Optional[int] = None) -> bool:
        step = self.current_step if step is None else step
        if step == STEP_CATEGORIES:
            return self.has_category(NET_PRICE_CATEGORY_ID)
        if step == STEP_WEIGHTS:
            return self.weights_valid()
        if step == STEP_SCHOOLS:
            return len(self.schools) > 0
        return False

    def go_to_step(self, step: int) -> None:
        if step not in (STEP_CATEGORIES, STEP_WEIGHTS, STEP_SCHOOLS, STEP_DECISION):
            raise ValidationError(f"Unknown step: {step}")
        self.current_step = step

    def next_step(self) -> int:
        if not self.can_proceed():
            raise ValidationError(f"Step {self.current_step} is not complete")
        self.go_to_step(self.current_step + 1)
        return self.current_step

    def reset(self) -> None:
        """Clear the matrix back to Net Price only. Premium status is kept."""
        is_premium = self.is_premium
        self._clear()
        self.is_premium = is_premium
        self.categories = [net_price_category()]
        self._changed()
