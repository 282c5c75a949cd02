from typing import Any, Dict, List

from .models import COST_FIELDS

LIST_FIELDS = ["categories", "schools"]
MAP_FIELDS = ["weights", "ratings", "costs"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _validate_items(name: str, items: Any, errors: List[str]) -> None:
    if not isinstance(items, list):
        errors.append(f"Field '{name}' must be a list")
        return
    seen = set()
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            errors.append(f"{name}[{i}] must be an object")
            continue
        for f in ("id", "name"):
            if not _is_non_empty_str(item.get(f)):
                errors.append(f"{name}[{i}].{f} must be a non-empty string")
        if item.get("id") in seen:
            errors.append(f"{name}[{i}].id '{item.get('id')}' is duplicated")
        seen.add(item.get("id"))


def validate_user_document(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Checks the stored (camelCase) layout of a user document; every field is
    optional since saves are partial.
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return ["Document must be a JSON object"]

    if "email" in data and not isinstance(data["email"], str):
        errors.append("Field 'email' must be a string if provided")
    if "isPremium" in data and not isinstance(data["isPremium"], bool):
        errors.append("Field 'isPremium' must be a boolean if provided")

    for f in LIST_FIELDS:
        if f in data:
            _validate_items(f, data[f], errors)

    for f in MAP_FIELDS:
        if f in data and not isinstance(data[f], dict):
            errors.append(f"Field '{f}' must be an object")

    if isinstance(data.get("weights"), dict):
        for cid, w in data["weights"].items():
            if not _is_number(w) or not 0 <= w <= 100:
                errors.append(f"Weight for '{cid}' must be a number between 0 and 100")

    if isinstance(data.get("ratings"), dict):
        for sid, per_school in data["ratings"].items():
            if not isinstance(per_school, dict):
                errors.append(f"Ratings for school '{sid}' must be an object")
                continue
            for cid, r in per_school.items():
                if not _is_number(r) or not 0 <= r <= 10:
                    errors.append(f"Rating {sid}/{cid} must be a number between 0 and 10")

    if isinstance(data.get("costs"), dict):
        for sid, cost in data["costs"].items():
            if not isinstance(cost, dict):
                errors.append(f"Costs for school '{sid}' must be an object")
                continue
            for f in COST_FIELDS:
                if f in cost and (not _is_number(cost[f]) or cost[f] < 0):
                    errors.append(f"Cost {sid}.{f} must be a non-negative number")

    return errors
