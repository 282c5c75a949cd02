"""
Scoring engine for the decision matrix.

Pure functions over in-memory records: composite score, net price, the
net price to rating rescale and weight-sum validation. Non-numeric inputs
(None, unparsable strings, NaN, infinities) count as 0 rather than raising.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import NET_PRICE_CEILING, WEIGHT_TOLERANCE
from .models import COST_FIELDS, CostData, School

# Sums are rounded here to absorb binary floating point noise
_SUM_PLACES = 6


def _num(value: Any) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    return n if math.isfinite(n) else 0.0


def round_half_away(value: float, places: int) -> float:
    """Round like a person would: 2.345 -> 2.35, -2.345 -> -2.35."""
    q = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(q, rounding=ROUND_HALF_UP))


def composite_score(ratings: Mapping[str, Any], weights: Mapping[str, Any]) -> float:
    """Weighted sum of a school's ratings, rounded to 2 decimals.

    Only categories present in ``ratings`` contribute; a category with no
    weight contributes 0.
    """
    total = math.fsum(_num(r) * _num(weights.get(cid, 0)) / 100 for cid, r in ratings.items())
    return round_half_away(total, 2)


def net_price(costs: Any) -> float:
    """Total annual cost minus scholarships, never below 0.

    Accepts a CostData or a mapping with the same keys.
    """
    if isinstance(costs, CostData):
        costs = costs.to_doc()
    costs = costs or {}
    gross = math.fsum(_num(costs.get(f)) for f in COST_FIELDS if f != "scholarships")
    return max(0.0, round(gross - _num(costs.get("scholarships")), _SUM_PLACES))


def net_price_to_rating(price: Any, ceiling: float = NET_PRICE_CEILING) -> float:
    """Linear rescale: 0 -> 10.0, ``ceiling`` and above -> 0.0."""
    if not ceiling > 0:
        raise ValueError(f"ceiling must be positive, got {ceiling}")
    rating = 10 - _num(price) / ceiling * 10
    return max(0.0, min(10.0, round_half_away(rating, 1)))


def total_weight(weights: Mapping[str, Any]) -> float:
    return round(math.fsum(_num(w) for w in weights.values()), _SUM_PLACES)


def weights_valid(weights: Mapping[str, Any], tolerance: float = WEIGHT_TOLERANCE) -> bool:
    return round(abs(total_weight(weights) - 100), _SUM_PLACES) < tolerance


def weight_feedback(weights: Mapping[str, Any], tolerance: float = WEIGHT_TOLERANCE) -> Optional[str]:
    """Message telling the user how far the total is from 100%, or None if valid."""
    if weights_valid(weights, tolerance):
        return None
    total = total_weight(weights)
    if total < 100:
        return f"Add {100 - total:.1f}% more to reach 100%"
    return f"Reduce by {total - 100:.1f}% to reach 100%"


def clamp_weight(value: Any) -> float:
    """Weight input clamped into [0, 100]; blank input means 0."""
    if isinstance(value, str) and not value.strip():
        return 0.0
    return max(0.0, min(100.0, _num(value)))


def distribute_evenly(category_ids: Sequence[str]) -> Dict[str, float]:
    """Split 100% across categories in one-decimal steps.

    Every category gets floor(100/N, 1 decimal) except the first, which
    absorbs the remainder so the total is exactly 100.
    """
    n = len(category_ids)
    if n == 0:
        return {}
    even = math.floor(100 / n * 10) / 10
    first = float(Decimal(100) - Decimal(repr(even)) * (n - 1))
    weights = {cid: even for cid in category_ids}
    weights[category_ids[0]] = first
    return weights


def rank_schools(
    schools: Iterable[School],
    ratings: Mapping[str, Mapping[str, Any]],
    weights: Mapping[str, Any],
) -> List[Tuple[School, float]]:
    """Schools paired with their composite score, best first.

    Ties keep the input order.
    """
    scored = [(s, composite_score(ratings.get(s.id, {}), weights)) for s in schools]
    return sorted(scored, key=lambda pair: pair[1], reverse=True)


def net_price_ratings(
    schools: Iterable[School],
    costs: Mapping[str, Any],
    ceiling: float = NET_PRICE_CEILING,
) -> Dict[str, float]:
    return {
        s.id: net_price_to_rating(net_price(costs.get(s.id) or CostData()), ceiling)
        for s in schools
    }
