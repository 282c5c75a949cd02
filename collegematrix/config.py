"""
Runtime settings for collegematrix.

Values come from the process environment (optionally seeded from a .env
file by ``load_env``). Every setting has a default so the CLI runs without
any configuration.
"""

import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import ConfigurationError

NET_PRICE_CATEGORY_ID = "net-price"

# Weight totals within this distance of 100 are accepted
WEIGHT_TOLERANCE = 0.1

# Net price at or above this maps to a 0.0 rating
NET_PRICE_CEILING = 80000.0

SAVE_DELAY_MS = 1000

FREE_SCHOOL_LIMIT = 2
PREMIUM_SCHOOL_LIMIT = 10


def school_limit(is_premium: bool) -> int:
    return PREMIUM_SCHOOL_LIMIT if is_premium else FREE_SCHOOL_LIMIT


def _split_codes(raw: str) -> List[str]:
    return [c.strip() for c in raw.split(",") if c.strip()]


def _number(env, key: str, default, kind=float, minimum=0, allow_minimum=True):
    raw = env.get(key)
    if raw is None:
        return default
    try:
        value = kind(raw)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value):
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")
    if value < minimum or (value == minimum and not allow_minimum):
        op = ">=" if allow_minimum else ">"
        raise ConfigurationError(f"{key} must be {op} {minimum}, got {raw!r}")
    return value


@dataclass
class Settings:
    db_path: Path = Path("data/collegematrix.db")
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    save_delay_ms: int = SAVE_DELAY_MS
    weight_tolerance: float = WEIGHT_TOLERANCE
    net_price_ceiling: float = NET_PRICE_CEILING
    dev_codes: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            db_path=Path(env.get("COLLEGEMATRIX_DB_PATH", "data/collegematrix.db")),
            log_level=env.get("COLLEGEMATRIX_LOG_LEVEL", "INFO"),
            log_dir=Path(env.get("COLLEGEMATRIX_LOG_DIR", "logs")),
            save_delay_ms=_number(env, "COLLEGEMATRIX_SAVE_DELAY_MS", SAVE_DELAY_MS, kind=int),
            weight_tolerance=_number(env, "COLLEGEMATRIX_WEIGHT_TOLERANCE", WEIGHT_TOLERANCE),
            net_price_ceiling=_number(
                env, "COLLEGEMATRIX_NET_PRICE_CEILING", NET_PRICE_CEILING, allow_minimum=False
            ),
            dev_codes=_split_codes(env.get("COLLEGEMATRIX_DEV_CODES", "")),
        )
