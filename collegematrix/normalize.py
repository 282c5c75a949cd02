import time
from typing import Callable, Optional


def normalize_text(s: str) -> str:
    return " ".join(s.strip().split())


def _millis(clock: Optional[Callable[[], float]] = None) -> int:
    return int((clock or time.time)() * 1000)


def make_category_id(clock: Optional[Callable[[], float]] = None) -> str:
    return f"custom-{_millis(clock)}"


def make_school_id(custom: bool, clock: Optional[Callable[[], float]] = None) -> str:
    prefix = "custom-school" if custom else "school"
    return f"{prefix}-{_millis(clock)}"


def format_location(city: str, state: str) -> str:
    """Join city and state as "City, ST", dropping whichever part is blank."""
    parts = [normalize_text(p) for p in (city or "", state or "")]
    return ", ".join(p for p in parts if p)
