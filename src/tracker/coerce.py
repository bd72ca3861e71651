"""Numeric helpers shared by the normalizer and the derived views."""

from __future__ import annotations

import math
from typing import Any, Optional


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def round_half_up(value: float) -> int:
    """Round like a browser's ``Math.round`` (0.5 goes up, not to even)."""
    return int(math.floor(value + 0.5))


def to_number(value: Any) -> Optional[float]:
    """Best-effort numeric conversion.  Returns None when not a finite number.

    Examples:
        40      -> 40.0
        "72"    -> 72.0
        "abc"   -> None
        "inf"   -> None
        True    -> None
    """
    if isinstance(value, bool) or value is None:
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def to_percent(value: Any, default: int = 0) -> int:
    """Coerce ``value`` into an integer percentage in [0, 100]."""
    number = to_number(value)
    if number is None:
        return default
    return int(clamp(round_half_up(clamp(number, -1.0, 101.0)), 0, 100))
