from __future__ import annotations

import math
import sys
from numbers import Real


def numeric_or_none(value: object) -> float | None:
    """
    Read a finite number out of a record value.

    Returns None for absent, boolean, non-numeric or non-finite input.
    Numeric strings are accepted, with thousands separators stripped.
    Integers too large for a float saturate at the largest finite float.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Real):
        try:
            number = float(value)
        except OverflowError:
            return sys.float_info.max if value > 0 else -sys.float_info.max
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_number(value: object) -> float:
    """Like ``numeric_or_none`` but missing data reads as 0.0."""
    number = numeric_or_none(value)
    return 0.0 if number is None else number


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))
