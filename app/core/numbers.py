"""
Number helpers shared by the scorers and summarizers.
"""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int) -> float:
    """Round to `digits` decimals with halves going up (2.25 -> 2.3), not to even."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def format_number(value: float) -> str:
    """Render a score without a trailing '.0' (125.0 -> '125', 12.5 -> '12.5')."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
