"""
Numeric helpers matching FMG's JavaScript utilities.

Python's round() uses banker's rounding, FMG's rn() uses Math.round which
rounds halves towards positive infinity. Label font ratios must use the
latter to stay identical to the browser output.
"""

import math


def rn(value: float, digits: int = 0) -> float:
    """
    Round a number like JavaScript's Math.round.

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        Rounded value (int when digits is 0)
    """
    if digits == 0:
        return int(math.floor(value + 0.5))
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def minmax(value: float, min_value: float, max_value: float) -> float:
    """Clamp value into [min_value, max_value]."""
    return min(max(value, min_value), max_value)
