"""Rounding and clamping helpers.

Every helper here returns an in-range value for any finite input and
never raises.
"""

from decimal import Decimal, ROUND_HALF_UP
import math

# Floats this large are already integral; Decimal quantize would overflow its context.
_EXACT_LIMIT = 2.0 ** 52


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3).

    Python's built-in round() uses banker's rounding, which would turn 2.5
    into 2. Non-finite input rounds to 0.
    """
    if value is None or not math.isfinite(value):
        return 0
    if abs(value) >= _EXACT_LIMIT:
        return int(value)
    # repr() keeps the shortest decimal form, so 1.15 stays 1.15 and not 1.149999...
    return int(Decimal(repr(float(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round_to(value: float, places: int = 3) -> float:
    """Round half-up to a fixed number of decimal places."""
    if value is None or not math.isfinite(value):
        return 0.0
    if abs(value) >= _EXACT_LIMIT:
        return float(value)
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` into [low, high].

    Swapped bounds are reordered and NaN maps to ``low``.
    """
    if low > high:
        low, high = high, low
    if value is None or math.isnan(value):
        return low
    return max(low, min(value, high))


def clamp_int(value: int, low: int, high: int) -> int:
    """Integer version of :func:`clamp`."""
    return int(clamp(value, low, high))
