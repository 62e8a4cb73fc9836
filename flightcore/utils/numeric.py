"""
Scalar helpers shared by the estimation path.

Sensor values reach the estimator from several independent sources and can
be NaN or infinite (uninitialized readings, divide-by-zero upstream). These
helpers coerce such values to defined sentinels instead of letting them
propagate into the filter.
"""

import math


def round_to_places(value: float, places: int) -> float:
    """
    Round to ``places`` decimals, ties away from zero.

    Python's built-in ``round`` uses banker's rounding; the altitude history
    is stored with half-away-from-zero semantics so that identical readings
    from different sources always land on the same millimetre.

    Example:
        >>> round_to_places(1.23456, 3)
        1.235
        >>> round_to_places(-2.5, 0)
        -3.0
    """
    if not math.isfinite(value):
        return value
    factor = 10.0 ** places
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return math.copysign(rounded, value)


def finite_or_zero(value: float) -> float:
    """Return ``value`` if finite, else 0.0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 for a zero/non-finite denominator or a non-finite result."""
    if denominator == 0 or not math.isfinite(denominator):
        return 0.0
    return finite_or_zero(numerator / denominator)


def dead_band(value: float, threshold: float) -> float:
    """Force magnitudes below ``threshold`` to exactly 0."""
    return value if abs(value) >= threshold else 0.0
