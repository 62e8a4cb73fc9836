"""
Angle wrapping utilities.

Headings in the cockpit are compass degrees in [0, 360).
"""

import math


def wrap_degrees(angle_deg: float) -> float:
    """
    Wrap a heading to the compass range [0, 360).

    Example:
        >>> wrap_degrees(-90.0)
        270.0
        >>> wrap_degrees(725.0)
        5.0
    """
    wrapped = math.fmod(angle_deg, 360.0)
    if wrapped < 0:
        wrapped += 360.0
    # Tiny negative inputs round up to exactly 360
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped
