"""
Vertical acceleration from motion-provider output.

The motion provider separates total specific force into a gravity vector
and a user acceleration, both in the device frame and in units of g. The
component of user acceleration along gravity is the (downward) vertical
acceleration, independent of how the instrument is mounted:

    a_up = -(a_user · ĝ) · g0

where ĝ is the unit gravity direction and g0 the standard gravity.
"""

import numpy as np

from flightcore.sensors.types import MotionSample

STANDARD_GRAVITY = 9.80665  # [m/s²]


def vertical_acceleration(sample: MotionSample, g0: float = STANDARD_GRAVITY) -> float:
    """
    Upward acceleration [m/s²] of a motion sample.

    Returns 0.0 when the gravity vector is zero or non-finite (sensor still
    settling).

    Example:
        >>> s = MotionSample(0.0, 0.0, 0.0, 0.0, (0.0, 0.0, 0.2), (0.0, 0.0, -1.0))
        >>> round(vertical_acceleration(s), 5)
        1.96133
    """
    gravity = np.asarray(sample.gravity, dtype=float)
    user = np.asarray(sample.user_acceleration, dtype=float)

    norm = float(np.linalg.norm(gravity))
    if norm == 0.0 or not np.isfinite(norm) or not np.all(np.isfinite(user)):
        return 0.0

    g_hat = gravity / norm
    return float(-np.dot(user, g_hat) * g0)


def attitude_degrees(sample: MotionSample) -> tuple:
    """(pitch, roll, yaw) in degrees."""
    return tuple(float(v) for v in np.rad2deg([sample.pitch, sample.roll, sample.yaw]))
