"""
State estimation for the vertical-speed pipeline.

Available estimators:
    - Kalman Filter (immutable, generic over ``LinearOperand``)
"""

from flightcore.estimators.base import LinearOperand
from flightcore.estimators.kalman_filter import KalmanFilter

__all__ = [
    "LinearOperand",
    "KalmanFilter",
]
