"""
Utility functions shared across the estimator.

This module provides numeric sanitizing, angle wrapping and great-circle
helpers.
"""

from .angles import wrap_degrees
from .geodesy import haversine_distance_m, initial_bearing_deg
from .numeric import dead_band, finite_or_zero, round_to_places, safe_divide

__all__ = [
    'wrap_degrees',
    'haversine_distance_m',
    'initial_bearing_deg',
    'dead_band',
    'finite_or_zero',
    'round_to_places',
    'safe_divide',
]
