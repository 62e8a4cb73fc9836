"""Fixed-capacity sample histories."""

from flightcore.buffers.history import (
    DEFAULT_CAPACITY,
    AltitudeHistory,
    BoundedHistory,
    FeatureHistory,
    FeatureVector,
)

__all__ = [
    "DEFAULT_CAPACITY",
    "AltitudeHistory",
    "BoundedHistory",
    "FeatureHistory",
    "FeatureVector",
]
