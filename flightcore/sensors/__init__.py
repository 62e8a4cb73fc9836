"""Sensor sample types, motion helpers, traces and sources."""

from flightcore.sensors.motion import STANDARD_GRAVITY, attitude_degrees, vertical_acceleration
from flightcore.sensors.trace import TraceRecord, load_trace, save_trace
from flightcore.sensors.types import (
    UNKNOWN_SPEED,
    AltitudeSample,
    Coordinate,
    FeatureFrame,
    LocationSample,
    MotionSample,
)

__all__ = [
    # Types
    "UNKNOWN_SPEED",
    "Coordinate",
    "LocationSample",
    "AltitudeSample",
    "MotionSample",
    "FeatureFrame",
    # Motion
    "STANDARD_GRAVITY",
    "vertical_acceleration",
    "attitude_degrees",
    # Traces
    "TraceRecord",
    "load_trace",
    "save_trace",
]
