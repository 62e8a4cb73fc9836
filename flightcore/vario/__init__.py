"""Vertical-velocity estimation and thermal detection."""

from flightcore.vario.thermal import ThermalFix, ThermalTracker
from flightcore.vario.vertical_velocity import (
    VarioEstimate,
    VerticalVelocityDetector,
    build_state_transition,
)

__all__ = [
    "ThermalFix",
    "ThermalTracker",
    "VarioEstimate",
    "VerticalVelocityDetector",
    "build_state_transition",
]
