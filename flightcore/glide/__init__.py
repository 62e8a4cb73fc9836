"""Glide performance, terrain elevation and wind."""

from flightcore.glide.elevation import (
    ElevationLookup,
    ElevationResult,
    OpenElevationClient,
    TerrainElevationTracker,
)
from flightcore.glide.glide import (
    WindEstimate,
    calculated_elevation,
    glide_range,
    glide_ratio,
    is_landing,
    relative_wind,
)

__all__ = [
    "ElevationLookup",
    "ElevationResult",
    "OpenElevationClient",
    "TerrainElevationTracker",
    "WindEstimate",
    "calculated_elevation",
    "glide_range",
    "glide_ratio",
    "is_landing",
    "relative_wind",
]
