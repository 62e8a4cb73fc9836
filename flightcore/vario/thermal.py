"""
Thermal fix tracking.

The most recent coordinate where a qualifying climb was seen is the
"nearest thermal". The fix is overwritten on every qualifying sample: no
averaging, no hysteresis, no debounce.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from flightcore.sensors.types import Coordinate
from flightcore.utils.geodesy import haversine_distance_m, initial_bearing_deg


@dataclass(frozen=True)
class ThermalFix:
    """Where and when a qualifying climb was detected."""

    coordinate: Coordinate
    vertical_velocity: float
    vertical_acceleration: float
    timestamp: Optional[float] = None


class ThermalTracker:
    """Holds the last thermal fix and answers heading/distance queries."""

    def __init__(self, min_velocity: float = 0.5, min_acceleration: float = 0.1):
        self.min_velocity = min_velocity
        self.min_acceleration = min_acceleration
        self._fix: Optional[ThermalFix] = None

    @property
    def fix(self) -> Optional[ThermalFix]:
        return self._fix

    def qualifies(self, vertical_velocity: float, vertical_acceleration: float) -> bool:
        return (
            vertical_velocity > self.min_velocity
            and vertical_acceleration > self.min_acceleration
        )

    def observe(
        self,
        vertical_velocity: float,
        vertical_acceleration: float,
        position: Optional[Coordinate],
        timestamp: Optional[float] = None,
    ) -> bool:
        """
        Overwrite the fix if this sample qualifies.

        Returns:
            True if the fix was replaced.
        """
        if position is None or not self.qualifies(vertical_velocity, vertical_acceleration):
            return False
        self._fix = ThermalFix(position, vertical_velocity, vertical_acceleration, timestamp)
        return True

    def heading_and_distance(self, position: Coordinate) -> Tuple[Optional[float], Optional[float]]:
        """
        Bearing [deg] and distance [m] from ``position`` to the thermal fix.

        Returns (None, None) before any thermal has been found.
        """
        if self._fix is None:
            return None, None
        target = self._fix.coordinate
        heading = initial_bearing_deg(
            position.latitude, position.longitude, target.latitude, target.longitude
        )
        distance = haversine_distance_m(
            position.latitude, position.longitude, target.latitude, target.longitude
        )
        return heading, distance

    def clear(self) -> None:
        self._fix = None
