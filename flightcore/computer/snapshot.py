"""
Read-only snapshots for polling consumers.

The flight computer rebuilds a ``FlightSnapshot`` after every applied
event and swaps a single reference, so readers never see a half-updated
state and never take the computer's lock. Readings that have never been
received are ``None``; displays render those as "unavailable".
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from flightcore.flight.state_machine import FlightState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlightSnapshot:
    """Everything the instrument panel polls, at one instant."""

    # Attitude [deg]
    pitch: Optional[float] = None
    roll: Optional[float] = None
    yaw: Optional[float] = None

    # Vario
    vertical_velocity: Optional[float] = None
    vertical_acceleration: Optional[float] = None

    # Glide
    glide_ratio: Optional[float] = None
    glide_range: Optional[float] = None

    # GPS
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    gps_altitude: Optional[float] = None
    gps_speed: Optional[float] = None
    gps_course: Optional[float] = None
    magnetic_heading: Optional[float] = None

    # Altitude / elevation [m]
    baro_altitude: Optional[float] = None
    terrain_elevation: Optional[float] = None
    calculated_elevation: Optional[float] = None

    # Thermal navigation
    thermal_heading: Optional[float] = None
    thermal_distance: Optional[float] = None

    # Wind
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None

    # Flight state
    flight_state: FlightState = FlightState.LANDED
    launch_timestamp: Optional[float] = None
    flight_time: float = 0.0
    in_flight: bool = False
    ready_to_fly: bool = False
    altitude_available: bool = False
    gps_available: bool = False
    motion_available: bool = False


class SnapshotPublisher(threading.Thread):
    """
    Fixed-period reader handing the latest snapshot to a consumer.

    The publisher never waits for sensor data and never touches estimator
    state; a slow consumer only delays the next tick.

    Args:
        source: Returns the latest snapshot (e.g. ``FlightComputer.snapshot``).
        consumer: Receives each snapshot.
        period: Seconds between ticks.
    """

    def __init__(
        self,
        source: Callable[[], FlightSnapshot],
        consumer: Callable[[FlightSnapshot], None],
        period: float = 0.1,
    ):
        super().__init__(name="snapshot-publisher", daemon=True)
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.source = source
        self.consumer = consumer
        self.period = period
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.wait(self.period):
            try:
                self.publish_once()
            except Exception:
                logger.exception("Snapshot consumer failed")

    def publish_once(self) -> FlightSnapshot:
        snapshot = self.source()
        self.consumer(snapshot)
        return snapshot

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)
