"""
Flight state machine.

    LANDED --arm()--> ARMED --launch()--> IN_FLIGHT --land()--> LANDED

Arming requires the readiness gate (altitude, GPS and motion all
available) unless ``force_ready`` is set for debug/test runs. ``land()``
is accepted from any state and is idempotent, so a disarm and a manual
stop share one path.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from flightcore.errors import IllegalTransition, SensorUnavailable

logger = logging.getLogger(__name__)

SUBSYSTEMS = ("altitude", "gps", "motion")


class FlightState(Enum):
    LANDED = "landed"
    ARMED = "armed"
    IN_FLIGHT = "in_flight"


@dataclass(frozen=True)
class SensorAvailability:
    """Per-subsystem availability flags."""

    altitude: bool = False
    gps: bool = False
    motion: bool = False

    @property
    def ready(self) -> bool:
        return self.altitude and self.gps and self.motion

    def missing(self) -> List[str]:
        """Names of unavailable subsystems, in gate order."""
        return [name for name in SUBSYSTEMS if not getattr(self, name)]


class FlightStateMachine:
    """
    Landed/Armed/InFlight gating of estimation logging.

    Args:
        clock: Wall-clock source for launch timestamps and flight time.
        force_ready: Bypass the readiness gate (debug/test mode).
    """

    def __init__(self, clock: Callable[[], float] = time.time, force_ready: bool = False):
        self.clock = clock
        self.force_ready = force_ready
        self._state = FlightState.LANDED
        self._launch_timestamp: Optional[float] = None

    @property
    def state(self) -> FlightState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._state is FlightState.IN_FLIGHT

    @property
    def launch_timestamp(self) -> Optional[float]:
        return self._launch_timestamp

    def is_ready(self, availability: SensorAvailability) -> bool:
        return self.force_ready or availability.ready

    def arm(self, availability: SensorAvailability) -> None:
        """
        LANDED -> ARMED.

        Raises:
            SensorUnavailable: Naming the first missing subsystem.
            IllegalTransition: If not currently LANDED.
        """
        if self._state is not FlightState.LANDED:
            raise IllegalTransition(f"Cannot arm from {self._state.value}")
        if not self.is_ready(availability):
            missing = availability.missing()
            raise SensorUnavailable(
                missing[0],
                f"Not ready for flight, unavailable: {', '.join(missing)}",
            )
        self._state = FlightState.ARMED
        logger.info("Armed for flight")

    def launch(self) -> float:
        """
        ARMED -> IN_FLIGHT, recording the launch timestamp.

        Raises:
            IllegalTransition: If not currently ARMED.
        """
        if self._state is not FlightState.ARMED:
            raise IllegalTransition(f"Cannot launch from {self._state.value}")
        self._launch_timestamp = self.clock()
        self._state = FlightState.IN_FLIGHT
        logger.info("Started a flight at %.3f", self._launch_timestamp)
        return self._launch_timestamp

    def land(self) -> None:
        """Any state -> LANDED; clears the launch timestamp."""
        if self._state is FlightState.IN_FLIGHT:
            logger.info("Ended a flight after %.1f s", self.flight_time())
        self._state = FlightState.LANDED
        self._launch_timestamp = None

    def flight_time(self) -> float:
        """Seconds since launch while in flight, else 0."""
        if self._state is not FlightState.IN_FLIGHT or self._launch_timestamp is None:
            return 0.0
        return max(self.clock() - self._launch_timestamp, 0.0)
