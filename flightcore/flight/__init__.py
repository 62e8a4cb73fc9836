"""Flight state gating."""

from flightcore.flight.state_machine import (
    SUBSYSTEMS,
    FlightState,
    FlightStateMachine,
    SensorAvailability,
)

__all__ = [
    "SUBSYSTEMS",
    "FlightState",
    "FlightStateMachine",
    "SensorAvailability",
]
