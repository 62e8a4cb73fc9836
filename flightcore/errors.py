"""
Error taxonomy for the flight computer.

Only the explicit flight-start commands raise towards their caller. The
continuous sensor-ingestion path represents degraded conditions as state
(availability flags, ``None`` readings, 0 or +inf sentinels) instead.

Shape mismatches between matrices are programming errors and raise
``ValueError`` directly; they are not part of this hierarchy.
"""


class FlightCoreError(Exception):
    """Base class for all flightcore errors."""


class StartFlightRejected(FlightCoreError):
    """Raised by the arm/start commands when the readiness gate fails.

    The caller may retry once the missing subsystem reports in.
    """


class SensorUnavailable(StartFlightRejected):
    """A required sensor subsystem has not reported (or has failed).

    Attributes:
        subsystem: Name of the missing subsystem ('altitude', 'gps' or 'motion').
    """

    def __init__(self, subsystem: str, message: str = ""):
        self.subsystem = subsystem
        super().__init__(message or f"Sensor subsystem unavailable: {subsystem}")


class IllegalTransition(FlightCoreError):
    """Requested flight-state transition is not part of Landed->Armed->InFlight->Landed."""


class ElevationLookupFailed(FlightCoreError):
    """Terrain elevation could not be retrieved (network error, timeout, bad payload)."""


class NumericDegenerate(FlightCoreError, ArithmeticError):
    """A numeric operation hit a degenerate boundary (singular matrix, zero divisor)."""


class SingularMatrixError(NumericDegenerate):
    """Matrix inversion was attempted on a singular matrix."""
