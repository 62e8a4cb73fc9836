"""Sensor sample types consumed by the flight computer.

Each sensor adapter (live or replay) produces one of these immutable
packets. They are validated on construction so that malformed driver data
fails at the adapter boundary, not inside the estimator.

Time Base Convention:
    Timestamps are float seconds on the host's monotonic or wall clock;
    the computer only compares them against the same clock it was given.

Units:
    - Coordinates: decimal degrees (WGS-84)
    - Altitudes: metres
    - Speed: m/s (-1 means unknown, as reported by location providers)
    - Course, heading: degrees clockwise from north
    - Attitude: radians
    - Accelerations in MotionSample: g
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

# Location providers report -1 when the speed could not be determined
UNKNOWN_SPEED = -1.0


@dataclass(frozen=True)
class Coordinate:
    """WGS-84 position in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude must be in [-90, 90], got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude must be in [-180, 180], got {self.longitude}")

    @property
    def is_placeholder(self) -> bool:
        """True for the (0, 0) position some receivers emit before a fix."""
        return self.latitude == 0.0 and self.longitude == 0.0


@dataclass(frozen=True)
class LocationSample:
    """GPS/location provider packet.

    Attributes:
        timestamp: Sample time [s].
        latitude, longitude: Position [deg].
        altitude: GPS altitude [m].
        speed: Groundspeed [m/s], or -1 if unknown.
        course: Ground track [deg].
        heading: Compass (magnetic) heading [deg], if the provider has one.
    """

    timestamp: float
    latitude: float
    longitude: float
    altitude: float
    speed: float = UNKNOWN_SPEED
    course: float = 0.0
    heading: Optional[float] = None

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, (float, int)):
            raise TypeError(f"Timestamp must be numeric, got {type(self.timestamp)}")
        # Coordinate validates the ranges
        Coordinate(self.latitude, self.longitude)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @property
    def speed_known(self) -> bool:
        return self.speed != UNKNOWN_SPEED and np.isfinite(self.speed)


@dataclass(frozen=True)
class AltitudeSample:
    """Barometric altimeter packet (absolute altitude [m])."""

    timestamp: float
    altitude: float

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, (float, int)):
            raise TypeError(f"Timestamp must be numeric, got {type(self.timestamp)}")
        if not isinstance(self.altitude, (float, int)):
            raise TypeError(f"Altitude must be numeric, got {type(self.altitude)}")


@dataclass(frozen=True)
class MotionSample:
    """Inertial/motion provider packet.

    Attributes:
        timestamp: Sample time [s].
        pitch, roll, yaw: Attitude [rad].
        user_acceleration: Acceleration without gravity, device frame [g], shape (3,).
        gravity: Gravity direction in the device frame [g], shape (3,).
    """

    timestamp: float
    pitch: float
    roll: float
    yaw: float
    user_acceleration: Tuple[float, float, float]
    gravity: Tuple[float, float, float]

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, (float, int)):
            raise TypeError(f"Timestamp must be numeric, got {type(self.timestamp)}")
        for name in ("user_acceleration", "gravity"):
            value = np.asarray(getattr(self, name), dtype=float)
            if value.shape != (3,):
                raise ValueError(f"{name} must have shape (3,), got {value.shape}")
            object.__setattr__(self, name, tuple(float(v) for v in value))

    @classmethod
    def from_vertical_acceleration(
        cls,
        timestamp: float,
        vertical_acceleration: float,
        pitch: float = 0.0,
        roll: float = 0.0,
        yaw: float = 0.0,
        g: float = 9.80665,
    ) -> "MotionSample":
        """Build a level-attitude sample carrying only an upward acceleration [m/s²].

        Used by sources that record vertical acceleration directly.
        """
        return cls(
            timestamp=timestamp,
            pitch=pitch,
            roll=roll,
            yaw=yaw,
            user_acceleration=(0.0, 0.0, vertical_acceleration / g),
            gravity=(0.0, 0.0, -1.0),
        )


@dataclass(frozen=True)
class FeatureFrame:
    """Per-sample record handed to downstream recorders (IGC codec, heat-map).

    This tuple is the only contract between the estimator and those
    collaborators.
    """

    timestamp: float
    latitude: Optional[float]
    longitude: Optional[float]
    baro_altitude: float
    gps_altitude: Optional[float]
    vertical_velocity: float
