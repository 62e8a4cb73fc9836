"""
Recorded flight traces.

A trace is a JSON array of logger records, one per second of flight:

    [
      {"Milliseconds": 0, "Seconds": 0, "Latitude": 49.2283, "Longitude": -121.9019,
       "Baro_Alt": 812.4, "GPS_Alt": 815.0, "Speed": 9.1,
       "AcclX": 0.1, "AcclY": -0.2, "AcclZ": -98.0,
       "GyroX": 0.01, "GyroY": 0.05, "GyroZ": 1.2,
       "Course": 271.0, "Heading": 268.0},
      ...
    ]

Accelerations are in the logger's raw units (tenths of m/s², positive
down); gyro channels carry the fused attitude in radians.
"""

import json
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

# Record field -> JSON key
TRACE_KEYS = {
    "milliseconds": "Milliseconds",
    "seconds": "Seconds",
    "latitude": "Latitude",
    "longitude": "Longitude",
    "baro_altitude": "Baro_Alt",
    "gps_altitude": "GPS_Alt",
    "speed": "Speed",
    "accel_x": "AcclX",
    "accel_y": "AcclY",
    "accel_z": "AcclZ",
    "gyro_x": "GyroX",
    "gyro_y": "GyroY",
    "gyro_z": "GyroZ",
    "course": "Course",
    "heading": "Heading",
}

REQUIRED_KEYS = ("Latitude", "Longitude", "Baro_Alt")


@dataclass(frozen=True)
class TraceRecord:
    """One logger record (missing channels default to 0)."""

    latitude: float
    longitude: float
    baro_altitude: float
    gps_altitude: float = 0.0
    speed: float = 0.0
    accel_x: float = 0.0
    accel_y: float = 0.0
    accel_z: float = 0.0
    gyro_x: float = 0.0
    gyro_y: float = 0.0
    gyro_z: float = 0.0
    course: float = 0.0
    heading: float = 0.0
    seconds: Optional[int] = None
    milliseconds: Optional[int] = None

    @property
    def vertical_acceleration(self) -> float:
        """Upward acceleration [m/s²] from the raw Z channel."""
        return self.accel_z / 10.0 * -1.0

    def elapsed(self) -> Optional[float]:
        """Logger time [s], if the record carries one."""
        if self.seconds is None:
            return None
        return self.seconds + (self.milliseconds or 0) / 1000.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TraceRecord":
        """
        Build a record from one JSON object.

        Raises:
            ValueError: If a required key is missing or a value is not numeric.
        """
        missing = [key for key in REQUIRED_KEYS if data.get(key) is None]
        if missing:
            raise ValueError(f"Trace record missing required keys: {missing}")

        values = {}
        for field, key in TRACE_KEYS.items():
            value = data.get(key)
            if value is None:
                continue
            if field in ("seconds", "milliseconds"):
                values[field] = int(value)
            else:
                value = float(value)
                if not math.isfinite(value):
                    raise ValueError(f"Trace value '{key}' is not finite: {value}")
                values[field] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            TRACE_KEYS[field]: value
            for field, value in asdict(self).items()
            if value is not None
        }


def load_trace(path: Union[str, Path]) -> List[TraceRecord]:
    """
    Load a recorded trace.

    Args:
        path: JSON file holding an array of logger records.

    Returns:
        Records in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a JSON array of valid records.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Trace file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Trace must be a JSON array, got {type(data).__name__}")

    records = []
    for i, item in enumerate(data):
        try:
            records.append(TraceRecord.from_dict(item))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid trace record #{i}: {e}") from e
    return records


def save_trace(records: Sequence[TraceRecord], path: Union[str, Path]) -> Path:
    """Write records as a JSON array; creates parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in records], f, indent=2)
    return path
