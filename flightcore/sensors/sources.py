"""
Sensor sources feeding a FlightComputer.

A source only converts device (or recorded) data into sample packets and
submits them; all estimation happens in the computer. Live and replay
sources therefore drive exactly the same pipeline.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Sequence

from flightcore.sensors.trace import TraceRecord
from flightcore.sensors.types import AltitudeSample, LocationSample, MotionSample

logger = logging.getLogger(__name__)

# Fractions of the gap to the next record at which extra baro samples are emitted
BARO_INTERPOLATION_STEPS = (0.33, 0.66)


class SensorSource(ABC):
    """Abstract base class for sample producers."""

    def __init__(self):
        self.computer = None

    def attach(self, computer) -> None:
        """
        Connect the source to a computer.

        Args:
            computer: Anything with ``submit_location``, ``submit_altitude``,
                ``submit_motion`` and ``report_unavailable``.
        """
        self.computer = computer

    def _require_computer(self):
        if self.computer is None:
            raise RuntimeError(f"{type(self).__name__} is not attached to a computer")
        return self.computer

    @abstractmethod
    def start(self) -> None:
        """Begin producing samples."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop producing samples."""
        pass


class LiveSensorSource(SensorSource):
    """
    Push adapter for platform sensor drivers.

    Driver callbacks call ``push_*`` from their own threads; samples pushed
    while the source is stopped are dropped.
    """

    def __init__(self):
        super().__init__()
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        self._require_computer()
        self._active = True

    def stop(self) -> None:
        self._active = False

    def push_location(self, sample: LocationSample) -> bool:
        if not self._active:
            return False
        self._require_computer().submit_location(sample)
        return True

    def push_altitude(self, sample: AltitudeSample) -> bool:
        if not self._active:
            return False
        self._require_computer().submit_altitude(sample)
        return True

    def push_motion(self, sample: MotionSample) -> bool:
        if not self._active:
            return False
        self._require_computer().submit_motion(sample)
        return True

    def report_unavailable(self, subsystem: str) -> None:
        self._require_computer().report_unavailable(subsystem)


class ReplaySource(SensorSource):
    """
    Fixed-tick playback of a recorded trace.

    Each record becomes one location sample, one motion sample and up to
    three barometric samples: the recorded altitude plus two points at one
    third and two thirds of the way to the next record.

    Args:
        records: Trace records in time order.
        tick: Wall-clock seconds per record when ``realtime`` is set.
        record_interval: Trace seconds between two records.
        start_time: Timestamp of the first record.
        realtime: Sleep ``tick`` between records instead of running flat out.

    Example:
        >>> from flightcore.computer import FlightComputer
        >>> source = ReplaySource([TraceRecord(49.2, -121.9, 800.0)])
        >>> computer = FlightComputer()
        >>> source.attach(computer)
        >>> source.play()
        1
        >>> computer.snapshot().baro_altitude
        800.0
    """

    def __init__(
        self,
        records: Sequence[TraceRecord],
        tick: float = 0.05,
        record_interval: float = 1.0,
        start_time: float = 0.0,
        realtime: bool = False,
    ):
        super().__init__()
        if tick <= 0:
            raise ValueError(f"tick must be positive, got {tick}")
        if record_interval <= 0:
            raise ValueError(f"record_interval must be positive, got {record_interval}")
        self.records: List[TraceRecord] = list(records)
        self.tick = tick
        self.record_interval = record_interval
        self.start_time = start_time
        self.realtime = realtime

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._position = 0

    @property
    def position(self) -> int:
        """Index of the next record to play."""
        return self._position

    @property
    def finished(self) -> bool:
        return self._position >= len(self.records)

    def samples_for(self, index: int) -> Iterator[object]:
        """Sample packets for one record, in submission order."""
        record = self.records[index]
        t = self.start_time + index * self.record_interval

        yield LocationSample(
            timestamp=t,
            latitude=record.latitude,
            longitude=record.longitude,
            altitude=record.gps_altitude,
            speed=record.speed,
            course=record.course,
            heading=record.heading,
        )
        yield MotionSample.from_vertical_acceleration(
            t,
            record.vertical_acceleration,
            pitch=record.gyro_y,
            roll=record.gyro_x,
            yaw=record.gyro_z,
        )
        yield AltitudeSample(t, record.baro_altitude)

        if index + 1 < len(self.records):
            diff = self.records[index + 1].baro_altitude - record.baro_altitude
            for step in BARO_INTERPOLATION_STEPS:
                yield AltitudeSample(
                    t + step * self.record_interval,
                    record.baro_altitude + diff * step,
                )

    def step(self) -> bool:
        """
        Submit the next record and apply it if the computer has no worker.

        Returns:
            False once the trace is exhausted.
        """
        computer = self._require_computer()
        if self.finished:
            return False

        for sample in self.samples_for(self._position):
            if isinstance(sample, LocationSample):
                computer.submit_location(sample)
            elif isinstance(sample, MotionSample):
                computer.submit_motion(sample)
            else:
                computer.submit_altitude(sample)
        self._position += 1

        if not getattr(computer, "running", False):
            computer.drain()
        return True

    def play(self) -> int:
        """
        Play the remaining records on the calling thread.

        Returns:
            Number of records played.
        """
        played = 0
        while not self._stop_event.is_set() and self.step():
            played += 1
            if self.realtime:
                time.sleep(self.tick)
        logger.debug("Replay played %d records (%d/%d)", played, self._position, len(self.records))
        return played

    def start(self) -> None:
        """Play on a background thread."""
        self._require_computer()
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.play, name="replay-source", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout)
        self._thread = None

    def rewind(self) -> None:
        self._position = 0
