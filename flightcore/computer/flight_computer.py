"""
Flight computer: serialized sensor ingestion around the estimator.

Sensor adapters call the ``submit_*`` methods from their own threads at
their own rates (motion at tens to hundreds of Hz, baro at ~6 Hz, GPS at a
variable rate). Those calls only enqueue; one worker thread applies the
events in arrival order, so the histories, the last estimate and the
flight state have a single writer. Control commands take the same lock as
the worker, which lets ``start_flying`` fail synchronously to its caller.

Without a running worker, ``drain()`` applies pending events on the
calling thread; tests and the replay source use this for deterministic
playback.

Per barometric tick:
    1. Run the vertical-velocity / thermal detector.
    2. Derive glide ratio, calculated elevation and glide range.
    3. Request a terrain refresh if the rate limit allows.
    4. Auto-detect a landing.
    5. Emit a FeatureFrame to the recorder sink while in flight.
    6. Publish a new snapshot.
"""

import logging
import math
import queue
import threading
import time
from dataclasses import replace
from typing import Callable, Optional, Union

from flightcore.computer.snapshot import FlightSnapshot, SnapshotPublisher
from flightcore.config import FlightComputerConfig
from flightcore.errors import SensorUnavailable
from flightcore.flight.state_machine import (
    SUBSYSTEMS,
    FlightState,
    FlightStateMachine,
    SensorAvailability,
)
from flightcore.glide.elevation import ElevationLookup, ElevationResult, TerrainElevationTracker
from flightcore.glide.glide import (
    calculated_elevation,
    glide_range,
    glide_ratio,
    is_landing,
    relative_wind,
)
from flightcore.sensors.motion import attitude_degrees, vertical_acceleration
from flightcore.sensors.types import (
    AltitudeSample,
    Coordinate,
    FeatureFrame,
    LocationSample,
    MotionSample,
)
from flightcore.vario.vertical_velocity import VarioEstimate, VerticalVelocityDetector

logger = logging.getLogger(__name__)

FrameSink = Callable[[FeatureFrame], None]


class _SubsystemLost:
    __slots__ = ("subsystem",)

    def __init__(self, subsystem: str):
        self.subsystem = subsystem


_STOP = object()

Event = Union[LocationSample, AltitudeSample, MotionSample, ElevationResult, _SubsystemLost]


class FlightComputer:
    """
    Owner of all estimator state.

    Args:
        config: Flight computer configuration.
        elevation_lookup: Terrain service; without one, terrain stays unknown.
        frame_sink: Receives a FeatureFrame per baro tick while in flight.
        clock: Wall clock for timestamps and flight time.
        monotonic: Clock for the elevation rate limit.
        elevation_executor: Executor for terrain requests (default: one thread).

    Example:
        >>> computer = FlightComputer()
        >>> computer.submit_altitude(AltitudeSample(0.0, 812.0))
        >>> computer.drain()
        1
        >>> computer.snapshot().baro_altitude
        812.0
    """

    def __init__(
        self,
        config: Optional[FlightComputerConfig] = None,
        elevation_lookup: Optional[ElevationLookup] = None,
        frame_sink: Optional[FrameSink] = None,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
        elevation_executor=None,
    ):
        self.config = config or FlightComputerConfig()
        self.clock = clock
        self.frame_sink = frame_sink

        self.detector = VerticalVelocityDetector(self.config.estimator)
        self.flight = FlightStateMachine(clock=clock, force_ready=self.config.force_ready)
        self.elevation: Optional[TerrainElevationTracker] = None
        if elevation_lookup is not None:
            self.elevation = TerrainElevationTracker(
                elevation_lookup,
                min_interval=self.config.elevation_interval,
                clock=monotonic,
                executor=elevation_executor,
                on_result=self.submit,
            )

        self._events: "queue.Queue[object]" = queue.Queue()
        self._lock = threading.RLock()
        self._worker: Optional[threading.Thread] = None

        # Availability
        self._available = {name: False for name in SUBSYSTEMS}

        # Latest readings (None until received)
        self._position: Optional[Coordinate] = None
        self._gps_altitude: Optional[float] = None
        self._gps_speed: Optional[float] = None
        self._gps_course: Optional[float] = None
        self._magnetic_heading: Optional[float] = None
        self._attitude: Optional[tuple] = None
        self._baro_altitude: Optional[float] = None
        self._estimate: Optional[VarioEstimate] = None
        self._glide_ratio: Optional[float] = None
        self._glide_range: Optional[float] = None
        self._calculated_elevation: Optional[float] = None
        self._thermal_heading: Optional[float] = None
        self._thermal_distance: Optional[float] = None
        self._wind = None

        # Vertical acceleration samples accumulated since the last baro tick
        self._accel_sum = 0.0
        self._accel_count = 0
        self._vertical_acceleration: Optional[float] = None

        self._snapshot = FlightSnapshot()

    # ------------------------------------------------------------------
    # Ingestion (any thread)
    # ------------------------------------------------------------------

    def submit(self, event: Event) -> None:
        """Enqueue a sensor event; never blocks, never raises."""
        self._events.put(event)

    def submit_location(self, sample: LocationSample) -> None:
        self.submit(sample)

    def submit_altitude(self, sample: AltitudeSample) -> None:
        self.submit(sample)

    def submit_motion(self, sample: MotionSample) -> None:
        self.submit(sample)

    def report_unavailable(self, subsystem: str) -> None:
        """Mark a subsystem as lost (driver error, permission revoked)."""
        if subsystem not in SUBSYSTEMS:
            raise ValueError(f"Unknown subsystem '{subsystem}', expected one of {SUBSYSTEMS}")
        self.submit(_SubsystemLost(subsystem))

    # ------------------------------------------------------------------
    # Worker lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the worker thread that applies queued events."""
        if self._worker is not None and self._worker.is_alive():
            return
        if self.elevation is not None:
            self.elevation.reopen()
        self._worker = threading.Thread(target=self._run, name="flight-computer", daemon=True)
        self._worker.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the worker after the events already queued, and release the terrain executor."""
        if self._worker is not None and self._worker.is_alive():
            self._events.put(_STOP)
            self._worker.join(timeout)
        self._worker = None
        if self.elevation is not None:
            self.elevation.shutdown()

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def drain(self) -> int:
        """
        Apply all pending events on the calling thread.

        Returns:
            Number of events applied.

        Raises:
            RuntimeError: If the worker thread is running.
        """
        if self.running:
            raise RuntimeError("drain() cannot be used while the worker thread is running")
        applied = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return applied
            if event is _STOP:
                continue
            self._handle(event)
            applied += 1

    def _run(self) -> None:
        while True:
            event = self._events.get()
            if event is _STOP:
                return
            try:
                self._handle(event)
            except Exception:
                logger.exception("Failed to apply %r", event)

    # ------------------------------------------------------------------
    # Control (caller's thread, fail-fast)
    # ------------------------------------------------------------------

    @property
    def availability(self) -> SensorAvailability:
        return SensorAvailability(**self._available)

    @property
    def ready_to_fly(self) -> bool:
        return self.flight.is_ready(self.availability)

    @property
    def in_flight(self) -> bool:
        return self.flight.in_flight

    def arm(self) -> None:
        """
        LANDED -> ARMED; launch is then detected from groundspeed.

        Raises:
            SensorUnavailable: If the readiness gate fails.
        """
        with self._lock:
            self.flight.arm(self.availability)
            self._publish()

    def start_flying(self) -> None:
        """
        Start a flight now (arming first if needed).

        Raises:
            SensorUnavailable: If the readiness gate fails; the flight stays
                LANDED and no launch timestamp is recorded.
        """
        with self._lock:
            if self.flight.state is FlightState.LANDED:
                try:
                    self.flight.arm(self.availability)
                except SensorUnavailable as e:
                    logger.info("Failed to start a flight, %s unavailable", e.subsystem)
                    raise
            if self.flight.state is FlightState.ARMED:
                self.flight.launch()
            self._publish()

    def stop_flying(self) -> None:
        """End the flight (idempotent)."""
        with self._lock:
            self.flight.land()
            self._publish()

    # ------------------------------------------------------------------
    # Snapshot (any thread, lock-free)
    # ------------------------------------------------------------------

    def snapshot(self) -> FlightSnapshot:
        """Latest published snapshot with a current flight time."""
        snap = self._snapshot
        return replace(snap, flight_time=self.flight.flight_time() if snap.in_flight else 0.0)

    def publisher(self, consumer: Callable[[FlightSnapshot], None]) -> SnapshotPublisher:
        """Snapshot publisher at the configured period (not started)."""
        return SnapshotPublisher(self.snapshot, consumer, self.config.publish_period)

    # ------------------------------------------------------------------
    # Event handling (single writer)
    # ------------------------------------------------------------------

    def _handle(self, event: object) -> None:
        with self._lock:
            if isinstance(event, AltitudeSample):
                self._apply_altitude(event)
            elif isinstance(event, MotionSample):
                self._apply_motion(event)
            elif isinstance(event, LocationSample):
                self._apply_location(event)
            elif isinstance(event, ElevationResult):
                self._apply_elevation(event)
            elif isinstance(event, _SubsystemLost):
                self._available[event.subsystem] = False
                logger.warning("Sensor subsystem lost: %s", event.subsystem)
            else:
                logger.debug("Ignoring unknown event %r", event)
                return
            self._publish()

    def _apply_motion(self, sample: MotionSample) -> None:
        self._available["motion"] = True
        self._attitude = attitude_degrees(sample)
        accel = vertical_acceleration(sample)
        self._accel_sum += accel
        self._accel_count += 1
        self._vertical_acceleration = self._accel_sum / self._accel_count

    def _apply_location(self, sample: LocationSample) -> None:
        self._available["gps"] = True
        self._position = sample.coordinate
        self._gps_altitude = sample.altitude
        self._gps_course = sample.course
        if sample.heading is not None:
            self._magnetic_heading = sample.heading
        if sample.speed_known:
            self._gps_speed = sample.speed

        self._thermal_heading, self._thermal_distance = (
            self.detector.thermals.heading_and_distance(self._position)
        )

        if self._gps_speed is not None and self._magnetic_heading is not None:
            self._wind = relative_wind(
                self._gps_speed, sample.course, self._magnetic_heading, self.config.trim_speed
            )

        if (
            self.flight.state is FlightState.ARMED
            and self._gps_speed is not None
            and self._gps_speed > self.config.launch_min_groundspeed
        ):
            self.flight.launch()

    def _apply_altitude(self, sample: AltitudeSample) -> None:
        altitude = float(sample.altitude)
        if not math.isfinite(altitude):
            logger.debug("Skipping non-finite baro altitude at %.3f", sample.timestamp)
            return

        self._available["altitude"] = True
        self._baro_altitude = altitude

        accel = self._vertical_acceleration if self._vertical_acceleration is not None else 0.0
        self._accel_sum = 0.0
        self._accel_count = 0

        estimate = self.detector.process(altitude, accel, self._position, sample.timestamp)
        self._estimate = estimate
        if estimate.thermal_detected and self._position is not None:
            self._thermal_heading, self._thermal_distance = (
                self.detector.thermals.heading_and_distance(self._position)
            )

        groundspeed = self._gps_speed if self._gps_speed is not None else 0.0
        self._glide_ratio = glide_ratio(
            groundspeed, estimate.vertical_velocity, self.config.min_glide_groundspeed
        )

        if self.elevation is not None:
            self.elevation.maybe_request(self._position)
        self._update_elevation()

        if self.flight.in_flight:
            self._emit_frame(sample.timestamp, estimate)

    def _apply_elevation(self, result: ElevationResult) -> None:
        if self.elevation is not None and self.elevation.apply(result):
            logger.debug("Terrain elevation updated to %.1f m", result.elevation)
        self._update_elevation()

    def _update_elevation(self) -> None:
        terrain = self.elevation.terrain_elevation if self.elevation is not None else None
        if terrain is None or self._baro_altitude is None:
            return

        self._calculated_elevation = calculated_elevation(self._baro_altitude, terrain)
        self._glide_range = glide_range(self._calculated_elevation, self._glide_ratio or 0.0)

        if (
            self.flight.in_flight
            and self._gps_speed is not None
            and is_landing(
                terrain,
                self._gps_speed,
                self.config.landing_max_terrain,
                self.config.landing_max_groundspeed,
            )
        ):
            logger.info("Landing detected (terrain %.1f m, groundspeed %.1f m/s)", terrain, self._gps_speed)
            self.flight.land()

    def _emit_frame(self, timestamp: float, estimate: VarioEstimate) -> None:
        if self.frame_sink is None:
            return
        frame = FeatureFrame(
            timestamp=timestamp,
            latitude=self._position.latitude if self._position else None,
            longitude=self._position.longitude if self._position else None,
            baro_altitude=self._baro_altitude,
            gps_altitude=self._gps_altitude,
            vertical_velocity=estimate.vertical_velocity,
        )
        try:
            self.frame_sink(frame)
        except Exception:
            # The recorder is an external collaborator; ingestion must go on
            logger.exception("Frame sink failed at %.3f", timestamp)

    def _publish(self) -> None:
        estimate = self._estimate
        pitch, roll, yaw = self._attitude if self._attitude else (None, None, None)
        self._snapshot = FlightSnapshot(
            pitch=pitch,
            roll=roll,
            yaw=yaw,
            vertical_velocity=estimate.vertical_velocity if estimate else None,
            vertical_acceleration=estimate.vertical_acceleration if estimate else self._vertical_acceleration,
            glide_ratio=self._glide_ratio,
            glide_range=self._glide_range,
            latitude=self._position.latitude if self._position else None,
            longitude=self._position.longitude if self._position else None,
            gps_altitude=self._gps_altitude,
            gps_speed=self._gps_speed,
            gps_course=self._gps_course,
            magnetic_heading=self._magnetic_heading,
            baro_altitude=self._baro_altitude,
            terrain_elevation=self.elevation.terrain_elevation if self.elevation else None,
            calculated_elevation=self._calculated_elevation,
            thermal_heading=self._thermal_heading,
            thermal_distance=self._thermal_distance,
            wind_speed=self._wind.speed if self._wind else None,
            wind_direction=self._wind.direction if self._wind else None,
            flight_state=self.flight.state,
            launch_timestamp=self.flight.launch_timestamp,
            flight_time=self.flight.flight_time(),
            in_flight=self.flight.in_flight,
            ready_to_fly=self.ready_to_fly,
            altitude_available=self._available["altitude"],
            gps_available=self._available["gps"],
            motion_available=self._available["motion"],
        )
