"""
Vertical-velocity and thermal detection.

Runs once per barometric sample (nominally 6 Hz):

    1. Append the rounded altitude to the altitude history.
    2. Baseline = mean consecutive altitude delta over the history.
    3. Append [altitude, last velocity, vertical acceleration] to the
       feature history.
    4. Re-run the Kalman predict/update cycle over the feature history,
       oldest to newest. The posterior velocity is x[1].
    5. Gain-correct the baseline against the filter's predicted altitude.
    6. Dead-band the velocity.
    7. Overwrite the thermal fix if climb and acceleration both qualify.

State model (Δt = one tick):
    x = [altitude, vertical velocity, vertical acceleration]^T
    F = [[1, Δt, ½Δt²], [0, 1, Δt], [0, 0, 1]]
    H = I,  Q = q·I,  R = r·I,  B = 0,  u = 0

The measurement feeds the previous velocity estimate back in as its second
component, so z is not an independent sensor reading.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from flightcore.buffers.history import AltitudeHistory, FeatureHistory, FeatureVector
from flightcore.config import EstimatorConfig
from flightcore.errors import SingularMatrixError
from flightcore.estimators.kalman_filter import KalmanFilter
from flightcore.linalg.matrix import Matrix
from flightcore.sensors.types import Coordinate
from flightcore.utils.numeric import dead_band, finite_or_zero
from flightcore.vario.thermal import ThermalFix, ThermalTracker

logger = logging.getLogger(__name__)

STATE_DIM = 3


@dataclass(frozen=True)
class VarioEstimate:
    """
    Result of one detector tick.

    Attributes:
        vertical_velocity: Published climb rate after the dead-band [m/s].
        vertical_acceleration: Sanitized vertical acceleration input [m/s²].
        filtered_velocity: Raw posterior velocity x[1] before the dead-band.
        predicted_altitude: Posterior altitude x[0] of the filter [m].
        baseline: Mean consecutive altitude delta.
        corrected_baseline: Baseline after gain correction.
        gain_factor: Factor applied by the gain correction (1.0, lag or lead factor).
        thermal_detected: True if this tick overwrote the thermal fix.
        samples: Number of altitude samples in the window.
    """

    vertical_velocity: float
    vertical_acceleration: float
    filtered_velocity: float
    predicted_altitude: float
    baseline: float
    corrected_baseline: float
    gain_factor: float
    thermal_detected: bool
    samples: int


def build_state_transition(dt: float) -> Matrix:
    """Constant-acceleration kinematics, F(Δt)."""
    return Matrix([
        [1.0, dt, 0.5 * dt * dt],
        [0.0, 1.0, dt],
        [0.0, 0.0, 1.0],
    ])


class VerticalVelocityDetector:
    """
    Stateful detector driving the histories and the Kalman estimator.

    Not thread-safe: the owner must serialize calls (the flight computer
    applies all sensor events on a single worker).

    Example:
        >>> detector = VerticalVelocityDetector()
        >>> detector.process(100.0, 0.0).vertical_velocity
        0.0
    """

    def __init__(self, config: Optional[EstimatorConfig] = None):
        self.config = config or EstimatorConfig()
        cfg = self.config

        self.altitude_history = AltitudeHistory(cfg.history_capacity)
        self.feature_history = FeatureHistory(cfg.history_capacity)
        self.thermals = ThermalTracker(cfg.thermal_min_velocity, cfg.thermal_min_acceleration)

        self.F = build_state_transition(cfg.time_step)
        self.H = Matrix.identity(STATE_DIM)
        self.B = Matrix.zeros(STATE_DIM, STATE_DIM)
        self.u = Matrix.zeros(STATE_DIM, 1)
        self.Q = Matrix.identity(STATE_DIM) * cfg.process_noise
        self.R = Matrix.identity(STATE_DIM) * cfg.observation_noise
        self.P0 = Matrix.diagonal(cfg.initial_covariance)

        self._last_velocity = 0.0
        self._last_estimate: Optional[VarioEstimate] = None

    @property
    def last_velocity(self) -> float:
        return self._last_velocity

    @property
    def last_estimate(self) -> Optional[VarioEstimate]:
        return self._last_estimate

    @property
    def thermal_fix(self) -> Optional[ThermalFix]:
        return self.thermals.fix

    def reset(self) -> None:
        self.altitude_history.clear()
        self.feature_history.clear()
        self.thermals.clear()
        self._last_velocity = 0.0
        self._last_estimate = None

    def process(
        self,
        altitude: float,
        vertical_acceleration: float,
        position: Optional[Coordinate] = None,
        timestamp: Optional[float] = None,
    ) -> VarioEstimate:
        """
        Run one barometric tick.

        Args:
            altitude: Raw barometric altitude [m].
            vertical_acceleration: Upward acceleration [m/s²].
            position: Current position, used for the thermal fix.
            timestamp: Sample time, stored with the thermal fix.

        Returns:
            VarioEstimate for this tick. Never raises on degenerate data.
        """
        cfg = self.config
        altitude = finite_or_zero(altitude)
        vertical_acceleration = finite_or_zero(vertical_acceleration)

        # 1-2. Altitude window and baseline
        self.altitude_history.append(altitude)
        baseline = self.altitude_history.mean_delta()

        # 3. Feature window
        self.feature_history.append(
            FeatureVector(altitude, self._last_velocity, vertical_acceleration)
        )

        # 4. Filter pass over the feature window
        filtered_velocity = 0.0
        predicted_altitude = altitude
        filter_ok = True
        try:
            posterior = self.run_filter()
            predicted_altitude = finite_or_zero(posterior.state_estimate[0, 0])
            filtered_velocity = finite_or_zero(posterior.state_estimate[1, 0])
        except SingularMatrixError as e:
            logger.warning("Kalman update degenerate, falling back to baseline: %s", e)
            filter_ok = False

        # 5. Gain correction of the baseline
        gain_factor = self._gain_factor(predicted_altitude, altitude, vertical_acceleration)
        corrected_baseline = baseline * gain_factor

        # 6. Dead-band; fewer than two samples cannot define a velocity
        if len(self.altitude_history) < 2:
            velocity = 0.0
        elif filter_ok:
            velocity = dead_band(filtered_velocity, cfg.dead_band)
        else:
            velocity = dead_band(corrected_baseline, cfg.dead_band)

        # 7. Thermal fix
        thermal = self.thermals.observe(velocity, vertical_acceleration, position, timestamp)
        if thermal:
            logger.debug(
                "Thermal fix at %.6f, %.6f (v=%.2f m/s, a=%.2f m/s^2)",
                position.latitude, position.longitude, velocity, vertical_acceleration,
            )

        self._last_velocity = velocity
        estimate = VarioEstimate(
            vertical_velocity=velocity,
            vertical_acceleration=vertical_acceleration,
            filtered_velocity=filtered_velocity,
            predicted_altitude=predicted_altitude,
            baseline=baseline,
            corrected_baseline=corrected_baseline,
            gain_factor=gain_factor,
            thermal_detected=thermal,
            samples=len(self.altitude_history),
        )
        self._last_estimate = estimate
        return estimate

    def run_filter(self) -> KalmanFilter[Matrix]:
        """
        Replay predict+update over the retained feature window.

        The prior is seeded with the oldest retained feature and the
        configured initial covariance, so the result depends only on the
        window contents.

        Raises:
            IndexError: If the feature history is empty.
            SingularMatrixError: If an innovation covariance is singular.
        """
        oldest = self.feature_history.oldest()
        kf = KalmanFilter(Matrix.vector(oldest), self.P0)
        for feature in self.feature_history:
            z = Matrix.vector(feature)
            kf = kf.predict(self.F, self.B, self.u, self.Q).update(z, self.H, self.R)
        return kf

    def _gain_factor(
        self, predicted_altitude: float, raw_altitude: float, vertical_acceleration: float
    ) -> float:
        cfg = self.config
        threshold = cfg.gain_lag_ratio * raw_altitude
        if not math.isfinite(predicted_altitude):
            return 1.0
        if predicted_altitude < threshold and vertical_acceleration > cfg.gain_lag_min_acceleration:
            return cfg.gain_lag_factor
        if predicted_altitude > threshold:
            return cfg.gain_lead_factor
        return 1.0
