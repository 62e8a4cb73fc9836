"""
Immutable linear Kalman filter.

Implements the classic predict/update pair:
    - Predict:  x' = F x + B u
                P' = F P F^T + Q
    - Update:   y  = z - H x                (innovation)
                S  = H P H^T + R            (innovation covariance)
                K  = P H^T S^{-1}           (Kalman gain)
                x' = x + K y
                P' = (I - K H) P

Every call returns a new ``KalmanFilter``; the prior instance is left
untouched, which makes replaying a window of measurements deterministic.
No NaN/Inf guards live here: callers sanitize their inputs.
"""

from dataclasses import dataclass
from typing import Generic, Tuple

from flightcore.estimators.base import M


@dataclass(frozen=True)
class KalmanFilter(Generic[M]):
    """
    Kalman filter state as a value.

    Attributes:
        state_estimate: State vector x (n×1).
        error_covariance: Error covariance P (n×n).

    Example:
        >>> from flightcore.linalg import Matrix
        >>> kf = KalmanFilter(Matrix.vector([0.0]), Matrix([[1.0]]))
        >>> kf = kf.predict(Matrix([[1.0]]), Matrix([[0.0]]),
        ...                 Matrix.vector([0.0]), Matrix([[0.01]]))
        >>> kf = kf.update(Matrix.vector([2.0]), Matrix([[1.0]]), Matrix([[0.01]]))
        >>> round(kf.state_estimate[0, 0], 2)
        1.98
    """

    state_estimate: M
    error_covariance: M

    def __post_init__(self) -> None:
        n_state = self.state_estimate.shape[0]
        rows, cols = self.error_covariance.shape
        if rows != cols:
            raise ValueError(
                f"Error covariance must be square, got shape {self.error_covariance.shape}"
            )
        if rows != n_state:
            raise ValueError(
                f"Error covariance shape {self.error_covariance.shape} "
                f"inconsistent with state dimension {n_state}"
            )

    @property
    def state_dim(self) -> int:
        return self.state_estimate.shape[0]

    def predict(
        self,
        state_transition: M,
        control_input_model: M,
        control_vector: M,
        process_noise: M,
    ) -> "KalmanFilter[M]":
        """
        Time update.

        Args:
            state_transition: F (n×n).
            control_input_model: B (n×k).
            control_vector: u (k×1).
            process_noise: Q (n×n).

        Returns:
            New filter holding the predicted state and covariance.
        """
        F = state_transition
        x = F @ self.state_estimate + control_input_model @ control_vector
        P = F @ self.error_covariance @ F.transpose() + process_noise
        return KalmanFilter(x, P)

    def update(
        self,
        measurement: M,
        observation_model: M,
        observation_noise: M,
    ) -> "KalmanFilter[M]":
        """
        Measurement update.

        Args:
            measurement: z (m×1).
            observation_model: H (m×n).
            observation_noise: R (m×m).

        Returns:
            New filter holding the corrected state and covariance.

        Raises:
            SingularMatrixError: If the innovation covariance cannot be inverted.
        """
        H = observation_model
        innovation, S = self.get_innovation(measurement, H, observation_noise)

        gain = self.error_covariance @ H.transpose() @ S.inverse()

        x = self.state_estimate + gain @ innovation
        P = (gain @ H).unit_complement() @ self.error_covariance
        return KalmanFilter(x, P)

    def get_innovation(
        self,
        measurement: M,
        observation_model: M,
        observation_noise: M,
    ) -> Tuple[M, M]:
        """
        Compute innovation (measurement residual) and its covariance.

        Useful for consistency checking and outlier detection.

        Returns:
            Tuple of (innovation y = z - H x, innovation covariance S = H P H^T + R).
        """
        H = observation_model
        innovation = measurement - H @ self.state_estimate
        S = H @ self.error_covariance @ H.transpose() + observation_noise
        return innovation, S
