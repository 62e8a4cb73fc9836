"""Unit tests for flightcore.estimators.kalman_filter.

Tests the immutable predict/update cycle on the Matrix operand type.
"""

import unittest

import numpy as np

from flightcore.errors import SingularMatrixError
from flightcore.estimators import KalmanFilter, LinearOperand
from flightcore.linalg import Matrix


def constant_acceleration_model(dt: float = 1.0):
    F = Matrix([[1.0, dt, 0.5 * dt * dt], [0.0, 1.0, dt], [0.0, 0.0, 1.0]])
    B = Matrix.zeros(3, 3)
    u = Matrix.zeros(3, 1)
    Q = Matrix.identity(3) * 1e-2
    H = Matrix.identity(3)
    R = Matrix.identity(3) * 1e-2
    return F, B, u, Q, H, R


class TestKalmanFilterConstruction(unittest.TestCase):
    """Test suite for KalmanFilter validation."""

    def test_matrix_is_linear_operand(self) -> None:
        self.assertIsInstance(Matrix.identity(2), LinearOperand)

    def test_state_dim(self) -> None:
        kf = KalmanFilter(Matrix.vector([0.0, 0.0, 0.0]), Matrix.identity(3))
        self.assertEqual(kf.state_dim, 3)

    def test_non_square_covariance_raises(self) -> None:
        with self.assertRaises(ValueError):
            KalmanFilter(Matrix.vector([0.0, 0.0]), Matrix.zeros(2, 3))

    def test_covariance_state_mismatch_raises(self) -> None:
        with self.assertRaises(ValueError):
            KalmanFilter(Matrix.vector([0.0, 0.0, 0.0]), Matrix.identity(2))


class TestKalmanFilterCycle(unittest.TestCase):
    """Test suite for predict/update."""

    def test_predict_propagates_kinematics(self) -> None:
        F, B, u, Q, _, _ = constant_acceleration_model()
        kf = KalmanFilter(Matrix.vector([100.0, 2.0, 0.5]), Matrix.identity(3))
        predicted = kf.predict(F, B, u, Q)
        np.testing.assert_allclose(
            predicted.state_estimate.to_array().ravel(), [102.25, 2.5, 0.5]
        )

    def test_constant_measurement_converges(self) -> None:
        F = Matrix.identity(3)
        B, u = Matrix.zeros(3, 3), Matrix.zeros(3, 1)
        Q = Matrix.identity(3) * 1e-4
        H = Matrix.identity(3)
        R = Matrix.identity(3) * 1e-2
        z = Matrix.vector([250.0, 1.5, 0.2])

        kf = KalmanFilter(Matrix.vector([0.0, 0.0, 0.0]), Matrix.identity(3) * 10.0)
        for _ in range(50):
            kf = kf.predict(F, B, u, Q).update(z, H, R)

        self.assertTrue(kf.state_estimate.allclose(z, atol=1e-3))

    def test_update_reduces_covariance(self) -> None:
        _, B, u, Q, H, R = constant_acceleration_model()
        kf = KalmanFilter(Matrix.vector([0.0, 0.0, 0.0]), Matrix.diagonal([10.0, 10.0, 1.0]))
        updated = kf.update(Matrix.vector([1.0, 0.0, 0.0]), H, R)
        for i in range(3):
            self.assertLess(updated.error_covariance[i, i], kf.error_covariance[i, i])

    def test_operations_are_pure(self) -> None:
        F, B, u, Q, H, R = constant_acceleration_model()
        kf = KalmanFilter(Matrix.vector([10.0, 1.0, 0.0]), Matrix.identity(3))
        x_before = kf.state_estimate
        P_before = kf.error_covariance

        kf.predict(F, B, u, Q)
        kf.update(Matrix.vector([11.0, 1.0, 0.0]), H, R)

        self.assertEqual(kf.state_estimate, x_before)
        self.assertEqual(kf.error_covariance, P_before)

    def test_same_inputs_same_outputs(self) -> None:
        F, B, u, Q, H, R = constant_acceleration_model()
        kf = KalmanFilter(Matrix.vector([10.0, 1.0, 0.0]), Matrix.identity(3))
        z = Matrix.vector([11.0, 1.2, 0.1])
        a = kf.predict(F, B, u, Q).update(z, H, R)
        b = kf.predict(F, B, u, Q).update(z, H, R)
        self.assertEqual(a, b)

    def test_innovation(self) -> None:
        kf = KalmanFilter(Matrix.vector([1.0, 2.0]), Matrix.identity(2))
        y, S = kf.get_innovation(Matrix.vector([1.5, 1.0]), Matrix.identity(2), Matrix.identity(2))
        np.testing.assert_allclose(y.to_array().ravel(), [0.5, -1.0])
        np.testing.assert_allclose(S.to_array(), 2.0 * np.eye(2))

    def test_singular_innovation_covariance_raises(self) -> None:
        kf = KalmanFilter(Matrix.vector([0.0, 0.0]), Matrix.zeros(2, 2))
        with self.assertRaises(SingularMatrixError):
            kf.update(Matrix.vector([1.0, 1.0]), Matrix.identity(2), Matrix.zeros(2, 2))


if __name__ == "__main__":
    unittest.main()
