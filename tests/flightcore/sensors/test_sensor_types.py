"""Unit tests for flightcore.sensors.types and flightcore.sensors.motion."""

import math
import unittest

import numpy as np

from flightcore.sensors import (
    STANDARD_GRAVITY,
    AltitudeSample,
    Coordinate,
    LocationSample,
    MotionSample,
    attitude_degrees,
    vertical_acceleration,
)


class TestCoordinate(unittest.TestCase):
    """Test suite for Coordinate validation."""

    def test_valid(self) -> None:
        c = Coordinate(46.5, 7.9)
        self.assertFalse(c.is_placeholder)

    def test_out_of_range_raises(self) -> None:
        with self.assertRaises(ValueError):
            Coordinate(91.0, 0.0)
        with self.assertRaises(ValueError):
            Coordinate(0.0, 181.0)

    def test_placeholder(self) -> None:
        self.assertTrue(Coordinate(0.0, 0.0).is_placeholder)

    def test_equator_and_prime_meridian_are_real_fixes(self) -> None:
        self.assertFalse(Coordinate(51.4779, 0.0).is_placeholder)
        self.assertFalse(Coordinate(0.0, -78.4678).is_placeholder)


class TestLocationSample(unittest.TestCase):
    """Test suite for LocationSample."""

    def test_unknown_speed_default(self) -> None:
        sample = LocationSample(0.0, 46.5, 7.9, 1200.0)
        self.assertFalse(sample.speed_known)
        self.assertEqual(sample.coordinate, Coordinate(46.5, 7.9))

    def test_known_speed(self) -> None:
        self.assertTrue(LocationSample(0.0, 46.5, 7.9, 1200.0, speed=0.0).speed_known)

    def test_invalid_latitude_raises(self) -> None:
        with self.assertRaises(ValueError):
            LocationSample(0.0, 120.0, 7.9, 1200.0)

    def test_invalid_timestamp_type_raises(self) -> None:
        with self.assertRaises(TypeError):
            LocationSample("now", 46.5, 7.9, 1200.0)  # type: ignore


class TestAltitudeSample(unittest.TestCase):
    def test_non_numeric_altitude_raises(self) -> None:
        with self.assertRaises(TypeError):
            AltitudeSample(0.0, "high")  # type: ignore


class TestMotion(unittest.TestCase):
    """Test suite for motion samples and vertical acceleration."""

    def test_vector_shape_validated(self) -> None:
        with self.assertRaises(ValueError):
            MotionSample(0.0, 0.0, 0.0, 0.0, (0.0, 0.0), (0.0, 0.0, -1.0))

    def test_vectors_stored_as_tuples(self) -> None:
        s = MotionSample(0.0, 0.0, 0.0, 0.0, np.array([0.0, 0.0, 0.1]), [0.0, 0.0, -1.0])
        self.assertEqual(s.user_acceleration, (0.0, 0.0, 0.1))
        self.assertEqual(s.gravity, (0.0, 0.0, -1.0))

    def test_upward_acceleration_flat(self) -> None:
        s = MotionSample(0.0, 0.0, 0.0, 0.0, (0.0, 0.0, 0.1), (0.0, 0.0, -1.0))
        self.assertAlmostEqual(vertical_acceleration(s), 0.1 * STANDARD_GRAVITY)

    def test_mounting_independent(self) -> None:
        # Device on its side: gravity along -x
        s = MotionSample(0.0, 0.0, 0.0, 0.0, (0.2, 0.0, 0.0), (-1.0, 0.0, 0.0))
        self.assertAlmostEqual(vertical_acceleration(s), 0.2 * STANDARD_GRAVITY)

    def test_horizontal_acceleration_ignored(self) -> None:
        s = MotionSample(0.0, 0.0, 0.0, 0.0, (0.5, 0.5, 0.0), (0.0, 0.0, -1.0))
        self.assertAlmostEqual(vertical_acceleration(s), 0.0)

    def test_zero_gravity_vector(self) -> None:
        s = MotionSample(0.0, 0.0, 0.0, 0.0, (0.0, 0.0, 0.3), (0.0, 0.0, 0.0))
        self.assertEqual(vertical_acceleration(s), 0.0)

    def test_round_trip_vertical_acceleration(self) -> None:
        s = MotionSample.from_vertical_acceleration(1.0, -1.5, pitch=0.1)
        self.assertAlmostEqual(vertical_acceleration(s), -1.5)
        self.assertEqual(s.pitch, 0.1)

    def test_attitude_degrees(self) -> None:
        s = MotionSample(0.0, math.pi / 2, -math.pi / 4, math.pi, (0, 0, 0), (0, 0, -1))
        np.testing.assert_allclose(attitude_degrees(s), (90.0, -45.0, 180.0))


if __name__ == "__main__":
    unittest.main()
