"""Unit tests for flightcore.sensors.trace."""

import json
import tempfile
import unittest
from pathlib import Path

from flightcore.sensors import TraceRecord, load_trace, save_trace

RAW_RECORD = {
    "Milliseconds": 250,
    "Seconds": 12,
    "Latitude": 49.2283,
    "Longitude": -121.9019,
    "Lat_Degree": 49,
    "Baro_Alt": 812.4,
    "GPS_Alt": 815.0,
    "Speed": 9.1,
    "AcclX": 0.1,
    "AcclY": -0.2,
    "AcclZ": -4.0,
    "GyroX": 0.01,
    "GyroY": 0.05,
    "GyroZ": 1.2,
    "Course": 271.0,
    "Heading": 268.0,
}


class TestTraceRecord(unittest.TestCase):
    """Test suite for record parsing."""

    def test_from_dict(self) -> None:
        record = TraceRecord.from_dict(RAW_RECORD)
        self.assertEqual(record.baro_altitude, 812.4)
        self.assertEqual(record.gps_altitude, 815.0)
        self.assertEqual(record.heading, 268.0)
        self.assertAlmostEqual(record.elapsed(), 12.25)

    def test_vertical_acceleration_from_raw_z(self) -> None:
        record = TraceRecord.from_dict(RAW_RECORD)
        self.assertAlmostEqual(record.vertical_acceleration, 0.4)

    def test_optional_channels_default_to_zero(self) -> None:
        record = TraceRecord.from_dict({"Latitude": 1.0, "Longitude": 2.0, "Baro_Alt": 3.0})
        self.assertEqual(record.speed, 0.0)
        self.assertIsNone(record.elapsed())

    def test_missing_required_key_raises(self) -> None:
        with self.assertRaises(ValueError):
            TraceRecord.from_dict({"Latitude": 1.0, "Longitude": 2.0})

    def test_non_finite_value_raises(self) -> None:
        with self.assertRaises(ValueError):
            TraceRecord.from_dict({"Latitude": 1.0, "Longitude": 2.0, "Baro_Alt": float("nan")})


class TestTraceFiles(unittest.TestCase):
    """Test suite for loading and saving traces."""

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_load_trace(self) -> None:
        path = self.dir / "trace.json"
        path.write_text(json.dumps([RAW_RECORD, RAW_RECORD]), encoding="utf-8")
        records = load_trace(path)
        self.assertEqual(len(records), 2)
        self.assertEqual(records[0].latitude, 49.2283)

    def test_save_then_load_preserves_keys(self) -> None:
        record = TraceRecord.from_dict(RAW_RECORD)
        path = save_trace([record], self.dir / "out" / "trace.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(data[0]["Baro_Alt"], 812.4)
        self.assertEqual(load_trace(path), [record])

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_trace(self.dir / "absent.json")

    def test_not_an_array_raises(self) -> None:
        path = self.dir / "trace.json"
        path.write_text(json.dumps({"Latitude": 1.0}), encoding="utf-8")
        with self.assertRaises(ValueError):
            load_trace(path)

    def test_bad_record_reports_index(self) -> None:
        path = self.dir / "trace.json"
        path.write_text(json.dumps([RAW_RECORD, {"Latitude": 1.0}]), encoding="utf-8")
        with self.assertRaisesRegex(ValueError, "#1"):
            load_trace(path)


if __name__ == "__main__":
    unittest.main()
