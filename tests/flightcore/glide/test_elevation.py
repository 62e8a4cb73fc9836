"""Unit tests for flightcore.glide.elevation.

The tracker is exercised with an executor that runs requests inline, so
sequencing and rate limiting can be checked without threads or network.
"""

import unittest
from concurrent.futures import Future
from unittest import mock

import requests

from flightcore.errors import ElevationLookupFailed
from flightcore.glide import ElevationResult, OpenElevationClient, TerrainElevationTracker
from flightcore.sensors.types import Coordinate


class InlineExecutor:
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn, *args, **kwargs) -> Future:
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait: bool = True) -> None:
        pass


class FakeLookup:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def lookup(self, latitude: float, longitude: float) -> float:
        self.calls.append((latitude, longitude))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


POSITION = Coordinate(46.5, 7.9)


class TestTerrainElevationTracker(unittest.TestCase):
    """Test suite for sequencing, rate limiting and failure handling."""

    def setUp(self) -> None:
        self.clock = FakeClock(100.0)

    def make_tracker(self, lookup, **kwargs) -> TerrainElevationTracker:
        return TerrainElevationTracker(
            lookup, min_interval=10.0, clock=self.clock, executor=InlineExecutor(), **kwargs
        )

    def test_initially_unknown(self) -> None:
        tracker = self.make_tracker(FakeLookup())
        self.assertIsNone(tracker.terrain_elevation)
        self.assertTrue(tracker.due())

    def test_successful_request_applies(self) -> None:
        tracker = self.make_tracker(FakeLookup(1234.0))
        self.assertEqual(tracker.maybe_request(POSITION), 1)
        self.assertEqual(tracker.terrain_elevation, 1234.0)

    def test_rate_limited(self) -> None:
        lookup = FakeLookup(1234.0, 1250.0)
        tracker = self.make_tracker(lookup)
        tracker.maybe_request(POSITION)

        self.clock.now = 105.0
        self.assertIsNone(tracker.maybe_request(POSITION))
        self.assertEqual(len(lookup.calls), 1)

        self.clock.now = 110.0
        self.assertEqual(tracker.maybe_request(POSITION), 2)
        self.assertEqual(tracker.terrain_elevation, 1250.0)

    def test_placeholder_position_skipped(self) -> None:
        lookup = FakeLookup(1234.0)
        tracker = self.make_tracker(lookup)
        self.assertIsNone(tracker.maybe_request(None))
        self.assertIsNone(tracker.maybe_request(Coordinate(0.0, 0.0)))
        self.assertEqual(lookup.calls, [])

    def test_equator_position_requested(self) -> None:
        tracker = self.make_tracker(FakeLookup(2850.0))
        self.assertEqual(tracker.maybe_request(Coordinate(0.0, -78.4678)), 1)
        self.assertEqual(tracker.terrain_elevation, 2850.0)

    def test_no_requests_after_shutdown(self) -> None:
        lookup = FakeLookup(1234.0, 1250.0)
        tracker = self.make_tracker(lookup)
        tracker.maybe_request(POSITION)
        tracker.shutdown()

        self.clock.now = 200.0
        self.assertTrue(tracker.closed)
        self.assertIsNone(tracker.maybe_request(POSITION))
        with self.assertRaises(RuntimeError):
            tracker.request(POSITION)
        self.assertEqual(len(lookup.calls), 1)

        tracker.reopen()
        self.assertEqual(tracker.maybe_request(POSITION), 2)
        self.assertEqual(tracker.terrain_elevation, 1250.0)

    def test_reopen_replaces_owned_executor(self) -> None:
        tracker = TerrainElevationTracker(FakeLookup(1234.0), clock=self.clock)
        tracker.shutdown(wait=True)
        tracker.reopen()
        try:
            tracker.maybe_request(POSITION)
        finally:
            tracker.shutdown(wait=True)
        self.assertEqual(tracker.terrain_elevation, 1234.0)

    def test_failure_retains_previous_value(self) -> None:
        tracker = self.make_tracker(FakeLookup(1234.0, ElevationLookupFailed("timeout")))
        tracker.maybe_request(POSITION)

        self.clock.now = 120.0
        with self.assertLogs("flightcore.glide.elevation", level="WARNING"):
            tracker.maybe_request(POSITION)
        self.assertEqual(tracker.terrain_elevation, 1234.0)
        self.assertEqual(tracker.latest_sequence, 2)

    def test_unexpected_lookup_error_retains_value(self) -> None:
        tracker = self.make_tracker(FakeLookup(RuntimeError("driver crashed")))
        with self.assertLogs("flightcore.glide.elevation", level="WARNING"):
            tracker.maybe_request(POSITION)
        self.assertIsNone(tracker.terrain_elevation)

    def test_stale_response_discarded(self) -> None:
        results = []
        tracker = self.make_tracker(FakeLookup(1000.0, 2000.0), on_result=results.append)
        tracker.request(POSITION)
        tracker.request(POSITION)
        first, second = results

        self.assertFalse(tracker.apply(first))
        self.assertIsNone(tracker.terrain_elevation)
        self.assertTrue(tracker.apply(second))
        self.assertEqual(tracker.terrain_elevation, 2000.0)

        # Late delivery of the old response changes nothing
        self.assertFalse(tracker.apply(first))
        self.assertEqual(tracker.terrain_elevation, 2000.0)

    def test_result_ok(self) -> None:
        self.assertTrue(ElevationResult(1, 46.5, 7.9, elevation=100.0).ok)
        self.assertFalse(ElevationResult(1, 46.5, 7.9, error=ElevationLookupFailed("x")).ok)
        self.assertFalse(ElevationResult(1, 46.5, 7.9).ok)


class TestOpenElevationClient(unittest.TestCase):
    """Test suite for the HTTP client against a mocked session."""

    def make_client(self, payload=None, get_error=None, json_error=None, status_error=None):
        response = mock.Mock()
        response.json.return_value = payload
        if json_error is not None:
            response.json.side_effect = json_error
        if status_error is not None:
            response.raise_for_status.side_effect = status_error
        session = mock.Mock()
        session.get.return_value = response
        if get_error is not None:
            session.get.side_effect = get_error
        return OpenElevationClient("https://elevation.test/lookup", timeout=2.0, session=session), session

    def test_lookup_parses_elevation(self) -> None:
        client, session = self.make_client({"results": [{"latitude": 46.5, "longitude": 7.9, "elevation": 812}]})
        self.assertEqual(client.lookup(46.5, 7.9), 812.0)
        session.get.assert_called_once_with(
            "https://elevation.test/lookup",
            params={"locations": "46.5,7.9"},
            timeout=2.0,
        )

    def test_network_error(self) -> None:
        client, _ = self.make_client(get_error=requests.ConnectionError("offline"))
        with self.assertRaises(ElevationLookupFailed):
            client.lookup(46.5, 7.9)

    def test_timeout(self) -> None:
        client, _ = self.make_client(get_error=requests.Timeout("slow"))
        with self.assertRaises(ElevationLookupFailed):
            client.lookup(46.5, 7.9)

    def test_http_error(self) -> None:
        client, _ = self.make_client(status_error=requests.HTTPError("503"))
        with self.assertRaises(ElevationLookupFailed):
            client.lookup(46.5, 7.9)

    def test_invalid_json(self) -> None:
        client, _ = self.make_client(json_error=ValueError("not json"))
        with self.assertRaises(ElevationLookupFailed):
            client.lookup(46.5, 7.9)

    def test_missing_elevation(self) -> None:
        for payload in ({"results": []}, {}, {"results": [{"elevation": None}]}):
            client, _ = self.make_client(payload)
            with self.assertRaises(ElevationLookupFailed):
                client.lookup(46.5, 7.9)


if __name__ == "__main__":
    unittest.main()
