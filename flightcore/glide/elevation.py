"""
Terrain elevation lookup.

The terrain under the glider comes from a network service, which is the
one slow, failure-prone dependency of the flight computer. Requests run on
a background executor and never block sensor ingestion:

    - Requests are rate limited to one per ``min_interval`` seconds.
    - Each request carries a monotonically increasing sequence number and
      cancels the previous one if it has not started yet.
    - Only a response whose sequence matches the latest request is applied;
      a late, stale response is discarded.
    - On failure or timeout the previous terrain value is retained and the
      failure is logged.
"""

import logging
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import requests

from flightcore.errors import ElevationLookupFailed
from flightcore.sensors.types import Coordinate

logger = logging.getLogger(__name__)

OPEN_ELEVATION_URL = "https://api.open-elevation.com/api/v1/lookup"


class ElevationLookup(Protocol):
    """Anything that maps a position to terrain elevation [m]."""

    def lookup(self, latitude: float, longitude: float) -> float:
        ...


class OpenElevationClient:
    """
    Client for the Open-Elevation lookup API.

    Example:
        >>> client = OpenElevationClient(timeout=2.0)
        >>> client.lookup(49.2283, -121.9019)  # doctest: +SKIP
        1123.0
    """

    def __init__(
        self,
        base_url: str = OPEN_ELEVATION_URL,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def lookup(self, latitude: float, longitude: float) -> float:
        """
        Terrain elevation at a position.

        Raises:
            ElevationLookupFailed: On network errors, HTTP errors, timeouts
                or a payload without an elevation.
        """
        try:
            response = self.session.get(
                self.base_url,
                params={"locations": f"{latitude},{longitude}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise ElevationLookupFailed(f"Elevation request failed: {e}") from e
        except ValueError as e:
            raise ElevationLookupFailed(f"Elevation response is not JSON: {e}") from e

        try:
            return float(payload["results"][0]["elevation"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ElevationLookupFailed(f"Elevation missing from response: {payload!r}") from e


@dataclass(frozen=True)
class ElevationResult:
    """Outcome of one sequenced elevation request."""

    sequence: int
    latitude: float
    longitude: float
    elevation: Optional[float] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.elevation is not None


class TerrainElevationTracker:
    """
    Rate-limited, sequence-numbered terrain cache.

    Args:
        lookup: Elevation service.
        min_interval: Minimum seconds between two requests.
        clock: Time source for the rate limit.
        executor: Where requests run; a single-worker thread pool by default.
        on_result: Receives each completed ``ElevationResult``. When given,
            the owner is responsible for calling ``apply`` (typically after
            moving the result onto its own execution context); otherwise the
            result is applied directly from the executor thread.
    """

    def __init__(
        self,
        lookup: ElevationLookup,
        min_interval: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        executor: Optional[Executor] = None,
        on_result: Optional[Callable[[ElevationResult], None]] = None,
    ):
        self.lookup = lookup
        self.min_interval = min_interval
        self.clock = clock
        self._owns_executor = executor is None
        self._executor = executor or self._new_executor()
        self._on_result = on_result
        self._closed = False

        self._lock = threading.Lock()
        self._sequence = 0
        self._pending: Optional[Future] = None
        self._last_request_time: Optional[float] = None
        self._terrain_elevation: Optional[float] = None

    @property
    def terrain_elevation(self) -> Optional[float]:
        """Last applied terrain elevation [m], or None before the first success."""
        return self._terrain_elevation

    @property
    def latest_sequence(self) -> int:
        return self._sequence

    @property
    def closed(self) -> bool:
        return self._closed

    def due(self, now: Optional[float] = None) -> bool:
        now = self.clock() if now is None else now
        return self._last_request_time is None or now - self._last_request_time >= self.min_interval

    def maybe_request(self, position: Optional[Coordinate], now: Optional[float] = None) -> Optional[int]:
        """
        Issue a request if the rate limit allows and the position is usable.

        Returns:
            The sequence number of the issued request, or None (also once
            the tracker is shut down).
        """
        if self._closed or position is None or position.is_placeholder:
            return None
        now = self.clock() if now is None else now
        if not self.due(now):
            return None
        return self.request(position, now)

    def request(self, position: Coordinate, now: Optional[float] = None) -> int:
        """
        Unconditionally issue a request, superseding any pending one.

        Raises:
            RuntimeError: If the tracker is shut down.
        """
        if self._closed:
            raise RuntimeError("Elevation tracker is shut down; call reopen() first")
        with self._lock:
            self._sequence += 1
            sequence = self._sequence
            self._last_request_time = self.clock() if now is None else now
            if self._pending is not None and not self._pending.done():
                self._pending.cancel()

        future = self._executor.submit(
            self._fetch, sequence, position.latitude, position.longitude
        )
        with self._lock:
            if sequence == self._sequence:
                self._pending = future
        future.add_done_callback(
            lambda f: self._complete(f, sequence, position.latitude, position.longitude)
        )
        return sequence

    def apply(self, result: ElevationResult) -> bool:
        """
        Apply a completed request if it is the latest one.

        Returns:
            True if the terrain elevation was updated.
        """
        with self._lock:
            if result.sequence != self._sequence:
                logger.debug(
                    "Discarding stale elevation response #%d (latest #%d)",
                    result.sequence, self._sequence,
                )
                return False
            if not result.ok:
                logger.warning(
                    "Elevation lookup #%d at %.5f, %.5f failed, keeping %s: %s",
                    result.sequence, result.latitude, result.longitude,
                    self._terrain_elevation, result.error,
                )
                return False
            self._terrain_elevation = result.elevation
            return True

    def shutdown(self, wait: bool = False) -> None:
        """Stop issuing requests and release an owned executor."""
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def reopen(self) -> None:
        """Accept requests again after ``shutdown``; the terrain value is kept."""
        if not self._closed:
            return
        if self._owns_executor:
            self._executor = self._new_executor()
        self._closed = False

    @staticmethod
    def _new_executor() -> Executor:
        return ThreadPoolExecutor(max_workers=1, thread_name_prefix="elevation")

    def _fetch(self, sequence: int, latitude: float, longitude: float) -> ElevationResult:
        try:
            elevation = self.lookup.lookup(latitude, longitude)
        except ElevationLookupFailed as e:
            return ElevationResult(sequence, latitude, longitude, error=e)
        return ElevationResult(sequence, latitude, longitude, elevation=float(elevation))

    def _complete(self, future: Future, sequence: int, latitude: float, longitude: float) -> None:
        if future.cancelled():
            logger.debug("Elevation request #%d cancelled", sequence)
            return
        error = future.exception()
        if error is not None:
            result = ElevationResult(sequence, latitude, longitude, error=error)
        else:
            result = future.result()

        if self._on_result is not None:
            self._on_result(result)
        else:
            self.apply(result)
