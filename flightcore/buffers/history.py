"""
Bounded FIFO histories feeding the vertical-velocity detector.

Two windows are kept per barometric tick:
    - ``AltitudeHistory``: raw baro altitudes rounded to the millimetre.
    - ``FeatureHistory``: [altitude, velocity, vertical acceleration]
      triples the Kalman filter is re-run over.

Both evict oldest-first and never exceed their capacity.
"""

from collections import deque
from typing import Deque, Generic, Iterator, List, NamedTuple, TypeVar

import numpy as np

from flightcore.utils.numeric import round_to_places, safe_divide

T = TypeVar("T")

DEFAULT_CAPACITY = 12
ALTITUDE_DECIMALS = 3


class FeatureVector(NamedTuple):
    """One filter measurement: [altitude, velocity, vertical acceleration]."""

    altitude: float
    velocity: float
    vertical_acceleration: float


class BoundedHistory(Generic[T]):
    """Fixed-capacity FIFO window."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._items: Deque[T] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, item: T) -> None:
        self._items.append(item)

    def clear(self) -> None:
        self._items.clear()

    def is_full(self) -> bool:
        return len(self._items) == self._capacity

    def oldest(self) -> T:
        if not self._items:
            raise IndexError("history is empty")
        return self._items[0]

    def latest(self) -> T:
        if not self._items:
            raise IndexError("history is empty")
        return self._items[-1]

    def to_list(self) -> List[T]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(capacity={self._capacity}, items={list(self._items)})"


class AltitudeHistory(BoundedHistory[float]):
    """Window of barometric altitudes [m]."""

    def append(self, altitude: float) -> None:
        super().append(round_to_places(float(altitude), ALTITUDE_DECIMALS))

    def values(self) -> np.ndarray:
        return np.array(self.to_list(), dtype=float)

    def mean_delta(self) -> float:
        """
        Mean of consecutive differences, sum(a[i+1] - a[i]) / (n - 1).

        Returns 0.0 with fewer than two samples or a non-finite result.

        Example:
            >>> h = AltitudeHistory()
            >>> for a in (100.0, 100.5, 101.0):
            ...     h.append(a)
            >>> h.mean_delta()
            0.5
        """
        n = len(self)
        if n < 2:
            return 0.0
        deltas = np.diff(self.values())
        return safe_divide(float(np.sum(deltas)), n - 1)


class FeatureHistory(BoundedHistory[FeatureVector]):
    """Window of filter measurement triples."""

    def append(self, feature: FeatureVector) -> None:
        super().append(FeatureVector(*(float(v) for v in feature)))

    def as_array(self) -> np.ndarray:
        """History as an (n, 3) array, oldest row first."""
        if not len(self):
            return np.zeros((0, 3))
        return np.array(self.to_list(), dtype=float)
