"""
Capability set required by the Kalman estimator.

The estimator is written against this protocol rather than a concrete
matrix class, so any type providing the operations below can be filtered
(``flightcore.linalg.Matrix`` is the one used in production).
"""

from typing import Protocol, Tuple, TypeVar, runtime_checkable


@runtime_checkable
class LinearOperand(Protocol):
    """Matrix-like value supporting the operations of the KF equations."""

    @property
    def shape(self) -> Tuple[int, int]:
        ...

    def __add__(self, other):
        ...

    def __sub__(self, other):
        ...

    def __matmul__(self, other):
        ...

    def transpose(self):
        ...

    def inverse(self):
        ...

    def unit_complement(self):
        """Return I − self."""
        ...


M = TypeVar("M", bound=LinearOperand)
