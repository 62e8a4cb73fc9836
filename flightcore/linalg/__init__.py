"""Small dense linear algebra used by the vertical-speed estimator."""

from flightcore.linalg.matrix import Matrix

__all__ = ["Matrix"]
