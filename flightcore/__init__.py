"""Flight-state estimation for gliders and paragliders.

This package contains the real-time estimator behind the instrument panel:
- linalg: Small dense matrix algebra
- estimators: Generic linear Kalman filter
- buffers: Bounded altitude and feature histories
- vario: Vertical velocity and thermal detection
- glide: Glide ratio, range, landing rule and terrain lookup
- flight: Landed/Armed/InFlight state machine
- sensors: Sample types, traces and sources
- computer: Serialized ingestion and snapshots
"""

__version__ = "0.1.0"
