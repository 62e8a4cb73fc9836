"""Orchestration: serialized ingestion, control commands and snapshots."""

from flightcore.computer.flight_computer import FlightComputer
from flightcore.computer.snapshot import FlightSnapshot, SnapshotPublisher

__all__ = [
    "FlightComputer",
    "FlightSnapshot",
    "SnapshotPublisher",
]
