"""
Visualization of replayed flights.

All functions return matplotlib Figure objects for flexible display/saving.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from flightcore.computer.snapshot import FlightSnapshot


def _series(snapshots: Sequence[FlightSnapshot], name: str) -> np.ndarray:
    """Snapshot attribute as a float array; missing values become NaN."""
    return np.array(
        [np.nan if getattr(s, name) is None else float(getattr(s, name)) for s in snapshots],
        dtype=float,
    )


def plot_vario_trace(
    t: Sequence[float],
    snapshots: Sequence[FlightSnapshot],
    title: str = "Vario Trace",
) -> plt.Figure:
    """
    Plot barometric altitude, vertical velocity and glide ratio over time.

    Args:
        t: Sample times [s], same length as ``snapshots``.
        snapshots: Snapshots taken after each barometric sample.
        title: Figure title.

    Returns:
        fig: Matplotlib figure
    """
    t = np.asarray(t, dtype=float)
    if len(t) != len(snapshots):
        raise ValueError(f"t and snapshots must have equal length, got {len(t)} and {len(snapshots)}")

    altitude = _series(snapshots, "baro_altitude")
    velocity = _series(snapshots, "vertical_velocity")
    ratio = _series(snapshots, "glide_ratio")
    ratio[~np.isfinite(ratio)] = np.nan

    fig, axes = plt.subplots(3, 1, figsize=(12, 9), sharex=True)

    axes[0].plot(t, altitude, "b-", linewidth=1.5, label="Baro altitude")
    terrain = _series(snapshots, "terrain_elevation")
    if np.any(np.isfinite(terrain)):
        axes[0].plot(t, terrain, "k--", linewidth=1, label="Terrain")
    axes[0].set_ylabel("Altitude [m]", fontsize=12)
    axes[0].legend(loc="best")
    axes[0].grid(True, alpha=0.3)

    axes[1].plot(t, velocity, "g-", linewidth=1.5)
    axes[1].fill_between(t, 0, velocity, where=velocity > 0, color="g", alpha=0.2, label="Climb")
    axes[1].fill_between(t, 0, velocity, where=velocity < 0, color="r", alpha=0.2, label="Sink")
    axes[1].axhline(0.0, color="k", linewidth=0.8)
    axes[1].set_ylabel("Vertical velocity [m/s]", fontsize=12)
    axes[1].legend(loc="best")
    axes[1].grid(True, alpha=0.3)

    axes[2].plot(t, ratio, "m.", markersize=3)
    axes[2].set_ylabel("Glide ratio", fontsize=12)
    axes[2].set_xlabel("Time [s]", fontsize=12)
    axes[2].grid(True, alpha=0.3)

    axes[0].set_title(title, fontsize=14, fontweight="bold")
    plt.tight_layout()
    return fig


def plot_ground_track(
    snapshots: Sequence[FlightSnapshot],
    thermals: Optional[Sequence[Tuple[float, float]]] = None,
    title: str = "Ground Track",
) -> plt.Figure:
    """
    Plot the GPS track colored by vertical velocity.

    Args:
        snapshots: Snapshots with latitude/longitude.
        thermals: Thermal fixes as (latitude, longitude) pairs (optional).
        title: Plot title.

    Returns:
        fig: Matplotlib figure
    """
    lat = _series(snapshots, "latitude")
    lon = _series(snapshots, "longitude")
    velocity = np.nan_to_num(_series(snapshots, "vertical_velocity"))

    fig, ax = plt.subplots(figsize=(10, 8))
    sc = ax.scatter(lon, lat, c=velocity, cmap="RdYlGn", s=8, label="Track")
    fig.colorbar(sc, ax=ax, label="Vertical velocity [m/s]")

    if thermals:
        thermals = np.asarray(thermals, dtype=float)
        ax.plot(thermals[:, 1], thermals[:, 0], "r^", markersize=10, label="Thermals")

    ax.set_xlabel("Longitude [deg]", fontsize=12)
    ax.set_ylabel("Latitude [deg]", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(loc="best")
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    out_dir: Union[str, Path],
    name: str,
    formats: Tuple[str, ...] = ("png",),
    dpi: int = 120,
) -> List[Path]:
    """
    Write a replay figure to ``out_dir/name.<fmt>`` for each format.

    PNG alone is the default; pass ``("svg", "png")`` for a vector copy.

    Raises:
        ValueError: If no format is given.
    """
    if not formats:
        raise ValueError("At least one output format is required")
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = [out_dir / f"{name}.{fmt.lstrip('.')}" for fmt in formats]
    for path in paths:
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
    return paths
