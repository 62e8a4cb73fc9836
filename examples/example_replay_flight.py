"""
Example: Replaying a Recorded Flight

Feeds a logger trace through the flight computer exactly as live sensors
would, then plots the vario trace and the ground track with thermal fixes.

Shows:
    - Launch auto-detection from groundspeed while armed
    - Vertical velocity from the windowed Kalman pass
    - Thermal fixes overwritten on each qualifying climb
    - Glide ratio (infinite in level flight, 0 when slow)

Run ``scripts/generate_glider_trace_dataset.py`` first, or pass a trace:

    python examples/example_replay_flight.py data/sim/glider_trace_baseline/trace.json
"""

import argparse
import logging
import sys
from pathlib import Path

import matplotlib.pyplot as plt

sys.path.insert(0, str(Path(__file__).parent.parent))

from flightcore.computer import FlightComputer
from flightcore.config import load_config, preset
from flightcore.eval import plot_ground_track, plot_vario_trace, save_figure
from flightcore.glide import OpenElevationClient
from flightcore.sensors import load_trace
from flightcore.sensors.sources import ReplaySource


def replay(trace_path: Path, config=None, online: bool = False):
    """
    Replay a trace record by record.

    With ``online`` set, terrain comes from the Open-Elevation service.

    Returns: times, snapshots, thermal fixes, frames
    """
    records = load_trace(trace_path)
    config = config or preset("replay")
    lookup = OpenElevationClient(timeout=config.elevation_timeout) if online else None
    frames = []
    computer = FlightComputer(config, elevation_lookup=lookup, frame_sink=frames.append)
    source = ReplaySource(records)
    source.attach(computer)
    computer.arm()

    times, snapshots, thermals = [], [], []
    last_fix = None
    while source.step():
        times.append(float(source.position - 1))
        snapshots.append(computer.snapshot())
        fix = computer.detector.thermal_fix
        if fix is not None and fix is not last_fix:
            thermals.append((fix.coordinate.latitude, fix.coordinate.longitude))
            last_fix = fix

    computer.stop()
    return times, snapshots, thermals, frames


def main():
    parser = argparse.ArgumentParser(description="Replay a recorded flight trace")
    parser.add_argument(
        "trace",
        nargs="?",
        default="data/sim/glider_trace_baseline/trace.json",
        help="Trace JSON file (default: data/sim/glider_trace_baseline/trace.json)",
    )
    parser.add_argument("--config", type=str, help="Flight computer config JSON")
    parser.add_argument("--online", action="store_true", help="Look up terrain elevation over the network")
    parser.add_argument("--show", action="store_true", help="Show figures interactively")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    print("\n" + "=" * 70)
    print("Replaying flight trace")
    print("=" * 70)

    config = load_config(args.config) if args.config else None
    times, snapshots, thermals, frames = replay(Path(args.trace), config, online=args.online)

    climbs = [s.vertical_velocity for s in snapshots if s.vertical_velocity is not None]
    print(f"\n  Records: {len(snapshots)}")
    print(f"  Frames recorded in flight: {len(frames)}")
    print(f"  Thermal fixes: {len(thermals)}")
    if climbs:
        print(f"  Best climb: {max(climbs):+.1f} m/s")
        print(f"  Worst sink: {min(climbs):+.1f} m/s")

    figs_dir = Path(__file__).parent / "figs"
    fig1 = plot_vario_trace(times, snapshots, title="Replayed Vario Trace")
    fig2 = plot_ground_track(snapshots, thermals, title="Replayed Ground Track")
    for path in save_figure(fig1, figs_dir, "replay_vario_trace", formats=("svg", "png")):
        print(f"  [OK] Saved: {path}")
    for path in save_figure(fig2, figs_dir, "replay_ground_track", formats=("svg", "png")):
        print(f"  [OK] Saved: {path}")

    if args.show:
        plt.show()


if __name__ == "__main__":
    main()
