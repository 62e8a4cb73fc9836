"""
Generate Synthetic Glider Flight Trace Dataset.

This script generates a synthetic paraglider flight in the logger's JSON
trace format: a ground phase before launch, a launch run, glides in sinking
air, circling climbs in thermals and a landing. The trace can be replayed
through the flight computer with ``ReplaySource``.

Key Learning Objectives:
    - Barometric altitude lags true climb; the vario window smooths it
    - Thermal fixes are placed where climb and acceleration both qualify
    - Glide ratio only makes sense while moving and sinking
    - Launch and landing are detected from groundspeed and terrain

Output:
    <output>/trace.json   Logger records (one per second)
    <output>/truth.json   True altitude and vertical velocity per record
    <output>/config.json  Generation parameters and replay summary
"""

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from flightcore.computer import FlightComputer
from flightcore.config import preset as config_preset
from flightcore.sensors import TraceRecord, save_trace
from flightcore.sensors.sources import ReplaySource
from flightcore.utils.geodesy import EARTH_RADIUS_M

PRESETS: Dict[str, Dict] = {
    "baseline": {
        "baro_noise": 0.15,
        "accel_noise": 0.05,
        "thermal_strength": 2.0,
        "sink_rate": 1.1,
        "output_dir": "data/sim/glider_trace_baseline",
    },
    "strong_thermals": {
        "baro_noise": 0.15,
        "accel_noise": 0.08,
        "thermal_strength": 4.0,
        "sink_rate": 1.4,
        "output_dir": "data/sim/glider_trace_strong",
    },
    "noisy": {
        "baro_noise": 0.6,
        "accel_noise": 0.2,
        "thermal_strength": 2.0,
        "sink_rate": 1.1,
        "output_dir": "data/sim/glider_trace_noisy",
    },
}


def generate_flight_profile(
    duration: float = 900.0,
    dt: float = 1.0,
    launch_elevation: float = 1200.0,
    landing_elevation: float = 300.0,
    airspeed: float = 9.4,
    sink_rate: float = 1.1,
    thermal_strength: float = 2.0,
    thermal_period: float = 240.0,
    ground_time: float = 30.0,
    seed: int = 42,
) -> Dict[str, np.ndarray]:
    """
    Generate a true flight profile.

    Thermals start every ``thermal_period`` seconds and last a third of it;
    while climbing the glider circles with a 25 s turn period.

    Args:
        duration: Total duration [s].
        dt: Record interval [s].
        launch_elevation: Terrain at launch [m].
        landing_elevation: Terrain at the landing field [m].
        airspeed: Trim airspeed [m/s].
        sink_rate: Still-air sink rate [m/s].
        thermal_strength: Peak climb rate in thermals [m/s].
        thermal_period: Seconds between thermal entries.
        ground_time: Seconds on the ground before launch.
        seed: Random seed for the wind.

    Returns:
        Dict of arrays: t, east, north, altitude, terrain, vertical_velocity,
        vertical_acceleration, groundspeed, course, heading, climbing.
    """
    rng = np.random.default_rng(seed)
    t = np.arange(0.0, duration, dt)
    N = len(t)

    wind = rng.normal(0.0, 1.5, 2)  # [east, north] m/s

    east = np.zeros(N)
    north = np.zeros(N)
    altitude = np.zeros(N)
    terrain = np.zeros(N)
    vv = np.zeros(N)
    groundspeed = np.zeros(N)
    course = np.zeros(N)
    heading = np.zeros(N)
    climbing = np.zeros(N, dtype=bool)

    alt = launch_elevation
    x, y = 0.0, 0.0
    track = np.deg2rad(rng.uniform(0.0, 360.0))
    landed_at: Optional[int] = None

    for k in tqdm(range(N), desc="Generating flight", unit="s"):
        time_now = t[k]
        progress = min(time_now / duration, 1.0)
        ground = launch_elevation + (landing_elevation - launch_elevation) * progress

        if time_now < ground_time or landed_at is not None:
            # Standing on launch or on the landing field
            v_up = 0.0
            v_e = v_n = 0.0
            alt = ground if landed_at is None else terrain[landed_at]
            hdg = track
        else:
            phase = (time_now - ground_time) % thermal_period
            in_thermal = phase < thermal_period / 3.0 and time_now < duration * 0.8
            if in_thermal:
                # Smooth core profile; circle at a constant bank
                v_up = thermal_strength * np.sin(np.pi * phase / (thermal_period / 3.0)) - sink_rate * 0.3
                hdg = track + 2.0 * np.pi * phase / 25.0
            else:
                v_up = -sink_rate
                hdg = track
            climbing[k] = in_thermal and v_up > 0.0
            v_e = airspeed * np.sin(hdg) + wind[0]
            v_n = airspeed * np.cos(hdg) + wind[1]
            alt = alt + v_up * dt

            if alt <= ground:
                alt = ground
                landed_at = k
                v_up = 0.0
                v_e = v_n = 0.0

        x += v_e * dt
        y += v_n * dt

        east[k] = x
        north[k] = y
        altitude[k] = alt
        terrain[k] = ground if landed_at is None else terrain[landed_at]
        vv[k] = v_up
        groundspeed[k] = np.hypot(v_e, v_n)
        course[k] = np.rad2deg(np.arctan2(v_e, v_n)) % 360.0
        heading[k] = np.rad2deg(hdg) % 360.0

    va = np.gradient(vv, dt)

    return {
        "t": t,
        "east": east,
        "north": north,
        "altitude": altitude,
        "terrain": terrain,
        "vertical_velocity": vv,
        "vertical_acceleration": va,
        "groundspeed": groundspeed,
        "course": course,
        "heading": heading,
        "climbing": climbing,
    }


def to_trace_records(
    profile: Dict[str, np.ndarray],
    origin: Tuple[float, float],
    baro_noise: float = 0.15,
    accel_noise: float = 0.05,
    seed: int = 42,
) -> List[TraceRecord]:
    """
    Convert a true profile to noisy logger records.

    The raw Z accelerometer channel is in tenths of m/s², positive down.
    """
    rng = np.random.default_rng(seed + 1)
    lat0, lon0 = origin

    lat = lat0 + np.rad2deg(profile["north"] / EARTH_RADIUS_M)
    lon = lon0 + np.rad2deg(profile["east"] / (EARTH_RADIUS_M * np.cos(np.deg2rad(lat0))))

    N = len(profile["t"])
    baro = profile["altitude"] + rng.normal(0.0, baro_noise, N)
    gps_alt = profile["altitude"] + rng.normal(0.0, 3.0, N)
    accel_up = profile["vertical_acceleration"] + rng.normal(0.0, accel_noise, N)

    records = []
    for k in range(N):
        records.append(
            TraceRecord(
                latitude=round(float(lat[k]), 7),
                longitude=round(float(lon[k]), 7),
                baro_altitude=round(float(baro[k]), 2),
                gps_altitude=round(float(gps_alt[k]), 1),
                speed=round(float(profile["groundspeed"][k]), 2),
                accel_z=round(float(-10.0 * accel_up[k]), 3),
                gyro_z=round(float(np.deg2rad(profile["heading"][k])), 4),
                course=round(float(profile["course"][k]), 1),
                heading=round(float(profile["heading"][k]), 1),
                seconds=int(profile["t"][k]),
                milliseconds=0,
            )
        )
    return records


def replay_summary(records: List[TraceRecord], profile: Dict[str, np.ndarray]) -> Dict:
    """Replay the records through the flight computer and compare to truth."""
    computer = FlightComputer(config_preset("replay"))
    source = ReplaySource(records)
    source.attach(computer)
    computer.arm()

    velocities = []
    in_flight = []
    for _ in tqdm(range(len(records)), desc="Replaying", unit="rec"):
        source.step()
        snap = computer.snapshot()
        velocities.append(snap.vertical_velocity or 0.0)
        in_flight.append(snap.in_flight)

    velocities = np.array(velocities)
    truth = profile["vertical_velocity"]
    error = np.abs(velocities - truth)
    thermal_fix = computer.detector.thermal_fix

    return {
        "mean_abs_vario_error_mps": float(np.mean(error)),
        "max_abs_vario_error_mps": float(np.max(error)),
        "records_in_flight": int(np.sum(in_flight)),
        "thermal_found": thermal_fix is not None,
    }


def generate_dataset(
    output_dir: str,
    preset: Optional[str] = None,
    duration: float = 900.0,
    baro_noise: float = 0.15,
    accel_noise: float = 0.05,
    thermal_strength: float = 2.0,
    sink_rate: float = 1.1,
    origin: Tuple[float, float] = (49.2283, -121.9019),
    seed: int = 42,
) -> None:
    """
    Generate a glider trace dataset.

    Args:
        output_dir: Output directory path.
        preset: Preset configuration name.
        duration: Total duration (s).
        baro_noise: Barometric altitude noise (m).
        accel_noise: Vertical acceleration noise (m/s²).
        thermal_strength: Peak thermal climb (m/s).
        sink_rate: Still-air sink rate (m/s).
        origin: Launch (latitude, longitude).
        seed: Random seed.
    """
    if preset is not None:
        params = PRESETS[preset]
        baro_noise = params["baro_noise"]
        accel_noise = params["accel_noise"]
        thermal_strength = params["thermal_strength"]
        sink_rate = params["sink_rate"]
        output_dir = params["output_dir"]

    print("\n" + "=" * 70)
    print(f"Generating Glider Trace Dataset: {Path(output_dir).name}")
    print("=" * 70)

    print("\nStep 1: Generating flight profile...")
    profile = generate_flight_profile(
        duration=duration,
        sink_rate=sink_rate,
        thermal_strength=thermal_strength,
        seed=seed,
    )
    print(f"  Duration: {duration:.1f} s")
    print(f"  Max altitude: {profile['altitude'].max():.1f} m")
    print(f"  Climbing: {profile['climbing'].sum()} s")

    print("\nStep 2: Adding sensor noise...")
    print(f"  Baro noise: {baro_noise:.2f} m")
    print(f"  Accel noise: {accel_noise:.2f} m/s^2")
    records = to_trace_records(profile, origin, baro_noise, accel_noise, seed)

    print("\nStep 3: Replaying through the flight computer...")
    start = time.time()
    summary = replay_summary(records, profile)
    elapsed = time.time() - start
    print(f"  Time: {elapsed:.3f} s")
    print(f"  Mean |vario error|: {summary['mean_abs_vario_error_mps']:.2f} m/s")
    print(f"  Thermal found: {'YES' if summary['thermal_found'] else 'NO'}")

    out = Path(output_dir)
    save_trace(records, out / "trace.json")
    with open(out / "truth.json", "w", encoding="utf-8") as f:
        json.dump(
            {
                "t": profile["t"].tolist(),
                "altitude": profile["altitude"].tolist(),
                "vertical_velocity": profile["vertical_velocity"].tolist(),
                "terrain": profile["terrain"].tolist(),
            },
            f,
        )

    config = {
        "dataset": "glider_trace",
        "preset": preset,
        "duration_s": float(duration),
        "num_records": len(records),
        "origin": list(origin),
        "sensors": {
            "barometer": {"noise_std_m": baro_noise},
            "accelerometer": {"noise_std_mps2": accel_noise},
        },
        "air": {"thermal_strength_mps": thermal_strength, "sink_rate_mps": sink_rate},
        "replay": summary,
        "seed": seed,
    }
    with open(out / "config.json", "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)

    print(f"\n  Saved dataset to: {out}")
    print("\n" + "=" * 70)
    print("Dataset generation complete!")
    print("=" * 70)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate Synthetic Glider Flight Trace Dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Presets:
  baseline          Moderate thermals, clean barometer
  strong_thermals   4 m/s cores, stronger sink between them
  noisy             Noisy barometer and accelerometer

Examples:
  python scripts/generate_glider_trace_dataset.py --preset baseline
  python scripts/generate_glider_trace_dataset.py --output data/sim/my_trace --baro-noise 0.4
        """,
    )
    parser.add_argument(
        "--preset",
        type=str,
        choices=sorted(PRESETS),
        help="Use preset configuration (overrides other parameters)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="data/sim/glider_trace_baseline",
        help="Output directory (default: data/sim/glider_trace_baseline)",
    )

    flight_group = parser.add_argument_group("Flight Parameters")
    flight_group.add_argument(
        "--duration", type=float, default=900.0, help="Total duration in seconds (default: 900.0)"
    )
    flight_group.add_argument(
        "--thermal-strength", type=float, default=2.0, help="Peak thermal climb in m/s (default: 2.0)"
    )
    flight_group.add_argument(
        "--sink-rate", type=float, default=1.1, help="Still-air sink rate in m/s (default: 1.1)"
    )

    noise_group = parser.add_argument_group("Sensor Noise Parameters")
    noise_group.add_argument(
        "--baro-noise", type=float, default=0.15, help="Barometer noise in m (default: 0.15)"
    )
    noise_group.add_argument(
        "--accel-noise", type=float, default=0.05, help="Accelerometer noise in m/s^2 (default: 0.05)"
    )

    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")

    args = parser.parse_args()

    generate_dataset(
        output_dir=args.output,
        preset=args.preset,
        duration=args.duration,
        baro_noise=args.baro_noise,
        accel_noise=args.accel_noise,
        thermal_strength=args.thermal_strength,
        sink_rate=args.sink_rate,
        seed=args.seed,
    )


if __name__ == "__main__":
    main()
