"""
Configuration for the estimator and the flight computer.

Configuration is a pair of frozen dataclasses, validated on construction,
that can be loaded from JSON. Named presets cover the common setups.

Example:
    >>> config = config_from_dict({"estimator": {"dead_band": 0.2}})
    >>> config.estimator.dead_band
    0.2
    >>> config.elevation_interval
    10.0
"""

import json
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple, Union


@dataclass(frozen=True)
class EstimatorConfig:
    """
    Tuning of the vertical-velocity / thermal detector.

    Attributes:
        history_capacity: Samples retained in the altitude and feature histories.
        time_step: Δt of the kinematic state transition (one barometric tick).
        process_noise: Diagonal value of Q.
        observation_noise: Diagonal value of R.
        initial_covariance: Diagonal of the prior error covariance
                            (altitude and vertical speed uncertain, acceleration not).
        dead_band: |v| below this is reported as 0 [m/s].
        thermal_min_velocity: Climb rate above which a thermal is marked [m/s].
        thermal_min_acceleration: Vertical acceleration above which a thermal is marked [m/s²].
        gain_lag_ratio: Predicted/raw altitude ratio separating lag from lead.
        gain_lag_min_acceleration: Acceleration needed before a lag is corrected [m/s²].
        gain_lag_factor: Baseline scaling applied when the filter lags.
        gain_lead_factor: Baseline scaling applied when the filter leads.
    """

    history_capacity: int = 12
    time_step: float = 1.0
    process_noise: float = 1e-2
    observation_noise: float = 1e-2
    initial_covariance: Tuple[float, float, float] = (10.0, 10.0, 1.0)
    dead_band: float = 0.1
    thermal_min_velocity: float = 0.5
    thermal_min_acceleration: float = 0.1
    gain_lag_ratio: float = 0.85
    gain_lag_min_acceleration: float = 0.25
    gain_lag_factor: float = 1.2
    gain_lead_factor: float = 0.8

    def __post_init__(self) -> None:
        if self.history_capacity < 1:
            raise ValueError(f"history_capacity must be >= 1, got {self.history_capacity}")
        if self.time_step <= 0:
            raise ValueError(f"time_step must be positive, got {self.time_step}")
        if self.process_noise <= 0 or self.observation_noise <= 0:
            raise ValueError("process_noise and observation_noise must be positive")
        if len(self.initial_covariance) != 3:
            raise ValueError(
                f"initial_covariance must have 3 entries, got {len(self.initial_covariance)}"
            )
        if any(v < 0 for v in self.initial_covariance):
            raise ValueError("initial_covariance entries must be non-negative")
        if self.dead_band < 0:
            raise ValueError(f"dead_band must be non-negative, got {self.dead_band}")
        # JSON hands lists back; keep the field hashable
        object.__setattr__(self, "initial_covariance", tuple(float(v) for v in self.initial_covariance))


@dataclass(frozen=True)
class FlightComputerConfig:
    """
    Top-level configuration of the flight computer.

    Attributes:
        estimator: Detector tuning.
        elevation_interval: Minimum seconds between terrain elevation requests.
        elevation_timeout: Timeout of one elevation request [s].
        min_glide_groundspeed: Below this groundspeed the glide ratio is 0 [m/s].
        landing_max_terrain: Terrain elevation under which a landing may be detected [m].
        landing_max_groundspeed: Groundspeed under which a landing may be detected [m/s].
        launch_min_groundspeed: Groundspeed that launches an armed flight [m/s].
        publish_period: Snapshot publisher period [s].
        trim_speed: Glider trim airspeed used for the relative wind estimate [m/s].
        force_ready: Debug/test override of the readiness gate.
    """

    estimator: EstimatorConfig = field(default_factory=EstimatorConfig)
    elevation_interval: float = 10.0
    elevation_timeout: float = 5.0
    min_glide_groundspeed: float = 1.5
    landing_max_terrain: float = 3.0
    landing_max_groundspeed: float = 1.0
    launch_min_groundspeed: float = 5.5
    publish_period: float = 0.1
    trim_speed: float = 9.4
    force_ready: bool = False

    def __post_init__(self) -> None:
        if self.elevation_interval < 0:
            raise ValueError(f"elevation_interval must be >= 0, got {self.elevation_interval}")
        if self.elevation_timeout <= 0:
            raise ValueError(f"elevation_timeout must be positive, got {self.elevation_timeout}")
        if self.publish_period <= 0:
            raise ValueError(f"publish_period must be positive, got {self.publish_period}")
        if self.min_glide_groundspeed < 0:
            raise ValueError("min_glide_groundspeed must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


PRESETS: Dict[str, Dict[str, Any]] = {
    "default": {},
    # A trace carries no availability information; terrain lookups are
    # spaced out so an online replay does not hammer the service.
    "replay": {
        "elevation_interval": 3600.0,
        "force_ready": True,
    },
}


def config_from_dict(data: Dict[str, Any]) -> FlightComputerConfig:
    """
    Build a configuration from a (possibly partial) nested dictionary.

    Raises:
        ValueError: On unknown keys or invalid values.
    """
    data = dict(data)
    estimator_data = dict(data.pop("estimator", {}) or {})

    _check_keys(EstimatorConfig, estimator_data, "estimator")
    _check_keys(FlightComputerConfig, data, "config")

    estimator = EstimatorConfig(**estimator_data)
    return FlightComputerConfig(estimator=estimator, **data)


def load_config(path: Union[str, Path]) -> FlightComputerConfig:
    """Load a configuration from a JSON file."""
    with open(path, "r") as f:
        data = json.load(f)
    return config_from_dict(data)


def preset(name: str, **overrides: Any) -> FlightComputerConfig:
    """Return a named preset, optionally with top-level overrides."""
    if name not in PRESETS:
        raise ValueError(f"Unknown preset '{name}'. Available: {sorted(PRESETS)}")
    config = config_from_dict(PRESETS[name])
    return replace(config, **overrides) if overrides else config


def _check_keys(cls, data: Dict[str, Any], section: str) -> None:
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {section} keys: {sorted(unknown)}")
