"""
Glide performance and height above terrain.

Definitions:
    - Glide ratio: horizontal distance per unit of altitude lost,
      |groundspeed / vertical velocity|.
    - Calculated elevation: barometric altitude above the terrain under
      the glider, clamped at 0.
    - Glide range: calculated elevation × glide ratio.

Degenerate cases are mapped to sentinels instead of errors: a glider with
no vertical speed has an infinite glide ratio, one that is barely moving
has a glide ratio of 0.
"""

import math
from dataclasses import dataclass

from flightcore.utils.angles import wrap_degrees
from flightcore.utils.numeric import round_to_places

MIN_GLIDE_GROUNDSPEED = 1.5  # [m/s]
LANDING_MAX_TERRAIN = 3.0  # [m]
LANDING_MAX_GROUNDSPEED = 1.0  # [m/s]


def glide_ratio(
    groundspeed: float,
    vertical_velocity: float,
    min_groundspeed: float = MIN_GLIDE_GROUNDSPEED,
) -> float:
    """
    Glide ratio for the current groundspeed and vertical speed.

    Returns:
        0.0 when groundspeed is below ``min_groundspeed`` (or non-finite),
        +inf when vertical velocity is exactly 0, else
        |groundspeed / vertical_velocity| rounded to one decimal.

    Example:
        >>> glide_ratio(10.0, -1.0)
        10.0
        >>> glide_ratio(10.0, 0.0)
        inf
        >>> glide_ratio(1.0, -1.0)
        0.0
    """
    if not math.isfinite(groundspeed) or groundspeed < min_groundspeed:
        return 0.0
    if vertical_velocity == 0.0:
        return math.inf
    if not math.isfinite(vertical_velocity):
        return 0.0
    return round_to_places(abs(groundspeed / vertical_velocity), 1)


def calculated_elevation(baro_altitude: float, terrain_elevation: float) -> float:
    """Height above terrain, max(baro − terrain, 0)."""
    return max(baro_altitude - terrain_elevation, 0.0)


def glide_range(elevation: float, ratio: float) -> float:
    """
    Distance reachable in still air [m].

    Zero elevation gives zero range even with an infinite glide ratio.
    """
    if elevation <= 0.0 or ratio <= 0.0:
        return 0.0
    return elevation * ratio


def is_landing(
    terrain_elevation: float,
    groundspeed: float,
    max_terrain: float = LANDING_MAX_TERRAIN,
    max_groundspeed: float = LANDING_MAX_GROUNDSPEED,
) -> bool:
    """Landing heuristic: near-zero terrain reference and no groundspeed."""
    return terrain_elevation < max_terrain and groundspeed < max_groundspeed


@dataclass(frozen=True)
class WindEstimate:
    """Relative wind from the ground/air vector difference.

    Attributes:
        speed: Wind speed [m/s], rounded to 0.1.
        direction: Direction of the wind vector [deg], rounded to 0.1.
    """

    speed: float
    direction: float


def relative_wind(
    groundspeed: float,
    ground_track_deg: float,
    heading_deg: float,
    trim_speed: float,
) -> WindEstimate:
    """
    Estimate wind as the difference of the ground vector and the air vector.

    The air vector is approximated by the trim airspeed along the compass
    heading; the ground vector comes from GPS speed and course.

    Example:
        >>> relative_wind(12.0, 0.0, 0.0, 10.0)
        WindEstimate(speed=2.0, direction=0.0)
    """
    track = math.radians(ground_track_deg)
    heading = math.radians(heading_deg)

    wind_x = groundspeed * math.cos(track) - trim_speed * math.cos(heading)
    wind_y = groundspeed * math.sin(track) - trim_speed * math.sin(heading)

    speed = round_to_places(math.hypot(wind_x, wind_y), 1)
    direction = round_to_places(wrap_degrees(math.degrees(math.atan2(wind_y, wind_x))), 1)
    return WindEstimate(speed=speed, direction=direction)
