"""
Great-circle helpers for thermal navigation.

Used to turn the stored thermal fix into a heading and a distance from the
glider's current position. A spherical Earth is accurate enough for the
few-kilometre ranges involved in thermal hunting.

References:
    Initial bearing and haversine distance on a sphere of mean Earth radius.
"""

import math

from flightcore.utils.angles import wrap_degrees

# Mean Earth radius [m] (IUGG)
EARTH_RADIUS_M = 6371008.8


def initial_bearing_deg(
    lat_from: float, lon_from: float, lat_to: float, lon_to: float
) -> float:
    """
    Initial great-circle bearing between two points.

    Args:
        lat_from, lon_from: Origin in degrees.
        lat_to, lon_to: Destination in degrees.

    Returns:
        Bearing in degrees clockwise from true north, in [0, 360).

    Example:
        >>> round(initial_bearing_deg(0.0, 0.0, 0.0, 1.0), 6)
        90.0
    """
    phi1 = math.radians(lat_from)
    phi2 = math.radians(lat_to)
    d_lambda = math.radians(lon_to - lon_from)

    x = math.sin(d_lambda) * math.cos(phi2)
    y = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return wrap_degrees(math.degrees(math.atan2(x, y)))


def haversine_distance_m(
    lat_from: float, lon_from: float, lat_to: float, lon_to: float
) -> float:
    """
    Great-circle distance in metres.

    Example:
        >>> round(haversine_distance_m(0.0, 0.0, 0.0, 1.0) / 1000.0, 1)
        111.2
    """
    phi1 = math.radians(lat_from)
    phi2 = math.radians(lat_to)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lon_to - lon_from)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c
