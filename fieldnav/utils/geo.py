from __future__ import annotations

from math import atan2, cos, degrees, floor, radians, sin, sqrt

from geographiclib.geodesic import Geodesic

EARTH_RADIUS_M = 6_371_000.0


def bearing_between(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Initial great-circle bearing from point 1 to point 2 in degrees [0,360)."""
    phi1, phi2 = radians(lat1), radians(lat2)
    dlng = radians(lng2 - lng1)
    y = sin(dlng) * cos(phi2)
    x = cos(phi1) * sin(phi2) - sin(phi1) * cos(phi2) * cos(dlng)
    brng = (degrees(atan2(y, x)) + 360.0) % 360.0
    # (-tiny + 360) % 360 rounds up to 360.0 in floating point
    return 0.0 if brng >= 360.0 else brng


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres on a sphere of radius EARTH_RADIUS_M."""
    dlat = radians(lat2 - lat1)
    dlng = radians(lng2 - lng1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
    # clamp: rounding can push a marginally outside [0, 1] for antipodal points
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))


def geodesic_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in metres on the WGS84 ellipsoid using GeographicLib."""
    g = Geodesic.WGS84.Inverse(lat1, lng1, lat2, lng2, Geodesic.DISTANCE)
    return float(g["s12"])


DISTANCE_MODELS = {
    "haversine": haversine_m,
    "wgs84": geodesic_m,
}


def delta_heading(bearing: float, heading: float) -> float:
    """Signed smallest rotation from heading to bearing, in (-180, 180].

    Positive means the bearing lies clockwise of the heading.
    """
    delta = bearing - heading
    while delta > 180.0:
        delta -= 360.0
    while delta <= -180.0:
        delta += 360.0
    return delta


def format_distance(meters: float) -> str:
    """Render a distance as whole metres below 1 km, else km with 2 decimals."""
    if meters < 1000:
        return f"{int(floor(meters + 0.5))} m"
    return f"{meters / 1000:.2f} km"
