# flightwatch/geo/geodesy.py
"""
Great-circle math on a spherical Earth.

All functions are pure and accept any object with ``lat``/``lon``
attributes in decimal degrees (Location, Waypoint, GeoPoint).
"""

import math

from .models import GeoPoint

# Mean Earth radius in nautical miles
EARTH_RADIUS_NM = 3440.065

# Below this central angle (radians) the slerp weights are numerically unstable
_MIN_CENTRAL_ANGLE = 1e-12


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine central angle between two points, all args in radians."""
    a = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    # Rounding can push a slightly outside [0, 1]
    a = min(1.0, max(0.0, a))
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_nm(a, b) -> float:
    """Great-circle (haversine) distance between two points in nautical miles."""
    return EARTH_RADIUS_NM * _central_angle(
        math.radians(a.lat), math.radians(a.lon),
        math.radians(b.lat), math.radians(b.lon),
    )


def bearing_deg(a, b) -> float:
    """
    Initial great-circle bearing from a to b.

    Returns:
        Degrees true in [0, 360). Identical points give 0.
    """
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_lambda = math.radians(b.lon - a.lon)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = (
        math.cos(phi1) * math.sin(phi2)
        - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    )
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def interpolate(a, b, fraction: float) -> GeoPoint:
    """
    Point at ``fraction`` of the way along the great-circle arc from a to b.

    Uses spherical linear interpolation. ``fraction`` is clamped to [0, 1].
    When sin(delta) vanishes (identical or antipodal endpoints) the great
    circle is undefined and the endpoints' coordinates are blended linearly,
    so the result is always finite.
    """
    fraction = min(1.0, max(0.0, fraction))

    phi1, lambda1 = math.radians(a.lat), math.radians(a.lon)
    phi2, lambda2 = math.radians(b.lat), math.radians(b.lon)

    delta = _central_angle(phi1, lambda1, phi2, lambda2)
    sin_delta = math.sin(delta)

    if abs(sin_delta) < _MIN_CENTRAL_ANGLE:
        return GeoPoint(
            lat=a.lat + (b.lat - a.lat) * fraction,
            lon=a.lon + (b.lon - a.lon) * fraction,
        )

    wa = math.sin((1 - fraction) * delta) / sin_delta
    wb = math.sin(fraction * delta) / sin_delta

    x = wa * math.cos(phi1) * math.cos(lambda1) + wb * math.cos(phi2) * math.cos(lambda2)
    y = wa * math.cos(phi1) * math.sin(lambda1) + wb * math.cos(phi2) * math.sin(lambda2)
    z = wa * math.sin(phi1) + wb * math.sin(phi2)

    return GeoPoint(
        lat=math.degrees(math.atan2(z, math.sqrt(x ** 2 + y ** 2))),
        lon=math.degrees(math.atan2(y, x)),
    )
