# Geo module - great-circle math, terrain estimate, airport reference data
from .models import GeoPoint, Location
from .geodesy import EARTH_RADIUS_NM, distance_nm, bearing_deg, interpolate
from .terrain import estimate_terrain_elevation_ft
from .airports import AIRPORTS, get_airport

__all__ = [
    "GeoPoint",
    "Location",
    "EARTH_RADIUS_NM",
    "distance_nm",
    "bearing_deg",
    "interpolate",
    "estimate_terrain_elevation_ft",
    "AIRPORTS",
    "get_airport",
]
