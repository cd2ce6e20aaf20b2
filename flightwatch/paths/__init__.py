# Paths module - waypoint generation, altitude profile, ETAs
from .models import Waypoint, FlightPath
from .builder import (
    build_path,
    generate_waypoints,
    assign_etas,
    cruise_altitude_ft,
    waypoint_altitude_ft,
    validate_route,
    DEFAULT_SPACING_NM,
    DEFAULT_GROUND_SPEED_KT,
)

__all__ = [
    "Waypoint",
    "FlightPath",
    "build_path",
    "generate_waypoints",
    "assign_etas",
    "cruise_altitude_ft",
    "waypoint_altitude_ft",
    "validate_route",
    "DEFAULT_SPACING_NM",
    "DEFAULT_GROUND_SPEED_KT",
]
