# flightwatch/paths/builder.py
"""
Flight path generation.

Turns a route (two Locations) and a departure time into an ordered list of
waypoints along the great circle, each with a climb/cruise/descent altitude
and an ETA.

Altitude selection:
- Cruise from distance bands, then VFR hemispheric rule
  (eastbound odd thousands + 500, westbound even thousands + 500)
- Raised to clear estimated terrain along the route by 2,000 ft
- Climb over min(50 NM, 15%) of the route from pattern altitude,
  mirror-image descent at the end
"""

import dataclasses
import math
from datetime import datetime, timedelta, timezone
from typing import List, Tuple

from ..exceptions import RouteValidationError
from ..geo import Location, bearing_deg, distance_nm, interpolate, estimate_terrain_elevation_ft
from .models import FlightPath, Waypoint

DEFAULT_SPACING_NM = 50.0
DEFAULT_GROUND_SPEED_KT = 120.0

# (upper bound exclusive NM, cruise altitude ft)
CRUISE_BANDS = [
    (100.0, 3500),
    (300.0, 5500),
    (600.0, 7500),
]
LONG_RANGE_CRUISE_FT = 9500

EASTBOUND_LEVELS = [3500, 5500, 7500, 9500, 11500]
WESTBOUND_LEVELS = [4500, 6500, 8500, 10500, 12500]

TERRAIN_CLEARANCE_FT = 2000
# Fractions of the route where terrain is sampled
TERRAIN_SAMPLE_FRACTIONS = (0.25, 0.5, 0.75)

CLIMB_FRACTION = 0.15
MAX_CLIMB_DISTANCE_NM = 50.0
PATTERN_HEIGHT_FT = 1000
DEFAULT_DEPARTURE_ELEVATION_FT = 700
DEFAULT_ARRIVAL_ELEVATION_FT = 500

# Anything shorter is treated as the same point
MIN_ROUTE_DISTANCE_NM = 1e-6


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def validate_route(departure: Location, arrival: Location) -> float:
    """
    Reject routes that cannot be flown.

    Returns:
        Route distance in NM

    Raises:
        RouteValidationError: Missing endpoint, identical endpoints,
            or zero-length route
    """
    if departure is None or arrival is None:
        raise RouteValidationError("Route requires both departure and arrival")

    if departure.code and departure.code == arrival.code:
        raise RouteValidationError(
            f"Departure and arrival are the same airport: {departure.code}"
        )

    total = distance_nm(departure, arrival)
    if total < MIN_ROUTE_DISTANCE_NM:
        raise RouteValidationError(
            f"Route {departure.code} -> {arrival.code} has zero length"
        )
    return total


def is_eastbound(departure: Location, arrival: Location) -> bool:
    """Magnetic-course stand-in: true course 0-179 is eastbound."""
    return bearing_deg(departure, arrival) < 180.0


def cruise_altitude_ft(departure: Location, arrival: Location, total_distance_nm: float) -> int:
    """Select cruise altitude from distance, direction of flight and terrain."""
    eastbound = is_eastbound(departure, arrival)

    altitude = LONG_RANGE_CRUISE_FT
    for upper_nm, band_altitude in CRUISE_BANDS:
        if total_distance_nm < upper_nm:
            altitude = band_altitude
            break

    # Bands are eastbound (odd) levels; westbound takes the even level above
    if not eastbound and altitude % 2000 == 1500:
        altitude += 1000

    terrain = max(
        estimate_terrain_elevation_ft(point.lat, point.lon)
        for point in (interpolate(departure, arrival, f) for f in TERRAIN_SAMPLE_FRACTIONS)
    )
    min_safe_altitude = terrain + TERRAIN_CLEARANCE_FT

    if altitude < min_safe_altitude:
        levels = EASTBOUND_LEVELS if eastbound else WESTBOUND_LEVELS
        altitude = next(
            (level for level in levels if level >= min_safe_altitude),
            altitude + 2000,
        )

    return altitude


def waypoint_altitude_ft(
    distance_from_start_nm: float,
    total_distance_nm: float,
    cruise_altitude: float,
    departure_elevation_ft: float = DEFAULT_DEPARTURE_ELEVATION_FT,
    arrival_elevation_ft: float = DEFAULT_ARRIVAL_ELEVATION_FT,
) -> float:
    """
    Altitude at a point of the three-phase profile.

    Climb from departure pattern altitude to cruise, cruise, then descend to
    arrival pattern altitude. Climb and descent each span
    min(50 NM, 15% of route).
    """
    if total_distance_nm <= 0:
        return max(0.0, departure_elevation_ft + PATTERN_HEIGHT_FT)

    phase_distance = min(MAX_CLIMB_DISTANCE_NM, total_distance_nm * CLIMB_FRACTION)
    takeoff_alt = departure_elevation_ft + PATTERN_HEIGHT_FT
    landing_alt = arrival_elevation_ft + PATTERN_HEIGHT_FT

    distance_from_start_nm = min(max(distance_from_start_nm, 0.0), total_distance_nm)

    if distance_from_start_nm <= phase_distance:
        fraction = distance_from_start_nm / phase_distance
        altitude = takeoff_alt + (cruise_altitude - takeoff_alt) * fraction
    else:
        remaining = total_distance_nm - distance_from_start_nm
        if remaining <= phase_distance:
            fraction = remaining / phase_distance
            altitude = landing_alt + (cruise_altitude - landing_alt) * fraction
        else:
            altitude = cruise_altitude

    return max(0.0, altitude)


def _route_waypoints(
    departure: Location,
    arrival: Location,
    spacing_nm: float,
) -> Tuple[List[Waypoint], float, int]:
    if spacing_nm <= 0:
        raise RouteValidationError(f"Waypoint spacing must be positive, got {spacing_nm}")

    total = validate_route(departure, arrival)
    cruise = cruise_altitude_ft(departure, arrival, total)

    count = max(2, math.ceil(total / spacing_nm) + 1)
    waypoints = []
    for i in range(count):
        fraction = i / (count - 1)
        along = total * fraction
        point = interpolate(departure, arrival, fraction)
        waypoints.append(Waypoint(
            lat=point.lat,
            lon=point.lon,
            altitude_ft=int(round(waypoint_altitude_ft(along, total, cruise))),
            distance_from_start_nm=along,
        ))
    return waypoints, total, cruise


def generate_waypoints(
    departure: Location,
    arrival: Location,
    spacing_nm: float = DEFAULT_SPACING_NM,
) -> List[Waypoint]:
    """
    Waypoints along the great circle no more than ``spacing_nm`` apart.

    Always includes departure and arrival. ETAs are left unset.
    """
    waypoints, _, _ = _route_waypoints(departure, arrival, spacing_nm)
    return waypoints


def assign_etas(
    waypoints: List[Waypoint],
    departure_time: datetime,
    ground_speed_kt: float = DEFAULT_GROUND_SPEED_KT,
) -> List[Waypoint]:
    """Return copies of ``waypoints`` with eta = departure + distance / speed."""
    if ground_speed_kt <= 0:
        raise RouteValidationError(f"Ground speed must be positive, got {ground_speed_kt}")

    departure_time = _as_utc(departure_time)
    return [
        dataclasses.replace(
            wp,
            eta=departure_time + timedelta(hours=wp.distance_from_start_nm / ground_speed_kt),
        )
        for wp in waypoints
    ]


def build_path(
    departure: Location,
    arrival: Location,
    departure_time: datetime,
    spacing_nm: float = DEFAULT_SPACING_NM,
    ground_speed_kt: float = DEFAULT_GROUND_SPEED_KT,
) -> FlightPath:
    """
    Full flight path for a route and departure time.

    Raises:
        RouteValidationError: Route has zero length or parameters are invalid
    """
    waypoints, total, cruise = _route_waypoints(departure, arrival, spacing_nm)
    waypoints = assign_etas(waypoints, departure_time, ground_speed_kt)

    return FlightPath(
        waypoints=waypoints,
        total_distance_nm=total,
        cruise_altitude_ft=cruise,
        estimated_duration_min=total / ground_speed_kt * 60.0,
    )
