# flightwatch/paths/models.py
"""
Flight path models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class Waypoint:
    """One point along the route. Order in the path encodes progression."""
    lat: float
    lon: float
    altitude_ft: int
    distance_from_start_nm: float
    eta: Optional[datetime] = None  # Set by assign_etas


@dataclass(frozen=True)
class FlightPath:
    """Waypoints plus route-level figures."""
    waypoints: List[Waypoint]
    total_distance_nm: float
    cruise_altitude_ft: int
    estimated_duration_min: float

    @property
    def departure_time(self) -> Optional[datetime]:
        return self.waypoints[0].eta if self.waypoints else None

    @property
    def arrival_time(self) -> Optional[datetime]:
        return self.waypoints[-1].eta if self.waypoints else None
