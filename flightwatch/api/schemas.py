# flightwatch/api/schemas.py
"""
Request/response models shared by the routers.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..exceptions import RouteValidationError
from ..geo import Location, get_airport


class LocationIn(BaseModel):
    """Airport by code; coordinates optional for codes in the built-in table."""
    code: str
    name: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    def resolve(self) -> Location:
        """
        Raises:
            RouteValidationError: Unknown code without coordinates
        """
        if self.lat is not None and self.lon is not None:
            return Location(self.code.upper(), self.name or self.code.upper(), self.lat, self.lon)
        airport = get_airport(self.code)
        if airport is None:
            raise RouteValidationError(f"Unknown airport code: {self.code}")
        return airport


class VerdictOut(BaseModel):
    status: str
    score: float
    color: str


class CheckpointOut(BaseModel):
    lat: float
    lon: float
    altitude_ft: Optional[int] = None
    time: Optional[datetime] = None
    safety_status: str
    safety_score: float
    reason: str
    weather: Optional[Dict[str, Any]] = None


def checkpoint_out(checkpoint) -> CheckpointOut:
    return CheckpointOut(
        lat=checkpoint.lat,
        lon=checkpoint.lon,
        altitude_ft=checkpoint.altitude_ft,
        time=checkpoint.time,
        safety_status=checkpoint.safety_status.value,
        safety_score=checkpoint.safety_score,
        reason=checkpoint.reason,
        weather=checkpoint.weather.to_dict() if checkpoint.weather else None,
    )


def verdict_out(verdict) -> Optional[VerdictOut]:
    if verdict is None:
        return None
    return VerdictOut(status=verdict.status.value, score=verdict.score, color=verdict.color.value)


class FlightCheckOut(BaseModel):
    flight_id: str
    success: bool
    previous_color: Optional[str] = None
    new_color: Optional[str] = None
    safety_status: Optional[str] = None
    safety_score: Optional[float] = None
    color_changed: bool = False
    needs_rescheduling: bool = False
    alert_sent: bool = False
    alert_suppressed: bool = False
    failed_checkpoints: int = 0
    error: Optional[str] = None


class MonitoringRunResponse(BaseModel):
    started_at: datetime
    completed_at: Optional[datetime] = None
    checked: int
    succeeded: int
    failed: int
    flagged: int
    alerts_sent: int
    alerts_suppressed: int
    results: List[FlightCheckOut]


class SafeWindowRequest(BaseModel):
    departure: LocationIn
    arrival: LocationIn
    training_level: str
    preferred_start: datetime


class CandidateOut(BaseModel):
    scheduled_time: datetime
    status: str
    score: float
    color: Optional[str] = None
    waypoint_count: int
    top_issues: List[str]
    error: Optional[str] = None


class SafeWindowResponse(BaseModel):
    success: bool
    reason: str
    scheduled_time: Optional[datetime] = None
    verdict: Optional[VerdictOut] = None
    checkpoints: List[CheckpointOut]
    all_results: List[CandidateOut]
    attempts: int


class PathPreviewRequest(BaseModel):
    departure: LocationIn
    arrival: LocationIn
    departure_time: datetime
    training_level: Optional[str] = None  # When set, weather is checked too


class WaypointOut(BaseModel):
    lat: float
    lon: float
    altitude_ft: int
    distance_from_start_nm: float
    eta: Optional[datetime] = None


class PathPreviewResponse(BaseModel):
    total_distance_nm: float
    cruise_altitude_ft: int
    estimated_duration_min: float
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    waypoints: List[WaypointOut]
    verdict: Optional[VerdictOut] = None
    checkpoints: List[CheckpointOut] = []
