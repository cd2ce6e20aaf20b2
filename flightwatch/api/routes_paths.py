# flightwatch/api/routes_paths.py
"""
Flight path preview routes.
"""

from fastapi import APIRouter, Depends, HTTPException

from ..exceptions import ValidationError
from ..paths import build_path
from ..safety import PathWeatherChecker
from ..settings import settings
from .dependencies import get_checker
from .schemas import (
    PathPreviewRequest,
    PathPreviewResponse,
    WaypointOut,
    checkpoint_out,
    verdict_out,
)

router = APIRouter(prefix="/paths", tags=["paths"])


@router.post("/preview", response_model=PathPreviewResponse)
def preview_path(
    request: PathPreviewRequest,
    checker: PathWeatherChecker = Depends(get_checker),
) -> PathPreviewResponse:
    """
    Build the waypoint/altitude profile for a route.

    With ``training_level`` set, weather is checked along the path as well.
    """
    try:
        departure = request.departure.resolve()
        arrival = request.arrival.resolve()
        if request.training_level:
            check = checker.check_route(
                departure, arrival, request.training_level, request.departure_time,
            )
            path, checkpoints, verdict = check.path, check.checkpoints, check.verdict
        else:
            path = build_path(
                departure,
                arrival,
                request.departure_time,
                spacing_nm=settings.waypoint_spacing_nm,
                ground_speed_kt=settings.cruise_speed_kt,
            )
            checkpoints, verdict = [], None
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PathPreviewResponse(
        total_distance_nm=path.total_distance_nm,
        cruise_altitude_ft=path.cruise_altitude_ft,
        estimated_duration_min=path.estimated_duration_min,
        departure_time=path.departure_time,
        arrival_time=path.arrival_time,
        waypoints=[
            WaypointOut(
                lat=w.lat,
                lon=w.lon,
                altitude_ft=w.altitude_ft,
                distance_from_start_nm=w.distance_from_start_nm,
                eta=w.eta,
            )
            for w in path.waypoints
        ],
        verdict=verdict_out(verdict),
        checkpoints=[checkpoint_out(c) for c in checkpoints],
    )
