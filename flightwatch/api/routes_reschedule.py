# flightwatch/api/routes_reschedule.py
"""
Rescheduling API routes.
"""

from fastapi import APIRouter, Depends, HTTPException

from ..exceptions import ValidationError
from ..reschedule import SafeWindowSearch
from .dependencies import get_search
from .schemas import (
    CandidateOut,
    SafeWindowRequest,
    SafeWindowResponse,
    checkpoint_out,
    verdict_out,
)

router = APIRouter(prefix="/reschedule", tags=["reschedule"])


@router.post("/search", response_model=SafeWindowResponse)
def search_safe_window(
    request: SafeWindowRequest,
    search: SafeWindowSearch = Depends(get_search),
) -> SafeWindowResponse:
    """
    Find the earliest safe departure time from ``preferred_start``.

    "Nothing safe" is a normal 200 response with ``success`` false and the
    ranked candidates for manual override.
    """
    try:
        departure = request.departure.resolve()
        arrival = request.arrival.resolve()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = search.find_safe_time(
        departure, arrival, request.training_level, request.preferred_start,
    )

    return SafeWindowResponse(
        success=result.success,
        reason=result.reason,
        scheduled_time=result.scheduled_time,
        verdict=verdict_out(result.verdict),
        checkpoints=[checkpoint_out(c) for c in result.checkpoints],
        all_results=[
            CandidateOut(
                scheduled_time=r.scheduled_time,
                status=r.status,
                score=r.score,
                color=r.color,
                waypoint_count=r.waypoint_count,
                top_issues=r.top_issues,
                error=r.error,
            )
            for r in result.all_results
        ],
        attempts=result.attempts,
    )
