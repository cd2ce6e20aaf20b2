# flightwatch/api/routes_monitoring.py
"""
Monitoring API routes.

Manual triggers for the weather monitoring run and single-flight re-checks.
"""

from fastapi import APIRouter, Depends, HTTPException

from ..exceptions import FlightNotFoundError, ValidationError
from ..logging import get_logger
from ..monitoring import MonitoringScheduler
from .dependencies import get_scheduler
from .schemas import FlightCheckOut, MonitoringRunResponse

logger = get_logger(__name__)

router = APIRouter(tags=["monitoring"])


@router.post("/monitoring/run", response_model=MonitoringRunResponse)
def run_monitoring(
    scheduler: MonitoringScheduler = Depends(get_scheduler),
) -> MonitoringRunResponse:
    """
    Run one monitoring pass over all active future flights.

    Per-flight failures are reported in ``results``; only a failure to load
    the batch returns 503.
    """
    try:
        summary = scheduler.run()
    except Exception as e:
        logger.error("manual_monitoring_run_failed", error=str(e))
        raise HTTPException(status_code=503, detail=f"Monitoring run failed: {e}")

    return MonitoringRunResponse(
        started_at=summary.started_at,
        completed_at=summary.completed_at,
        checked=summary.checked,
        succeeded=summary.succeeded,
        failed=summary.failed,
        flagged=summary.flagged,
        alerts_sent=summary.alerts_sent,
        alerts_suppressed=summary.alerts_suppressed,
        results=[FlightCheckOut(**r.to_dict()) for r in summary.results],
    )


@router.post("/flights/{flight_id}/check", response_model=FlightCheckOut)
def check_flight(
    flight_id: str,
    scheduler: MonitoringScheduler = Depends(get_scheduler),
) -> FlightCheckOut:
    """Re-check one flight now, with the same transition and alert rules."""
    try:
        result = scheduler.check_flight(flight_id)
    except FlightNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return FlightCheckOut(**result.to_dict())
