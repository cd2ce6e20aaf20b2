# flightwatch/monitoring/scheduler.py
"""
Periodic weather monitoring of scheduled flights.

Each run:
1. Loads up to ``monitor_batch_limit`` flights with status "scheduled" and
   a future departure (soonest departure first)
2. Re-derives each flight's checkpoints and verdict (concurrently, one
   worker per flight up to ``monitor_max_workers``)
3. Compares the new color with the stored one:
   - changed to RED (or YELLOW for a restrictive level) -> needs rescheduling
   - back to GREEN -> flag cleared
   A flight whose check the deadline cut short is reported as failed and
   its stored state is left untouched
4. Persists checkpoints, verdict and color for every flight
5. Sends an alert through the NotificationGate while the flight stays flagged

Evaluation runs in worker threads; persistence and alerts are applied on
the calling thread as evaluations complete. A failing flight is logged and
reported, never raised. Only a failure to load the batch fails the run.

Collaborators (duck-typed):
    weather.get_weather(lat, lon, at) -> WeatherObservation
    store.list_active_future_flights(limit, now) -> [ScheduledFlight]
    store.get_flight(flight_id) -> ScheduledFlight | None
    store.update_flight_weather_state(flight_id, checkpoints, verdict, color,
                                      needs_rescheduling, checked_at)
    store.get_last_alert_timestamp(flight_id) -> datetime | None
    store.record_alert_sent(flight_id, timestamp)
    dispatcher.send_safety_alert(flight, verdict, checkpoints) -> bool
"""

import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from ..exceptions import FlightNotFoundError
from ..logging import configure_logging, get_logger
from ..safety import (
    CertificationLevel,
    PathCheck,
    PathWeatherChecker,
    SafetyColor,
    ScheduledFlight,
    requires_rescheduling,
)
from ..settings import Settings, settings as default_settings
from .gate import NotificationGate

logger = get_logger(__name__)

INCOMPLETE_ERROR = "Not evaluated: deadline expired before all waypoints were checked"


@dataclass
class FlightCheckResult:
    """Outcome of re-checking one flight."""
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

    def to_dict(self) -> Dict[str, Any]:
        return {
            "flight_id": self.flight_id,
            "success": self.success,
            "previous_color": self.previous_color,
            "new_color": self.new_color,
            "safety_status": self.safety_status,
            "safety_score": self.safety_score,
            "color_changed": self.color_changed,
            "needs_rescheduling": self.needs_rescheduling,
            "alert_sent": self.alert_sent,
            "alert_suppressed": self.alert_suppressed,
            "failed_checkpoints": self.failed_checkpoints,
            "error": self.error,
        }


@dataclass
class MonitoringRunResult:
    """Summary of one monitoring run."""
    started_at: datetime
    results: List[FlightCheckResult] = field(default_factory=list)
    completed_at: Optional[datetime] = None

    @property
    def checked(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def flagged(self) -> int:
        return sum(1 for r in self.results if r.needs_rescheduling)

    @property
    def alerts_sent(self) -> int:
        return sum(1 for r in self.results if r.alert_sent)

    @property
    def alerts_suppressed(self) -> int:
        return sum(1 for r in self.results if r.alert_suppressed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "checked": self.checked,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "flagged": self.flagged,
            "alerts_sent": self.alerts_sent,
            "alerts_suppressed": self.alerts_suppressed,
            "results": [r.to_dict() for r in self.results],
        }


def _color(value: Any) -> SafetyColor:
    """Stored color, defaulting to GREEN for never-checked flights."""
    if value is None or value == "":
        return SafetyColor.GREEN
    return SafetyColor(value)


class MonitoringScheduler:
    """
    Re-evaluates stored flights and drives rescheduling flags and alerts.

    Usage:
        scheduler = MonitoringScheduler(weather, store, dispatcher)
        summary = scheduler.run()
    """

    def __init__(
        self,
        weather,
        store,
        dispatcher=None,
        gate: Optional[NotificationGate] = None,
        checker: Optional[PathWeatherChecker] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or default_settings
        self.store = store
        self.dispatcher = dispatcher
        self.gate = gate or NotificationGate(
            timedelta(hours=self.settings.alert_cooldown_hours)
        )
        self.checker = checker or PathWeatherChecker(
            weather, settings=self.settings, sleep=sleep, clock=clock,
        )
        self._clock = clock

    def run(self, deadline: Optional[datetime] = None) -> MonitoringRunResult:
        """
        Run one monitoring pass over the active batch.

        Args:
            deadline: Optional wall-clock limit; flights still being evaluated
                stop issuing weather lookups once it passes

        Raises:
            Exception: Only if loading the batch from the store fails
        """
        now = self._clock()
        summary = MonitoringRunResult(started_at=now)

        try:
            flights = list(self.store.list_active_future_flights(
                limit=self.settings.monitor_batch_limit, now=now,
            ))
        except Exception:
            logger.exception("monitoring_batch_query_failed")
            raise

        logger.info("monitoring_started", flights=len(flights))

        if flights:
            order = {flight.id: index for index, flight in enumerate(flights)}
            workers = max(1, min(self.settings.monitor_max_workers, len(flights)))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self._evaluate, flight, deadline): flight
                    for flight in flights
                }
                for future in as_completed(futures):
                    summary.results.append(self._settle(futures[future], future))
            summary.results.sort(key=lambda r: order.get(r.flight_id, len(order)))

        summary.completed_at = self._clock()
        logger.info(
            "monitoring_complete",
            checked=summary.checked,
            failed=summary.failed,
            flagged=summary.flagged,
            alerts_sent=summary.alerts_sent,
            alerts_suppressed=summary.alerts_suppressed,
        )
        return summary

    def check_flight(self, flight_id: str, deadline: Optional[datetime] = None) -> FlightCheckResult:
        """
        Manually re-check a single flight with the same rules as ``run``.

        Raises:
            FlightNotFoundError: No such flight
            ValidationError: Flight route or level is invalid
        """
        flight = self.store.get_flight(flight_id)
        if flight is None:
            raise FlightNotFoundError(flight_id)

        logger.info("manual_flight_check", flight_id=flight_id)
        check = self._evaluate(flight, deadline)
        return self.apply_check(flight, check)

    def _evaluate(self, flight: ScheduledFlight, deadline: Optional[datetime]) -> PathCheck:
        return self.checker.check_route(
            flight.departure,
            flight.arrival,
            flight.training_level,
            flight.scheduled_time,
            deadline=deadline,
        )

    def _settle(self, flight: ScheduledFlight, future) -> FlightCheckResult:
        try:
            return self.apply_check(flight, future.result())
        except Exception as e:
            logger.error(
                "flight_check_failed",
                exc_info=True,
                flight_id=flight.id,
                error=str(e),
            )
            return FlightCheckResult(flight_id=flight.id, success=False, error=str(e))

    def apply_check(self, flight: ScheduledFlight, check: PathCheck) -> FlightCheckResult:
        """
        Apply the color state machine, persist, and alert if permitted.
        """
        now = self._clock()
        level = CertificationLevel.parse(flight.training_level)
        previous = _color(flight.last_safety_color)

        # A route cut short by the deadline was never resolved; leave stored state alone
        if not check.complete:
            logger.warning(
                "flight_check_incomplete",
                flight_id=flight.id,
                evaluated=len(check.checkpoints) - check.skipped_checkpoints,
                waypoints=len(check.checkpoints),
            )
            return FlightCheckResult(
                flight_id=flight.id,
                success=False,
                previous_color=previous.value,
                error=INCOMPLETE_ERROR,
            )

        new = check.verdict.color
        unsafe = requires_rescheduling(new, level)
        changed = new != previous

        if changed and unsafe:
            needs_rescheduling = True
        elif new == SafetyColor.GREEN:
            needs_rescheduling = False
        else:
            needs_rescheduling = bool(flight.needs_rescheduling)

        self.store.update_flight_weather_state(
            flight.id,
            check.checkpoints,
            check.verdict,
            new,
            needs_rescheduling,
            checked_at=now,
        )

        logger.info(
            "flight_checked",
            flight_id=flight.id,
            previous_color=previous.value,
            new_color=new.value,
            changed=changed,
            status=check.verdict.status.value,
            score=round(check.verdict.score, 1),
            needs_rescheduling=needs_rescheduling,
        )

        result = FlightCheckResult(
            flight_id=flight.id,
            success=True,
            previous_color=previous.value,
            new_color=new.value,
            safety_status=check.verdict.status.value,
            safety_score=check.verdict.score,
            color_changed=changed,
            needs_rescheduling=needs_rescheduling,
            failed_checkpoints=check.failed_checkpoints,
        )

        if needs_rescheduling and unsafe:
            self._alert(flight, check, now, result)

        return result

    def _alert(self, flight: ScheduledFlight, check: PathCheck, now: datetime, result: FlightCheckResult):
        log = logger.bind(flight_id=flight.id)
        decision = self.gate.evaluate(self.store.get_last_alert_timestamp(flight.id), now)
        if not decision.allowed:
            result.alert_suppressed = True
            log.info("alert_suppressed", reason=decision.reason)
            return

        if self.dispatcher is None:
            log.warning("alert_dispatcher_not_configured")
            return

        try:
            sent = bool(self.dispatcher.send_safety_alert(flight, check.verdict, check.checkpoints))
        except Exception as e:
            log.error("alert_dispatch_failed", exc_info=True, error=str(e))
            return

        if not sent:
            log.warning("alert_not_delivered")
            return

        result.alert_sent = True
        try:
            self.store.record_alert_sent(flight.id, decision.record_at)
        except Exception as e:
            log.error("alert_timestamp_not_recorded", exc_info=True, error=str(e))

        log.info("alert_sent", color=check.verdict.color.value)


def build_default_scheduler(settings: Optional[Settings] = None) -> MonitoringScheduler:
    """Scheduler wired to OpenWeatherMap, the SQL store and the webhook dispatcher."""
    from ..db import SqlFlightStore, get_engine
    from ..ingestion import OpenWeatherClient
    from ..notifications import WebhookAlertDispatcher

    settings = settings or default_settings
    return MonitoringScheduler(
        weather=OpenWeatherClient(settings=settings),
        store=SqlFlightStore(get_engine(settings.database_url)),
        dispatcher=WebhookAlertDispatcher(settings=settings),
        settings=settings,
    )


def main() -> int:
    """One-shot monitoring run for cron: ``flightwatch-monitor``."""
    configure_logging(default_settings.log_level, json_output=default_settings.log_json, force=True)
    try:
        summary = build_default_scheduler().run()
    except Exception:
        logger.exception("monitoring_run_failed")
        return 1
    return 0 if summary.failed == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
