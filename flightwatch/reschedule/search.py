# flightwatch/reschedule/search.py
"""
Safe departure window search.

Given a route, a training level and a preferred start, evaluates a grid of
candidate departure times (slot hours x horizon days, future only, capped)
concurrently and picks the chronologically first one whose path verdict
is safe. Every candidate is reported back ranked, so a caller can offer a
manual override when nothing is safe.

A candidate whose evaluation raises becomes an "error" entry; the search
itself never raises.
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Callable, Dict, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..exceptions import ValidationError
from ..geo import Location
from ..logging import get_logger
from ..paths import validate_route
from ..safety import (
    CertificationLevel,
    Checkpoint,
    PathCheck,
    PathVerdict,
    PathWeatherChecker,
)
from ..safety.assessor import ACCEPTABLE_REASON
from ..settings import Settings, settings as default_settings

logger = get_logger(__name__)

ERROR_STATUS = "error"

# Ranking of candidate statuses, best first
STATUS_RANK: Dict[str, int] = {
    "safe": 0,
    "marginal": 1,
    "dangerous": 2,
    ERROR_STATUS: 3,
}

MAX_TOP_ISSUES = 3


@dataclass
class CandidateResult:
    """Evaluation of one candidate departure time."""
    scheduled_time: datetime
    status: str  # safe | marginal | dangerous | error
    score: float
    color: Optional[str] = None
    verdict: Optional[PathVerdict] = None
    checkpoints: List[Checkpoint] = field(default_factory=list)
    waypoint_count: int = 0
    top_issues: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_safe(self) -> bool:
        return self.status == "safe"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scheduled_time": self.scheduled_time.isoformat(),
            "status": self.status,
            "score": self.score,
            "color": self.color,
            "waypoint_count": self.waypoint_count,
            "top_issues": self.top_issues,
            "error": self.error,
        }


@dataclass
class SafeWindowResult:
    """Outcome of a safe window search."""
    success: bool
    reason: str
    scheduled_time: Optional[datetime] = None
    checkpoints: List[Checkpoint] = field(default_factory=list)
    verdict: Optional[PathVerdict] = None
    all_results: List[CandidateResult] = field(default_factory=list)
    attempts: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "reason": self.reason,
            "scheduled_time": self.scheduled_time.isoformat() if self.scheduled_time else None,
            "verdict": self.verdict.to_dict() if self.verdict else None,
            "checkpoints": [c.to_dict() for c in self.checkpoints],
            "all_results": [r.to_dict() for r in self.all_results],
            "attempts": self.attempts,
        }


def top_issues(checkpoints: List[Checkpoint], limit: int = MAX_TOP_ISSUES) -> List[str]:
    """First ``limit`` distinct non-acceptable reasons, in route order."""
    issues: List[str] = []
    for checkpoint in checkpoints:
        reason = checkpoint.reason
        if not reason or reason == ACCEPTABLE_REASON or reason in issues:
            continue
        issues.append(reason)
        if len(issues) >= limit:
            break
    return issues


def rank_key(result: CandidateResult):
    return (
        STATUS_RANK.get(result.status, len(STATUS_RANK)),
        -result.score,
        result.scheduled_time,
    )


def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown local timezone: {name!r}")


class SafeWindowSearch:
    """
    Finds the earliest safe departure time for a route.

    Usage:
        search = SafeWindowSearch(weather)
        result = search.find_safe_time(dep, arr, "student-pilot", preferred_start)
    """

    def __init__(
        self,
        weather,
        checker: Optional[PathWeatherChecker] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or default_settings
        self.checker = checker or PathWeatherChecker(
            weather, settings=self.settings, sleep=sleep, clock=clock,
        )
        self._clock = clock

    def candidate_times(self, preferred_start: datetime, now: Optional[datetime] = None) -> List[datetime]:
        """
        Candidate departure times, chronological, in UTC.

        One candidate per slot hour per day for ``search_horizon_days``
        starting on the preferred start's local date. Candidates at or
        before ``now`` are dropped; the rest are capped at
        ``search_max_candidates``.

        Raises:
            ValidationError: Missing start time or unknown local timezone
        """
        if not isinstance(preferred_start, datetime):
            raise ValidationError(f"Preferred start must be a datetime, got {preferred_start!r}")
        now = now or self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        if preferred_start.tzinfo is None:
            preferred_start = preferred_start.replace(tzinfo=_zone(self.settings.local_timezone))
        zone = preferred_start.tzinfo
        start_date = preferred_start.date()

        candidates: List[datetime] = []
        for day in range(self.settings.search_horizon_days):
            date = start_date + timedelta(days=day)
            for hour in sorted(self.settings.search_slot_hours):
                candidate = datetime(date.year, date.month, date.day, hour, tzinfo=zone)
                if candidate <= now:
                    continue
                candidates.append(candidate.astimezone(timezone.utc))

        candidates.sort()
        return candidates[: self.settings.search_max_candidates]

    def find_safe_time(
        self,
        departure: Location,
        arrival: Location,
        level: Union[CertificationLevel, str],
        preferred_start: datetime,
        deadline: Optional[datetime] = None,
    ) -> SafeWindowResult:
        """
        Search for the first safe departure time.

        Args:
            departure: Departure airport
            arrival: Arrival airport
            level: Training / certification level
            preferred_start: Earliest day to consider
            deadline: Optional wall-clock limit for weather lookups

        Returns:
            SafeWindowResult; ``success`` False with a reason when the input
            is invalid or no candidate is safe
        """
        try:
            level = CertificationLevel.parse(level)
            validate_route(departure, arrival)
            candidates = self.candidate_times(preferred_start)
        except ValidationError as e:
            logger.warning("safe_window_rejected", error=str(e))
            return SafeWindowResult(success=False, reason=f"Invalid request: {e}")

        if not candidates:
            return SafeWindowResult(
                success=False,
                reason="No future candidate times in the search window",
            )

        logger.info(
            "safe_window_search_started",
            departure=departure.code,
            arrival=arrival.code,
            level=level.value,
            candidates=len(candidates),
        )

        results = self._evaluate_all(departure, arrival, level, candidates, deadline)

        chosen: Optional[CandidateResult] = None
        for result in sorted(results, key=lambda r: r.scheduled_time):
            if result.is_safe:
                chosen = result
                break

        ranked = sorted(results, key=rank_key)
        safe_count = sum(1 for r in results if r.is_safe)
        error_count = sum(1 for r in results if r.status == ERROR_STATUS)

        logger.info(
            "safe_window_search_complete",
            departure=departure.code,
            arrival=arrival.code,
            attempts=len(results),
            safe=safe_count,
            errors=error_count,
            found=chosen is not None,
        )

        if chosen is None:
            best = ranked[0]
            reason = (
                f"No safe departure time found among {len(results)} candidates "
                f"over {self.settings.search_horizon_days} days for {level.value}; "
                f"best option {best.scheduled_time.isoformat()} is {best.status}"
            )
            if best.top_issues:
                reason += f" ({'; '.join(best.top_issues)})"
            return SafeWindowResult(
                success=False,
                reason=reason,
                all_results=ranked,
                attempts=len(results),
            )

        return SafeWindowResult(
            success=True,
            reason=(
                f"Safe departure at {chosen.scheduled_time.isoformat()} "
                f"(score {chosen.score:.0f}); {safe_count} of {len(results)} candidates safe"
            ),
            scheduled_time=chosen.scheduled_time,
            checkpoints=chosen.checkpoints,
            verdict=chosen.verdict,
            all_results=ranked,
            attempts=len(results),
        )

    def _evaluate_all(
        self,
        departure: Location,
        arrival: Location,
        level: CertificationLevel,
        candidates: List[datetime],
        deadline: Optional[datetime],
    ) -> List[CandidateResult]:
        results: List[CandidateResult] = []
        workers = max(1, min(self.settings.search_max_workers, len(candidates)))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(
                    self.checker.check_route, departure, arrival, level, candidate, deadline
                ): candidate
                for candidate in candidates
            }
            for future in as_completed(futures):
                candidate = futures[future]
                try:
                    results.append(self._candidate(candidate, future.result()))
                except Exception as e:
                    logger.error(
                        "candidate_evaluation_failed",
                        exc_info=True,
                        scheduled_time=candidate.isoformat(),
                        error=str(e),
                    )
                    results.append(CandidateResult(
                        scheduled_time=candidate,
                        status=ERROR_STATUS,
                        score=0.0,
                        error=str(e),
                    ))

        return results

    @staticmethod
    def _candidate(scheduled_time: datetime, check: PathCheck) -> CandidateResult:
        return CandidateResult(
            scheduled_time=scheduled_time,
            status=check.verdict.status.value,
            score=check.verdict.score,
            color=check.verdict.color.value,
            verdict=check.verdict,
            checkpoints=check.checkpoints,
            waypoint_count=len(check.path.waypoints),
            top_issues=top_issues(check.checkpoints),
        )

