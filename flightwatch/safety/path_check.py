# flightwatch/safety/path_check.py
"""
Weather check along a whole flight path.

Shared by the monitoring scheduler and the safe-window search:
build the path, look up weather at each waypoint's ETA, assess each
checkpoint and aggregate.

Lookups within one path run sequentially in route order with a fixed delay
between calls to respect the weather provider's rate limit. A failed
lookup degrades only its own checkpoint to a failure checkpoint
(dangerous, score 0); it never becomes "safe".
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Union

from ..exceptions import WeatherDataError
from ..geo import Location
from ..logging import get_logger
from ..paths import FlightPath, Waypoint, build_path
from ..settings import Settings, settings as default_settings
from .aggregator import path_verdict
from .assessor import DEFAULT_PENALTIES, PenaltyConfig, assess
from .models import CertificationLevel, Checkpoint, PathVerdict, SafetyStatus

logger = get_logger(__name__)

UNAVAILABLE_PREFIX = "Weather unavailable"
DEADLINE_REASON = "Not evaluated: deadline expired"


@dataclass(frozen=True)
class PathCheck:
    """Checkpoints and verdict for one route at one departure time."""
    path: FlightPath
    checkpoints: List[Checkpoint]
    verdict: PathVerdict
    complete: bool = True  # False when a deadline cut the lookups short

    @property
    def failed_checkpoints(self) -> int:
        return sum(1 for c in self.checkpoints if c.failed)

    @property
    def skipped_checkpoints(self) -> int:
        return sum(1 for c in self.checkpoints if c.reason == DEADLINE_REASON)


def failure_checkpoint(waypoint: Waypoint, reason: str) -> Checkpoint:
    """Checkpoint for a waypoint whose weather could not be established."""
    return Checkpoint(
        lat=waypoint.lat,
        lon=waypoint.lon,
        time=waypoint.eta,
        weather=None,
        safety_status=SafetyStatus.DANGEROUS,
        safety_score=0.0,
        reason=reason,
        altitude_ft=waypoint.altitude_ft,
    )


class PathWeatherChecker:
    """
    Runs the path -> weather -> assessment -> verdict pipeline.

    The weather collaborator must provide
    ``get_weather(lat, lon, at) -> WeatherObservation`` and may raise
    ``WeatherDataError`` (or anything else) on failure.
    """

    def __init__(
        self,
        weather,
        settings: Optional[Settings] = None,
        penalties: PenaltyConfig = DEFAULT_PENALTIES,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.weather = weather
        self.settings = settings or default_settings
        self.penalties = penalties
        self._sleep = sleep
        self._clock = clock

    def check_route(
        self,
        departure: Location,
        arrival: Location,
        level: Union[CertificationLevel, str],
        departure_time: datetime,
        deadline: Optional[datetime] = None,
    ) -> PathCheck:
        """
        Evaluate a route departing at ``departure_time``.

        Raises:
            RouteValidationError: Route cannot be flown (before any lookup)
            UnknownCertificationLevelError: Level is not recognised
        """
        level = CertificationLevel.parse(level)
        path = build_path(
            departure,
            arrival,
            departure_time,
            spacing_nm=self.settings.waypoint_spacing_nm,
            ground_speed_kt=self.settings.cruise_speed_kt,
        )
        return self.check_path(path, level, deadline=deadline)

    def check_path(
        self,
        path: FlightPath,
        level: Union[CertificationLevel, str],
        deadline: Optional[datetime] = None,
    ) -> PathCheck:
        level = CertificationLevel.parse(level)
        if deadline is not None and deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)
        checkpoints: List[Checkpoint] = []
        complete = True
        delay = self.settings.rate_limit_delay_seconds

        for index, waypoint in enumerate(path.waypoints):
            if deadline is not None and self._clock() >= deadline:
                complete = False
                checkpoints.append(failure_checkpoint(waypoint, DEADLINE_REASON))
                continue

            if index > 0 and delay > 0:
                self._sleep(delay)

            checkpoints.append(self._check_waypoint(waypoint, level))

        if not complete:
            logger.warning(
                "path_check_deadline_expired",
                waypoints=len(path.waypoints),
                evaluated=sum(1 for c in checkpoints if c.reason != DEADLINE_REASON),
            )

        return PathCheck(
            path=path,
            checkpoints=checkpoints,
            verdict=path_verdict(checkpoints, level),
            complete=complete,
        )

    def _check_waypoint(self, waypoint: Waypoint, level: CertificationLevel) -> Checkpoint:
        try:
            observation = self.weather.get_weather(waypoint.lat, waypoint.lon, waypoint.eta)
            assessment = assess(observation, level, self.penalties)
        except WeatherDataError as e:
            logger.warning(
                "waypoint_weather_unavailable",
                lat=round(waypoint.lat, 4),
                lon=round(waypoint.lon, 4),
                error=str(e),
            )
            return failure_checkpoint(waypoint, f"{UNAVAILABLE_PREFIX}: {e}")
        except Exception as e:
            logger.error(
                "waypoint_weather_error",
                exc_info=True,
                lat=round(waypoint.lat, 4),
                lon=round(waypoint.lon, 4),
                error=str(e),
            )
            return failure_checkpoint(waypoint, f"{UNAVAILABLE_PREFIX}: {e}")

        return Checkpoint(
            lat=waypoint.lat,
            lon=waypoint.lon,
            time=waypoint.eta,
            weather=observation,
            safety_status=assessment.status,
            safety_score=assessment.score,
            reason=assessment.reason,
            altitude_ft=waypoint.altitude_ft,
        )
