# flightwatch/safety/models.py
"""
Safety models: certification levels and minima, weather observations,
checkpoints and path verdicts.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ..exceptions import MalformedObservationError, UnknownCertificationLevelError


class SafetyStatus(str, Enum):
    SAFE = "safe"
    MARGINAL = "marginal"
    DANGEROUS = "dangerous"


class SafetyColor(str, Enum):
    """Alert color. Compared run-to-run to detect material changes."""
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


class CertificationLevel(str, Enum):
    """
    Pilot training / certification level.

    Declared from most to least restrictive.
    """
    STUDENT = "student-pilot"
    PRIVATE = "private-pilot"
    COMMERCIAL = "commercial-pilot"
    INSTRUMENT = "instrument-rated"

    @classmethod
    def parse(cls, value: Any) -> "CertificationLevel":
        """
        Resolve a level from its value or a legacy "level-N" identifier.

        Raises:
            UnknownCertificationLevelError: Not a known level
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower() if value is not None else ""
        key = LEGACY_LEVEL_IDS.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnknownCertificationLevelError(value)

    @property
    def is_restrictive(self) -> bool:
        """Restrictive levels may only fly GREEN."""
        return self in RESTRICTIVE_LEVELS


LEGACY_LEVEL_IDS: Dict[str, str] = {
    "level-1": CertificationLevel.STUDENT.value,
    "level-2": CertificationLevel.PRIVATE.value,
    "level-3": CertificationLevel.COMMERCIAL.value,
    "level-4": CertificationLevel.INSTRUMENT.value,
}

RESTRICTIVE_LEVELS = frozenset({CertificationLevel.STUDENT, CertificationLevel.PRIVATE})

# Most permissive level; icing is a penalty rather than a disqualifier
INSTRUMENT_LEVEL = CertificationLevel.INSTRUMENT


@dataclass(frozen=True)
class CertificationMinima:
    """Weather minima for a level. 0 visibility/ceiling means no floor."""
    min_visibility_mi: float
    min_ceiling_ft: float
    max_wind_kt: float
    description: str = ""


MINIMA: Dict[CertificationLevel, CertificationMinima] = {
    CertificationLevel.STUDENT: CertificationMinima(
        5, 3000, 10, "Student Pilot - Clear skies only"
    ),
    CertificationLevel.PRIVATE: CertificationMinima(
        4, 2500, 15, "Private Pilot - Clear to scattered clouds"
    ),
    CertificationLevel.COMMERCIAL: CertificationMinima(
        3, 1000, 20, "Commercial Pilot - VFR conditions"
    ),
    CertificationLevel.INSTRUMENT: CertificationMinima(
        0, 0, 30, "Instrument Rated - IMC acceptable, no thunderstorms/icing"
    ),
}


def minima_for(level: Any) -> CertificationMinima:
    """Minima for a level (enum or identifier)."""
    return MINIMA[CertificationLevel.parse(level)]


# Fields that must be real numbers, and whether they must be >= 0
_NUMERIC_FIELDS = {
    "temperature_f": False,
    "cloud_coverage_pct": True,
    "ceiling_ft": True,
    "visibility_mi": True,
    "wind_speed_kt": True,
    "wind_direction_deg": True,
    "precipitation_mm_per_hr": True,
}


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


@dataclass(frozen=True)
class WeatherObservation:
    """
    Weather at one point and time.

    Construction validates every field; a partially populated observation
    cannot exist.
    """
    temperature_f: float
    cloud_coverage_pct: float
    ceiling_ft: float
    visibility_mi: float
    wind_speed_kt: float
    wind_direction_deg: float
    condition_code: int
    precipitation_mm_per_hr: float
    observed_at: datetime
    description: str = ""

    def __post_init__(self):
        for name, non_negative in _NUMERIC_FIELDS.items():
            value = getattr(self, name)
            if not _is_number(value):
                raise MalformedObservationError(
                    f"Observation field {name} must be a finite number, got {value!r}"
                )
            if non_negative and value < 0:
                raise MalformedObservationError(
                    f"Observation field {name} must be >= 0, got {value!r}"
                )
        if not _is_number(self.condition_code) or int(self.condition_code) != self.condition_code:
            raise MalformedObservationError(
                f"Observation condition_code must be an integer, got {self.condition_code!r}"
            )
        if not isinstance(self.observed_at, datetime):
            raise MalformedObservationError(
                f"Observation observed_at must be a datetime, got {self.observed_at!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature_f": self.temperature_f,
            "cloud_coverage_pct": self.cloud_coverage_pct,
            "ceiling_ft": self.ceiling_ft,
            "visibility_mi": self.visibility_mi,
            "wind_speed_kt": self.wind_speed_kt,
            "wind_direction_deg": self.wind_direction_deg,
            "condition_code": self.condition_code,
            "precipitation_mm_per_hr": self.precipitation_mm_per_hr,
            "observed_at": self.observed_at.isoformat(),
            "description": self.description,
        }


@dataclass(frozen=True)
class Assessment:
    """Result of scoring one observation."""
    status: SafetyStatus
    score: float
    reason: str


@dataclass(frozen=True)
class Checkpoint:
    """One waypoint's weather and safety evaluation."""
    lat: float
    lon: float
    time: Optional[datetime]
    weather: Optional[WeatherObservation]  # None when the lookup failed
    safety_status: SafetyStatus
    safety_score: float
    reason: str
    altitude_ft: Optional[int] = None

    @property
    def failed(self) -> bool:
        return self.weather is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": {"lat": self.lat, "lon": self.lon},
            "altitude_ft": self.altitude_ft,
            "time": self.time.isoformat() if self.time else None,
            "weather": self.weather.to_dict() if self.weather else None,
            "safety_status": self.safety_status.value,
            "safety_score": self.safety_score,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class PathVerdict:
    """Aggregated verdict for a whole path. Always derived from checkpoints."""
    status: SafetyStatus
    score: float
    color: SafetyColor

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "score": self.score,
            "color": self.color.value,
        }


@dataclass
class ScheduledFlight:
    """
    Stored flight as seen by the monitoring core.

    Owned by the flight store; the core reads it and proposes updates.
    """
    id: str
    departure: Any  # Location
    arrival: Any  # Location
    training_level: str
    scheduled_time: datetime
    status: str = "scheduled"
    user_id: Optional[str] = None
    student_name: Optional[str] = None
    last_safety_color: Optional[SafetyColor] = None
    needs_rescheduling: bool = False
    last_alert_at: Optional[datetime] = None
    attrs: Dict[str, Any] = field(default_factory=dict)
