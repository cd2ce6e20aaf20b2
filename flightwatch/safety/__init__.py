# Safety module - minima, per-checkpoint assessment, path aggregation
from .models import (
    SafetyStatus,
    SafetyColor,
    CertificationLevel,
    CertificationMinima,
    MINIMA,
    minima_for,
    WeatherObservation,
    Assessment,
    Checkpoint,
    PathVerdict,
    ScheduledFlight,
)
from .assessor import assess, PenaltyConfig, DEFAULT_PENALTIES
from .aggregator import aggregate, safety_color, requires_rescheduling, path_verdict
from .path_check import PathWeatherChecker, PathCheck, failure_checkpoint

__all__ = [
    # Models
    "SafetyStatus",
    "SafetyColor",
    "CertificationLevel",
    "CertificationMinima",
    "MINIMA",
    "minima_for",
    "WeatherObservation",
    "Assessment",
    "Checkpoint",
    "PathVerdict",
    "ScheduledFlight",
    # Assessment
    "assess",
    "PenaltyConfig",
    "DEFAULT_PENALTIES",
    # Aggregation
    "aggregate",
    "safety_color",
    "requires_rescheduling",
    "path_verdict",
    # Path check
    "PathWeatherChecker",
    "PathCheck",
    "failure_checkpoint",
]
