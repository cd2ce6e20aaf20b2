# Monitoring module - periodic re-checks, color transitions, alert cooldown
from .gate import NotificationGate, GateDecision, DEFAULT_COOLDOWN
from .scheduler import (
    MonitoringScheduler,
    MonitoringRunResult,
    FlightCheckResult,
    build_default_scheduler,
)

__all__ = [
    "NotificationGate",
    "GateDecision",
    "DEFAULT_COOLDOWN",
    "MonitoringScheduler",
    "MonitoringRunResult",
    "FlightCheckResult",
    "build_default_scheduler",
]
