# flightwatch/monitoring/gate.py
"""
Alert cooldown gate.

Decides whether an unsafe-weather event for a flight may produce an
outbound alert. Shared by the hourly run and manual re-checks so both
dedupe identically. Pure: the caller records the alert timestamp.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

DEFAULT_COOLDOWN = timedelta(hours=24)


@dataclass(frozen=True)
class GateDecision:
    """Outcome of a gate check."""
    allowed: bool
    record_at: Optional[datetime]  # Timestamp to record when allowed
    reason: str


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class NotificationGate:
    """One alert per flight per cooldown window."""

    def __init__(self, cooldown: timedelta = DEFAULT_COOLDOWN):
        if cooldown < timedelta(0):
            raise ValueError("Cooldown must not be negative")
        self.cooldown = cooldown

    def next_allowed_at(self, last_alert_at: Optional[datetime]) -> Optional[datetime]:
        if last_alert_at is None:
            return None
        return _as_utc(last_alert_at) + self.cooldown

    def evaluate(self, last_alert_at: Optional[datetime], now: datetime) -> GateDecision:
        """
        Args:
            last_alert_at: When the last alert was sent for this flight, if ever
            now: Current time

        Returns:
            GateDecision; allowed when no prior alert or the cooldown elapsed
        """
        now = _as_utc(now)
        if last_alert_at is None:
            return GateDecision(True, now, "No previous alert")

        elapsed = now - _as_utc(last_alert_at)
        if elapsed >= self.cooldown:
            return GateDecision(True, now, f"Cooldown elapsed ({elapsed} since last alert)")

        return GateDecision(
            False,
            None,
            f"Suppressed: last alert {elapsed} ago, cooldown {self.cooldown}",
        )
