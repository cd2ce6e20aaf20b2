# tests/test_gate.py
"""
Test the alert cooldown gate.
"""

from datetime import datetime, timedelta, timezone

import pytest

from flightwatch.monitoring import NotificationGate

T = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


class TestNotificationGate:

    def test_first_alert_allowed(self):
        decision = NotificationGate().evaluate(None, T)
        assert decision.allowed
        assert decision.record_at == T

    def test_suppressed_within_cooldown(self):
        decision = NotificationGate().evaluate(T, T + timedelta(hours=23))
        assert not decision.allowed
        assert decision.record_at is None
        assert "Suppressed" in decision.reason

    def test_allowed_after_cooldown(self):
        now = T + timedelta(hours=25)
        decision = NotificationGate().evaluate(T, now)
        assert decision.allowed
        assert decision.record_at == now

    def test_boundary_is_allowed(self):
        assert NotificationGate().evaluate(T, T + timedelta(hours=24)).allowed

    def test_naive_timestamps_are_utc(self):
        naive = datetime(2026, 3, 2, 8, 0)
        assert not NotificationGate().evaluate(naive, T + timedelta(hours=1)).allowed
        assert NotificationGate().evaluate(naive, T + timedelta(hours=24)).allowed

    def test_custom_cooldown(self):
        gate = NotificationGate(timedelta(hours=1))
        assert gate.evaluate(T, T + timedelta(minutes=61)).allowed
        assert gate.next_allowed_at(T) == T + timedelta(hours=1)
        assert gate.next_allowed_at(None) is None

    def test_negative_cooldown_rejected(self):
        with pytest.raises(ValueError):
            NotificationGate(timedelta(hours=-1))
