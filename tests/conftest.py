# tests/conftest.py
"""
Pytest configuration and fixtures.

Collaborators (weather, store, dispatcher) are in-memory fakes; the SQL
store tests use in-memory SQLite, so nothing here needs a network or a
running database.
"""

import dataclasses
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import pytest

from flightwatch.exceptions import WeatherLookupError
from flightwatch.geo import AIRPORTS
from flightwatch.safety import (
    Checkpoint,
    SafetyStatus,
    ScheduledFlight,
    WeatherObservation,
)
from flightwatch.settings import Settings

T0 = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)

BOS = AIRPORTS["BOS"]
JFK = AIRPORTS["JFK"]
DEN = AIRPORTS["DEN"]
LAS = AIRPORTS["LAS"]


def make_observation(**overrides) -> WeatherObservation:
    """Clear-sky observation; override any field."""
    fields = dict(
        temperature_f=60.0,
        cloud_coverage_pct=5.0,
        ceiling_ft=25000.0,
        visibility_mi=10.0,
        wind_speed_kt=5.0,
        wind_direction_deg=270.0,
        condition_code=800,
        precipitation_mm_per_hr=0.0,
        observed_at=T0,
        description="clear sky",
    )
    fields.update(overrides)
    return WeatherObservation(**fields)


def thunderstorm() -> WeatherObservation:
    return make_observation(condition_code=211, description="thunderstorm")


def low_visibility() -> WeatherObservation:
    """Marginal for every level with a visibility floor."""
    return make_observation(visibility_mi=0.5)


def make_checkpoint(status: SafetyStatus, score: float, reason: str = "Conditions acceptable") -> Checkpoint:
    return Checkpoint(
        lat=40.0,
        lon=-74.0,
        time=T0,
        weather=make_observation(),
        safety_status=status,
        safety_score=score,
        reason=reason,
    )


def make_flight(flight_id: str = "f1", **overrides) -> ScheduledFlight:
    fields = dict(
        id=flight_id,
        departure=BOS,
        arrival=JFK,
        training_level="student-pilot",
        scheduled_time=T0 + timedelta(days=3),
        user_id="u1",
        student_name="Sam Student",
    )
    fields.update(overrides)
    return ScheduledFlight(**fields)


class Clock:
    """Settable clock."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeWeather:
    """
    Weather lookup returning a fixed observation, or one computed by
    ``factory(lat, lon, at)``. A factory may raise to simulate failures.
    """

    def __init__(
        self,
        observation: Optional[WeatherObservation] = None,
        factory: Optional[Callable] = None,
    ):
        self.observation = observation or make_observation()
        self.factory = factory
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def get_weather(self, lat, lon, at=None):
        with self._lock:
            self.calls.append((lat, lon, at))
        if self.factory is not None:
            return self.factory(lat, lon, at)
        return self.observation


class FailingWeather(FakeWeather):
    def get_weather(self, lat, lon, at=None):
        super().get_weather(lat, lon, at)
        raise WeatherLookupError("provider unavailable")


class FakeStore:
    """In-memory flight store."""

    def __init__(self, flights: Optional[List[ScheduledFlight]] = None):
        self.flights: Dict[str, ScheduledFlight] = {f.id: f for f in (flights or [])}
        self.updates: List[dict] = []
        self.alerts_recorded: List[tuple] = []
        self.fail_list = False
        self.fail_update_for: set = set()

    def list_active_future_flights(self, limit, now):
        if self.fail_list:
            raise RuntimeError("database unavailable")
        active = [
            f for f in self.flights.values()
            if f.status == "scheduled" and f.scheduled_time > now
        ]
        active.sort(key=lambda f: f.scheduled_time)
        return [dataclasses.replace(f) for f in active[:limit]]

    def get_flight(self, flight_id):
        flight = self.flights.get(flight_id)
        return dataclasses.replace(flight) if flight else None

    def update_flight_weather_state(self, flight_id, checkpoints, verdict, color,
                                    needs_rescheduling, checked_at):
        if flight_id in self.fail_update_for:
            raise RuntimeError("write failed")
        flight = self.flights[flight_id]
        flight.last_safety_color = color
        flight.needs_rescheduling = needs_rescheduling
        self.updates.append({
            "flight_id": flight_id,
            "checkpoints": checkpoints,
            "verdict": verdict,
            "color": color,
            "needs_rescheduling": needs_rescheduling,
            "checked_at": checked_at,
        })

    def get_last_alert_timestamp(self, flight_id):
        return self.flights[flight_id].last_alert_at

    def record_alert_sent(self, flight_id, timestamp):
        self.flights[flight_id].last_alert_at = timestamp
        self.alerts_recorded.append((flight_id, timestamp))


class FakeDispatcher:
    def __init__(self, result: bool = True, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.sent: List[tuple] = []

    def send_safety_alert(self, flight, verdict, checkpoints):
        if self.error is not None:
            raise self.error
        self.sent.append((flight.id, verdict, checkpoints))
        return self.result


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no rate-limit delay and a UTC 06/12/18 grid."""
    return Settings(
        rate_limit_delay_seconds=0.0,
        waypoint_spacing_nm=50.0,
        cruise_speed_kt=120.0,
        monitor_batch_limit=50,
        monitor_max_workers=4,
        alert_cooldown_hours=24,
        search_horizon_days=5,
        search_slot_hours=(6, 12, 18),
        search_max_candidates=20,
        search_max_workers=8,
        local_timezone="UTC",
        openweather_api_key="test-key",
        alert_webhook_url=None,
    )


@pytest.fixture
def clock() -> Clock:
    return Clock()
