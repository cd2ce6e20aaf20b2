# tests/test_path_check.py
"""
Test the path weather pipeline: rate-limited lookups, per-waypoint
failure isolation and deadlines.
"""

from datetime import datetime, timedelta

import pytest

from flightwatch.exceptions import (
    MalformedObservationError,
    RouteValidationError,
    UnknownCertificationLevelError,
)
from flightwatch.paths import build_path
from flightwatch.safety import PathWeatherChecker, SafetyColor, SafetyStatus
from flightwatch.safety.path_check import DEADLINE_REASON, UNAVAILABLE_PREFIX

from conftest import BOS, JFK, T0, FakeWeather, FailingWeather, make_observation, thunderstorm


class Recorder:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


class TestCheckRoute:

    def test_clear_weather_is_green(self, test_settings):
        weather = FakeWeather()
        checker = PathWeatherChecker(weather, settings=test_settings)
        check = checker.check_route(BOS, JFK, "student-pilot", T0)

        assert check.complete
        assert check.verdict.status == SafetyStatus.SAFE
        assert check.verdict.color == SafetyColor.GREEN
        assert len(check.checkpoints) == len(check.path.waypoints)
        assert check.failed_checkpoints == 0

    def test_lookups_follow_route_order_and_etas(self, test_settings):
        weather = FakeWeather()
        checker = PathWeatherChecker(weather, settings=test_settings)
        check = checker.check_route(BOS, JFK, "student-pilot", T0)

        assert [(w.lat, w.lon, w.eta) for w in check.path.waypoints] == weather.calls

    def test_rate_limit_delay_between_lookups(self, test_settings):
        test_settings.rate_limit_delay_seconds = 0.2
        sleep = Recorder()
        checker = PathWeatherChecker(FakeWeather(), settings=test_settings, sleep=sleep)
        check = checker.check_route(BOS, JFK, "student-pilot", T0)

        assert sleep.delays == [0.2] * (len(check.path.waypoints) - 1)

    def test_checkpoints_carry_altitude_and_time(self, test_settings):
        checker = PathWeatherChecker(FakeWeather(), settings=test_settings)
        check = checker.check_route(BOS, JFK, "student-pilot", T0)
        first = check.checkpoints[0]
        assert first.time == T0
        assert first.altitude_ft == check.path.waypoints[0].altitude_ft

    def test_same_airport_rejected_before_lookup(self, test_settings):
        weather = FakeWeather()
        checker = PathWeatherChecker(weather, settings=test_settings)
        with pytest.raises(RouteValidationError):
            checker.check_route(BOS, BOS, "student-pilot", T0)
        assert weather.calls == []

    def test_unknown_level_rejected_before_lookup(self, test_settings):
        weather = FakeWeather()
        checker = PathWeatherChecker(weather, settings=test_settings)
        with pytest.raises(UnknownCertificationLevelError):
            checker.check_route(BOS, JFK, "glider", T0)
        assert weather.calls == []


class TestFailureIsolation:

    def test_one_failed_lookup_degrades_one_checkpoint(self, test_settings):
        path = build_path(BOS, JFK, T0)
        bad_lat = path.waypoints[2].lat

        def factory(lat, lon, at):
            if lat == bad_lat:
                raise MalformedObservationError("missing visibility")
            return make_observation()

        checker = PathWeatherChecker(FakeWeather(factory=factory), settings=test_settings)
        check = checker.check_path(path, "commercial-pilot")

        assert check.failed_checkpoints == 1
        failed = check.checkpoints[2]
        assert failed.weather is None
        assert failed.safety_status == SafetyStatus.DANGEROUS
        assert failed.safety_score == 0
        assert failed.reason.startswith(UNAVAILABLE_PREFIX)
        assert all(c.safety_status == SafetyStatus.SAFE for i, c in enumerate(check.checkpoints) if i != 2)
        assert check.verdict.status == SafetyStatus.DANGEROUS

    def test_provider_outage_is_never_safe(self, test_settings):
        checker = PathWeatherChecker(FailingWeather(), settings=test_settings)
        check = checker.check_route(BOS, JFK, "instrument-rated", T0)

        assert check.failed_checkpoints == len(check.checkpoints)
        assert check.verdict.status == SafetyStatus.DANGEROUS
        assert check.verdict.score == 0
        assert check.verdict.color == SafetyColor.RED

    def test_unexpected_error_is_contained(self, test_settings):
        def factory(lat, lon, at):
            raise RuntimeError("boom")

        checker = PathWeatherChecker(FakeWeather(factory=factory), settings=test_settings)
        check = checker.check_route(BOS, JFK, "student-pilot", T0)
        assert all(c.reason == f"{UNAVAILABLE_PREFIX}: boom" for c in check.checkpoints)

    def test_thunderstorm_anywhere_fails_path(self, test_settings):
        path = build_path(BOS, JFK, T0)
        storm_lat = path.waypoints[-1].lat

        def factory(lat, lon, at):
            return thunderstorm() if lat == storm_lat else make_observation()

        checker = PathWeatherChecker(FakeWeather(factory=factory), settings=test_settings)
        check = checker.check_path(path, "instrument-rated")
        assert check.verdict.status == SafetyStatus.DANGEROUS
        assert check.failed_checkpoints == 0


class TestDeadline:

    def test_expired_deadline_issues_no_lookups(self, test_settings, clock):
        weather = FakeWeather()
        checker = PathWeatherChecker(weather, settings=test_settings, clock=clock)
        check = checker.check_route(BOS, JFK, "student-pilot", T0, deadline=clock.now)

        assert weather.calls == []
        assert not check.complete
        assert all(c.reason == DEADLINE_REASON for c in check.checkpoints)
        assert check.verdict.status == SafetyStatus.DANGEROUS

    def test_deadline_mid_path_keeps_resolved_checkpoints(self, test_settings):
        ticks = iter(range(100))
        start = T0

        def clock():
            return start + timedelta(minutes=next(ticks))

        weather = FakeWeather()
        checker = PathWeatherChecker(weather, settings=test_settings, clock=clock)
        check = checker.check_route(
            BOS, JFK, "student-pilot", T0, deadline=start + timedelta(minutes=2),
        )

        assert len(weather.calls) == 2
        assert not check.complete
        assert [c.reason for c in check.checkpoints[:2]] == ["Conditions acceptable"] * 2
        assert all(c.reason == DEADLINE_REASON for c in check.checkpoints[2:])
        assert check.verdict.status == SafetyStatus.DANGEROUS

    def test_future_deadline_is_complete(self, test_settings, clock):
        checker = PathWeatherChecker(FakeWeather(), settings=test_settings, clock=clock)
        check = checker.check_route(
            BOS, JFK, "student-pilot", T0, deadline=clock.now + timedelta(hours=1),
        )
        assert check.complete
        assert check.verdict.color == SafetyColor.GREEN

    def test_naive_deadline_is_utc(self, test_settings, clock):
        weather = FakeWeather()
        checker = PathWeatherChecker(weather, settings=test_settings, clock=clock)

        past = checker.check_route(BOS, JFK, "student-pilot", T0, deadline=datetime(2026, 3, 2, 7, 0))
        assert not past.complete
        assert past.skipped_checkpoints == len(past.checkpoints)
        assert weather.calls == []

        future = checker.check_route(BOS, JFK, "student-pilot", T0, deadline=datetime(2026, 3, 2, 9, 0))
        assert future.complete
        assert future.skipped_checkpoints == 0
