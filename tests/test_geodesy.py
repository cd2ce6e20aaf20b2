# tests/test_geodesy.py
"""
Test great-circle math and the terrain estimate.

Pure function tests.
"""

import math

import pytest

from flightwatch.geo import (
    AIRPORTS,
    GeoPoint,
    distance_nm,
    bearing_deg,
    interpolate,
    estimate_terrain_elevation_ft,
    get_airport,
)

BOS = AIRPORTS["BOS"]
JFK = AIRPORTS["JFK"]


class TestDistance:

    def test_bos_to_jfk(self):
        assert 155 < distance_nm(BOS, JFK) < 170

    def test_symmetric(self):
        assert abs(distance_nm(BOS, JFK) - distance_nm(JFK, BOS)) < 1e-9

    def test_same_point_is_zero(self):
        assert distance_nm(BOS, BOS) == 0.0

    def test_one_degree_of_latitude_is_sixty_nm(self):
        d = distance_nm(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))
        assert abs(d - 60.04) < 0.1

    def test_antipodal_is_half_circumference(self):
        d = distance_nm(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0))
        assert abs(d - math.pi * 3440.065) < 1e-6


class TestBearing:

    def test_due_north(self):
        assert abs(bearing_deg(GeoPoint(0, 0), GeoPoint(10, 0))) < 1e-9

    def test_due_east_on_equator(self):
        assert abs(bearing_deg(GeoPoint(0, 0), GeoPoint(0, 10)) - 90.0) < 1e-9

    def test_west_is_in_range(self):
        bearing = bearing_deg(GeoPoint(0, 0), GeoPoint(0, -10))
        assert 0 <= bearing < 360
        assert abs(bearing - 270.0) < 1e-9

    def test_bos_to_jfk_is_southwest(self):
        assert 180 < bearing_deg(BOS, JFK) < 270


class TestInterpolate:

    def test_endpoints(self):
        start = interpolate(BOS, JFK, 0.0)
        end = interpolate(BOS, JFK, 1.0)
        assert abs(start.lat - BOS.lat) < 1e-9 and abs(start.lon - BOS.lon) < 1e-9
        assert abs(end.lat - JFK.lat) < 1e-9 and abs(end.lon - JFK.lon) < 1e-9

    def test_midpoint_splits_distance(self):
        mid = interpolate(BOS, JFK, 0.5)
        total = distance_nm(BOS, JFK)
        assert abs(distance_nm(BOS, mid) - total / 2) < 1e-6
        assert abs(distance_nm(mid, JFK) - total / 2) < 1e-6

    def test_fraction_is_clamped(self):
        below = interpolate(BOS, JFK, -0.5)
        above = interpolate(BOS, JFK, 1.5)
        assert abs(below.lat - BOS.lat) < 1e-9
        assert abs(above.lat - JFK.lat) < 1e-9

    def test_identical_points_stay_finite(self):
        point = interpolate(BOS, BOS, 0.3)
        assert math.isfinite(point.lat) and math.isfinite(point.lon)
        assert abs(point.lat - BOS.lat) < 1e-9

    def test_antipodal_points_stay_finite(self):
        point = interpolate(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0), 0.5)
        assert math.isfinite(point.lat) and math.isfinite(point.lon)


class TestTerrain:

    def test_rockies(self):
        assert estimate_terrain_elevation_ft(39.7, -105.0) == 8000

    def test_appalachians(self):
        assert estimate_terrain_elevation_ft(37.0, -80.0) == 3000

    def test_lowland_default(self):
        assert estimate_terrain_elevation_ft(25.8, -80.3) == 700


class TestAirports:

    def test_lookup_is_case_insensitive(self):
        assert get_airport(" jfk ") == JFK

    def test_unknown_code(self):
        assert get_airport("ZZZ") is None
