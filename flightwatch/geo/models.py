# flightwatch/geo/models.py
"""
Geographic reference types.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GeoPoint:
    """Bare latitude/longitude pair in decimal degrees."""
    lat: float
    lon: float


@dataclass(frozen=True)
class Location:
    """Airport identity. Immutable reference data."""
    code: str
    name: str
    lat: float
    lon: float
