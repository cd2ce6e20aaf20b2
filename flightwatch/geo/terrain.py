# flightwatch/geo/terrain.py
"""
Coarse terrain elevation estimate for the continental US.

Regional boxes only; a real deployment would query a terrain service.
Each region reports the top of its elevation band so that cruise
altitude selection errs high.
"""

from typing import List, NamedTuple


class TerrainRegion(NamedTuple):
    name: str
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float
    max_elevation_ft: float


# Checked in order; first match wins
TERRAIN_REGIONS: List[TerrainRegion] = [
    TerrainRegion("rocky_mountains", 37, 49, -115, -102, 8000),
    TerrainRegion("appalachians", 33, 44, -84, -75, 3000),
    TerrainRegion("desert_southwest", 31, 37, -115, -102, 5000),
    TerrainRegion("great_plains", 35, 49, -104, -94, 2000),
]

# Coastal / lowland default
DEFAULT_ELEVATION_FT = 700.0


def estimate_terrain_elevation_ft(lat: float, lon: float) -> float:
    """Estimated terrain elevation (feet MSL) at a point."""
    for region in TERRAIN_REGIONS:
        if region.min_lat <= lat <= region.max_lat and region.min_lon <= lon <= region.max_lon:
            return region.max_elevation_ft
    return DEFAULT_ELEVATION_FT
