# flightwatch/geo/airports.py
"""
Built-in airport reference table.

Keyed by IATA code. Used by the API layer to resolve route codes.
"""

from typing import Dict, Optional

from .models import Location

AIRPORTS: Dict[str, Location] = {
    loc.code: loc
    for loc in [
        Location("ATL", "Hartsfield-Jackson Atlanta Intl", 33.6407, -84.4277),
        Location("ORD", "Chicago O'Hare Intl", 41.9742, -87.9073),
        Location("DFW", "Dallas/Fort Worth Intl", 32.8998, -97.0403),
        Location("DEN", "Denver Intl", 39.8561, -104.6737),
        Location("LAX", "Los Angeles Intl", 33.9416, -118.4085),
        Location("JFK", "John F. Kennedy Intl", 40.6413, -73.7781),
        Location("SFO", "San Francisco Intl", 37.6213, -122.3790),
        Location("SEA", "Seattle-Tacoma Intl", 47.4502, -122.3088),
        Location("LAS", "Harry Reid Intl", 36.0840, -115.1537),
        Location("MCO", "Orlando Intl", 28.4312, -81.3081),
        Location("MIA", "Miami Intl", 25.7959, -80.2870),
        Location("BOS", "Boston Logan Intl", 42.3656, -71.0096),
        Location("EWR", "Newark Liberty Intl", 40.6895, -74.1745),
        Location("LGA", "LaGuardia", 40.7769, -73.8740),
        Location("PHL", "Philadelphia Intl", 39.8744, -75.2424),
        Location("DCA", "Ronald Reagan Washington National", 38.8521, -77.0377),
        Location("IAD", "Washington Dulles Intl", 38.9531, -77.4565),
        Location("BWI", "Baltimore/Washington Intl", 39.1774, -76.6684),
        Location("CLT", "Charlotte Douglas Intl", 35.2144, -80.9473),
        Location("RDU", "Raleigh-Durham Intl", 35.8776, -78.7875),
        Location("SAN", "San Diego Intl", 32.7336, -117.1897),
        Location("SJC", "San Jose Intl", 37.3639, -121.9289),
        Location("OAK", "Oakland Intl", 37.7213, -122.2208),
        Location("PDX", "Portland Intl", 45.5898, -122.5951),
        Location("PHX", "Phoenix Sky Harbor Intl", 33.4484, -112.0740),
        Location("IAH", "George Bush Intercontinental", 29.9902, -95.3368),
        Location("AUS", "Austin-Bergstrom Intl", 30.1945, -97.6699),
        Location("ABQ", "Albuquerque Intl Sunport", 35.0402, -106.6091),
        Location("TPA", "Tampa Intl", 27.9755, -82.5332),
        Location("BNA", "Nashville Intl", 36.1245, -86.6782),
    ]
}


def get_airport(code: str) -> Optional[Location]:
    """Look up an airport by code (case-insensitive)."""
    return AIRPORTS.get(code.strip().upper())
