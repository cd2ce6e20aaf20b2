# flightwatch/exceptions.py
"""
Error taxonomy.

ValidationError     - bad input, rejected before any weather lookup
WeatherDataError    - upstream weather failure or malformed observation,
                      isolated to one waypoint / candidate / flight
FlightNotFoundError - store has no such flight
"""


class FlightWatchError(Exception):
    """Base exception for all FlightWatch errors."""
    pass


class ValidationError(FlightWatchError):
    """Input rejected before any weather lookup."""
    pass


class RouteValidationError(ValidationError):
    """Route cannot be flown (identical endpoints, zero distance, bad params)."""
    pass


class UnknownCertificationLevelError(ValidationError):
    """Training / certification level is not recognised."""

    def __init__(self, level):
        self.level = level
        super().__init__(f"Unknown training level: {level}")


class WeatherDataError(FlightWatchError):
    """Weather could not be obtained or trusted for a point."""
    pass


class WeatherLookupError(WeatherDataError):
    """Weather provider call failed (network, timeout, HTTP status)."""
    pass


class MalformedObservationError(WeatherDataError):
    """Observation is missing required numeric fields."""
    pass


class FlightNotFoundError(FlightWatchError):
    """Raised when a flight id is not present in the store."""

    def __init__(self, flight_id: str):
        self.flight_id = flight_id
        super().__init__(f"Flight not found: {flight_id}")
