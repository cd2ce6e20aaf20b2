# Ingestion module - weather provider access
from .http import HttpClient, HttpClientError, HttpTimeoutError, HttpStatusError
from .openweather import OpenWeatherClient, parse_observation, estimate_ceiling_ft

__all__ = [
    "HttpClient",
    "HttpClientError",
    "HttpTimeoutError",
    "HttpStatusError",
    "OpenWeatherClient",
    "parse_observation",
    "estimate_ceiling_ft",
]
