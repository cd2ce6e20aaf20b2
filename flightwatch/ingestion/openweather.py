# flightwatch/ingestion/openweather.py
"""
OpenWeatherMap weather lookup.

Sources:
- Current: {base}/weather?lat={lat}&lon={lon}&units=imperial
- Forecast: {base}/forecast?lat={lat}&lon={lon}&units=imperial (5 days, 3-hour steps)

Target times within the forecast horizon use the forecast entry closest to
the target; anything else (no time, beyond the horizon, in the past, or an
empty forecast) falls back to current conditions.

This module is the validating boundary: raw payloads become
WeatherObservation or raise MalformedObservationError.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from ..exceptions import MalformedObservationError, WeatherLookupError
from ..logging import get_logger
from ..safety.models import WeatherObservation
from ..settings import Settings, settings as default_settings
from .http import HttpClient, HttpClientError

logger = get_logger(__name__)

METERS_PER_MILE = 1609.344
KNOTS_PER_MPH = 0.868976


def estimate_ceiling_ft(
    cloud_coverage_pct: float,
    condition_code: Optional[int] = None,
    visibility_mi: Optional[float] = None,
) -> float:
    """
    Estimate ceiling (feet AGL) from cloud cover.

    OpenWeatherMap reports cloud percentage, not layer bases, so this is
    a rough heuristic; METAR/TAF would give real ceilings.
    """
    if cloud_coverage_pct < 10:
        return 25000
    if cloud_coverage_pct < 30:
        return 12000
    if cloud_coverage_pct < 60:
        return 8000

    # Broken: lower visibility suggests lower bases
    if cloud_coverage_pct < 80:
        if visibility_mi is not None and visibility_mi < 3:
            return 1000
        if visibility_mi is not None and visibility_mi < 5:
            return 2000
        return 4500

    # Overcast
    if condition_code is not None:
        if 200 <= condition_code < 300:
            return 800
        if 500 <= condition_code < 600:
            return 1200
        if 300 <= condition_code < 500:
            return 2500
        if 600 <= condition_code < 700:
            return 2000
        if 700 <= condition_code < 800:
            return 500

    if visibility_mi is not None:
        if visibility_mi < 1:
            return 500
        if visibility_mi < 3:
            return 1500
        if visibility_mi < 5:
            return 3000
        if visibility_mi < 8:
            return 5000

    return 6000


def _require(payload: Dict[str, Any], *keys: str) -> Any:
    value: Any = payload
    for key in keys:
        if isinstance(value, list):
            value = value[0] if value else None
        if not isinstance(value, dict) or value.get(key) is None:
            raise MalformedObservationError(f"Weather payload missing {'.'.join(keys)}")
        value = value[key]
    return value


def _precipitation_mm_per_hr(payload: Dict[str, Any]) -> float:
    for kind in ("rain", "snow"):
        block = payload.get(kind) or {}
        if block.get("1h") is not None:
            return float(block["1h"])
        if block.get("3h") is not None:
            return float(block["3h"]) / 3.0
    return 0.0


def parse_observation(payload: Dict[str, Any]) -> WeatherObservation:
    """
    Build a WeatherObservation from an OpenWeatherMap entry (imperial units).

    Raises:
        MalformedObservationError: Required fields missing or not numeric
    """
    if not isinstance(payload, dict):
        raise MalformedObservationError("Weather payload is not an object")

    try:
        temperature = float(_require(payload, "main", "temp"))
        clouds = float(_require(payload, "clouds", "all"))
        visibility_mi = float(_require(payload, "visibility")) / METERS_PER_MILE
        wind_kt = float(_require(payload, "wind", "speed")) * KNOTS_PER_MPH
        wind_deg = float(_require(payload, "wind", "deg"))
        condition_code = int(_require(payload, "weather", "id"))
        observed_at = datetime.fromtimestamp(int(_require(payload, "dt")), tz=timezone.utc)
        precipitation = _precipitation_mm_per_hr(payload)
    except (TypeError, ValueError) as e:
        raise MalformedObservationError(f"Weather payload has non-numeric field: {e}")

    weather = payload.get("weather") or [{}]
    description = weather[0].get("description", "") if isinstance(weather[0], dict) else ""

    return WeatherObservation(
        temperature_f=temperature,
        cloud_coverage_pct=clouds,
        ceiling_ft=estimate_ceiling_ft(clouds, condition_code, visibility_mi),
        visibility_mi=visibility_mi,
        wind_speed_kt=wind_kt,
        wind_direction_deg=wind_deg,
        condition_code=condition_code,
        precipitation_mm_per_hr=precipitation,
        observed_at=observed_at,
        description=description or "",
    )


def closest_forecast(entries: List[Dict[str, Any]], target: datetime) -> Dict[str, Any]:
    """Forecast entry whose ``dt`` is nearest to ``target``."""
    target_ts = target.timestamp()
    return min(entries, key=lambda entry: abs(int(entry.get("dt", 0)) - target_ts))


class OpenWeatherClient:
    """
    Weather lookup backed by OpenWeatherMap.

    Implements ``get_weather(lat, lon, at=None) -> WeatherObservation``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        settings: Optional[Settings] = None,
        http_client: Optional[HttpClient] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.settings = settings or default_settings
        api_key = api_key or self.settings.openweather_api_key
        if not api_key and http_client is None:
            raise ValueError("OpenWeatherMap API key not configured (OPENWEATHER_API_KEY)")
        self.client = http_client or HttpClient(
            base_url=self.settings.openweather_base_url,
            timeout=self.settings.weather_timeout_seconds,
            default_params={"appid": api_key, "units": "imperial"},
        )
        self.horizon = timedelta(days=self.settings.forecast_horizon_days)
        self._clock = clock

    def get_weather(self, lat: float, lon: float, at: Optional[datetime] = None) -> WeatherObservation:
        """
        Weather at a point, forecast for ``at`` when within the horizon.

        Raises:
            WeatherLookupError: Provider unreachable or returned an error
            MalformedObservationError: Provider payload incomplete
        """
        if at is not None and at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)

        now = self._clock()
        if at is None or at < now or at > now + self.horizon:
            return self.fetch_current(lat, lon)

        entries = self._fetch_forecast_entries(lat, lon)
        if not entries:
            logger.warning("forecast_empty_using_current", lat=lat, lon=lon)
            return self.fetch_current(lat, lon)

        return parse_observation(closest_forecast(entries, at))

    def fetch_current(self, lat: float, lon: float) -> WeatherObservation:
        try:
            data = self.client.get_json("weather", params={"lat": lat, "lon": lon})
        except (HttpClientError, ValueError) as e:
            raise WeatherLookupError(f"Current weather lookup failed: {e}")
        return parse_observation(data)

    def _fetch_forecast_entries(self, lat: float, lon: float) -> List[Dict[str, Any]]:
        try:
            data = self.client.get_json("forecast", params={"lat": lat, "lon": lon})
        except (HttpClientError, ValueError) as e:
            raise WeatherLookupError(f"Forecast lookup failed: {e}")

        entries = data.get("list") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            return []
        return [entry for entry in entries if isinstance(entry, dict)]
