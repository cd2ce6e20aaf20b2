# flightwatch/safety/assessor.py
"""
Score one weather observation against one certification level's minima.

Rules are evaluated in order and short-circuit:
1. Thunderstorms             -> dangerous, 0
2. Icing (<= 32F + precip)   -> dangerous, 0 (instrument-rated: -30 and continue)
3. Visibility below minimum  -> -min(30, deficit_mi * 10)
4. Ceiling below minimum     -> -min(25, deficit_ft / 100 * 2)
5. Wind above maximum        -> -min(20, excess_kt * 2)
6. Clamp to [0, 100]; >= 80 safe, >= 50 marginal, else dangerous

All functions in this module are pure.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from ..exceptions import MalformedObservationError
from .models import (
    Assessment,
    CertificationLevel,
    CertificationMinima,
    INSTRUMENT_LEVEL,
    MINIMA,
    SafetyStatus,
    WeatherObservation,
)


@dataclass(frozen=True)
class PenaltyConfig:
    """Scoring constants. Empirically chosen; override per deployment."""
    icing_penalty: float = 30.0
    visibility_points_per_mile: float = 10.0
    visibility_max_penalty: float = 30.0
    ceiling_points_per_100ft: float = 2.0
    ceiling_max_penalty: float = 25.0
    wind_points_per_knot: float = 2.0
    wind_max_penalty: float = 20.0
    safe_threshold: float = 80.0
    marginal_threshold: float = 50.0


DEFAULT_PENALTIES = PenaltyConfig()

# OpenWeatherMap condition codes 2xx
THUNDERSTORM_CODE_MIN = 200
THUNDERSTORM_CODE_MAX = 300  # exclusive

FREEZING_F = 32.0

ACCEPTABLE_REASON = "Conditions acceptable"


def has_thunderstorms(observation: WeatherObservation) -> bool:
    return (
        THUNDERSTORM_CODE_MIN <= observation.condition_code < THUNDERSTORM_CODE_MAX
        or "thunder" in (observation.description or "").lower()
    )


def has_icing(observation: WeatherObservation) -> bool:
    return (
        observation.temperature_f <= FREEZING_F
        and observation.precipitation_mm_per_hr > 0
    )


def status_for_score(score: float, penalties: PenaltyConfig = DEFAULT_PENALTIES) -> SafetyStatus:
    if score >= penalties.safe_threshold:
        return SafetyStatus.SAFE
    if score >= penalties.marginal_threshold:
        return SafetyStatus.MARGINAL
    return SafetyStatus.DANGEROUS


def assess(
    observation: WeatherObservation,
    level: Union[CertificationLevel, str],
    penalties: PenaltyConfig = DEFAULT_PENALTIES,
    minima: Optional[CertificationMinima] = None,
) -> Assessment:
    """
    Assess one observation for one certification level.

    Args:
        observation: Validated weather observation
        level: Certification level (enum or identifier)
        penalties: Scoring constants
        minima: Override the level's standard minima

    Returns:
        Assessment with status, score in [0, 100] and reason

    Raises:
        MalformedObservationError: observation is not a WeatherObservation
        UnknownCertificationLevelError: level is not recognised
    """
    if not isinstance(observation, WeatherObservation):
        raise MalformedObservationError(
            f"Expected WeatherObservation, got {type(observation).__name__}"
        )

    level = CertificationLevel.parse(level)
    if minima is None:
        minima = MINIMA[level]

    if has_thunderstorms(observation):
        return Assessment(SafetyStatus.DANGEROUS, 0.0, "Thunderstorms present")

    score = 100.0
    issues: List[str] = []

    if has_icing(observation):
        if level != INSTRUMENT_LEVEL:
            return Assessment(SafetyStatus.DANGEROUS, 0.0, "Icing conditions detected")
        score -= penalties.icing_penalty
        issues.append("Icing conditions")

    visibility = observation.visibility_mi
    if minima.min_visibility_mi > 0 and visibility < minima.min_visibility_mi:
        deficit = minima.min_visibility_mi - visibility
        score -= min(
            penalties.visibility_max_penalty,
            deficit * penalties.visibility_points_per_mile,
        )
        issues.append(
            f"Low visibility: {visibility:.1f} mi (need {minima.min_visibility_mi:g} mi)"
        )

    ceiling = observation.ceiling_ft
    if minima.min_ceiling_ft > 0 and ceiling < minima.min_ceiling_ft:
        deficit = (minima.min_ceiling_ft - ceiling) / 100.0
        score -= min(
            penalties.ceiling_max_penalty,
            deficit * penalties.ceiling_points_per_100ft,
        )
        issues.append(
            f"Low ceiling: {ceiling:.0f} ft (need {minima.min_ceiling_ft:g} ft)"
        )

    wind = observation.wind_speed_kt
    if wind > minima.max_wind_kt:
        excess = wind - minima.max_wind_kt
        score -= min(
            penalties.wind_max_penalty,
            excess * penalties.wind_points_per_knot,
        )
        issues.append(f"High winds: {wind:.0f} kt (max {minima.max_wind_kt:g} kt)")

    score = min(100.0, max(0.0, score))

    return Assessment(
        status=status_for_score(score, penalties),
        score=score,
        reason="; ".join(issues) if issues else ACCEPTABLE_REASON,
    )
