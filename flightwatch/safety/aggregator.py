# flightwatch/safety/aggregator.py
"""
Reduce a path's checkpoints to one verdict and alert color.
"""

from typing import Sequence, Tuple, Union

from .models import (
    CertificationLevel,
    Checkpoint,
    PathVerdict,
    SafetyColor,
    SafetyStatus,
)

# Share of marginal checkpoints above which the whole path is marginal
MARGINAL_FRACTION_THRESHOLD = 0.25


def aggregate(checkpoints: Sequence[Checkpoint]) -> Tuple[SafetyStatus, float]:
    """
    Overall status and score for a checkpoint list.

    - No checkpoints: dangerous, 0
    - Any dangerous checkpoint: dangerous, 0 (no average is reported)
    - More than 25% marginal: marginal, mean score
    - Otherwise: safe, mean score
    """
    if not checkpoints:
        return SafetyStatus.DANGEROUS, 0.0

    if any(c.safety_status == SafetyStatus.DANGEROUS for c in checkpoints):
        return SafetyStatus.DANGEROUS, 0.0

    mean = sum(c.safety_score for c in checkpoints) / len(checkpoints)
    mean = min(100.0, max(0.0, mean))

    marginal = sum(1 for c in checkpoints if c.safety_status == SafetyStatus.MARGINAL)
    if marginal / len(checkpoints) > MARGINAL_FRACTION_THRESHOLD:
        return SafetyStatus.MARGINAL, mean

    return SafetyStatus.SAFE, mean


def safety_color(status: SafetyStatus, level: Union[CertificationLevel, str]) -> SafetyColor:
    """Map a status to a color; marginal is RED for restrictive levels."""
    if status == SafetyStatus.DANGEROUS:
        return SafetyColor.RED
    if status == SafetyStatus.SAFE:
        return SafetyColor.GREEN
    if CertificationLevel.parse(level).is_restrictive:
        return SafetyColor.RED
    return SafetyColor.YELLOW


def requires_rescheduling(color: SafetyColor, level: Union[CertificationLevel, str]) -> bool:
    """True when a color means the flight cannot go as planned."""
    if color == SafetyColor.RED:
        return True
    return color == SafetyColor.YELLOW and CertificationLevel.parse(level).is_restrictive


def path_verdict(
    checkpoints: Sequence[Checkpoint],
    level: Union[CertificationLevel, str],
) -> PathVerdict:
    status, score = aggregate(checkpoints)
    return PathVerdict(status=status, score=score, color=safety_color(status, level))
