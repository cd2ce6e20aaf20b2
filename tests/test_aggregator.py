# tests/test_aggregator.py
"""
Test path-level aggregation and level-dependent colors.
"""

import pytest

from flightwatch.safety import (
    CertificationLevel,
    SafetyColor,
    SafetyStatus,
    aggregate,
    path_verdict,
    requires_rescheduling,
    safety_color,
)

from conftest import make_checkpoint

SAFE = SafetyStatus.SAFE
MARGINAL = SafetyStatus.MARGINAL
DANGEROUS = SafetyStatus.DANGEROUS


class TestAggregate:

    def test_empty_path_is_dangerous(self):
        assert aggregate([]) == (DANGEROUS, 0.0)

    def test_all_safe_averages(self):
        checkpoints = [make_checkpoint(SAFE, 100), make_checkpoint(SAFE, 90)]
        assert aggregate(checkpoints) == (SAFE, 95.0)

    def test_any_dangerous_wins(self):
        checkpoints = [make_checkpoint(SAFE, 100)] * 9 + [make_checkpoint(DANGEROUS, 45)]
        assert aggregate(checkpoints) == (DANGEROUS, 0.0)

    def test_dangerous_anywhere_in_order(self):
        for position in range(4):
            checkpoints = [make_checkpoint(SAFE, 100) for _ in range(4)]
            checkpoints[position] = make_checkpoint(DANGEROUS, 0)
            assert aggregate(checkpoints)[0] == DANGEROUS

    def test_quarter_marginal_stays_safe(self):
        checkpoints = [make_checkpoint(SAFE, 100)] * 3 + [make_checkpoint(MARGINAL, 60)]
        status, score = aggregate(checkpoints)
        assert status == SAFE
        assert score == 90.0

    def test_more_than_quarter_marginal(self):
        checkpoints = [make_checkpoint(SAFE, 100)] * 2 + [make_checkpoint(MARGINAL, 60)] * 2
        assert aggregate(checkpoints) == (MARGINAL, 80.0)

    def test_score_bounds(self):
        checkpoints = [make_checkpoint(SAFE, 100)] * 5
        status, score = aggregate(checkpoints)
        assert 0 <= score <= 100


class TestColors:

    @pytest.mark.parametrize("level", list(CertificationLevel))
    def test_safe_is_green(self, level):
        assert safety_color(SAFE, level) == SafetyColor.GREEN

    @pytest.mark.parametrize("level", list(CertificationLevel))
    def test_dangerous_is_red(self, level):
        assert safety_color(DANGEROUS, level) == SafetyColor.RED

    @pytest.mark.parametrize("level", ["student-pilot", "private-pilot", "level-1"])
    def test_marginal_is_red_for_restrictive_levels(self, level):
        assert safety_color(MARGINAL, level) == SafetyColor.RED

    @pytest.mark.parametrize("level", ["commercial-pilot", "instrument-rated"])
    def test_marginal_is_yellow_otherwise(self, level):
        assert safety_color(MARGINAL, level) == SafetyColor.YELLOW


class TestRequiresRescheduling:

    def test_red_always(self):
        for level in CertificationLevel:
            assert requires_rescheduling(SafetyColor.RED, level)

    def test_green_never(self):
        for level in CertificationLevel:
            assert not requires_rescheduling(SafetyColor.GREEN, level)

    def test_yellow_only_for_restrictive(self):
        assert requires_rescheduling(SafetyColor.YELLOW, CertificationLevel.STUDENT)
        assert not requires_rescheduling(SafetyColor.YELLOW, CertificationLevel.COMMERCIAL)


class TestPathVerdict:

    def test_student_marginal_path_is_red(self):
        checkpoints = [make_checkpoint(MARGINAL, 70)] * 3
        verdict = path_verdict(checkpoints, "student-pilot")
        assert verdict.status == MARGINAL
        assert verdict.color == SafetyColor.RED
        assert verdict.score == 70.0

    def test_commercial_marginal_path_is_yellow(self):
        checkpoints = [make_checkpoint(MARGINAL, 70)] * 3
        assert path_verdict(checkpoints, "commercial-pilot").color == SafetyColor.YELLOW

    def test_verdict_dict(self):
        verdict = path_verdict([make_checkpoint(SAFE, 100)], "student-pilot")
        assert verdict.to_dict() == {"status": "safe", "score": 100.0, "color": "GREEN"}
