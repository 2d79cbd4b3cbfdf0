"""Unit tests for check scoring.

This module tests:
- The weighted score formula
- Independence from check order
- Edge cases (no checks, all passed, all failed)
- The pass threshold comparison
"""

import itertools

import pytest

from behavior_evaluator.evaluators.scoring import calculate_score, is_passing
from behavior_evaluator.models.evaluation import Check, Evidence


def _check(name: str, passed: bool, weight: float) -> Check:
    return Check(name=name, passed=passed, weight=weight, evidence=[Evidence(type="t")])


class TestCalculateScore:
    """Tests for calculate_score()."""

    def test_weighted_share_of_passed_checks(self) -> None:
        """Test 100 * passed weight / total weight."""
        checks = [_check("a", True, 50), _check("b", False, 50)]

        assert calculate_score(checks) == 50.0

    def test_uneven_weights(self) -> None:
        """Test that weights, not counts, drive the score."""
        checks = [_check("a", True, 40), _check("b", False, 60)]

        assert calculate_score(checks) == pytest.approx(40.0)

    def test_no_checks_scores_zero(self) -> None:
        """Test the empty check list."""
        assert calculate_score([]) == 0.0

    def test_all_passed_scores_hundred(self) -> None:
        """Test the upper bound."""
        assert calculate_score([_check("a", True, 0.1), _check("b", True, 0.2)]) == 100.0

    def test_order_does_not_change_score(self) -> None:
        """Test that every permutation yields the identical score."""
        checks = [
            _check("a", True, 0.1),
            _check("b", False, 0.7),
            _check("c", True, 0.2),
            _check("d", True, 1e-3),
        ]

        scores = {calculate_score(p) for p in itertools.permutations(checks)}

        assert len(scores) == 1


class TestIsPassing:
    """Tests for is_passing()."""

    @pytest.mark.parametrize(
        ("score", "threshold", "expected"),
        [(75.0, 75.0, True), (74.99, 75.0, False), (50.0, 50.0, True), (0.0, 0.0, True)],
    )
    def test_threshold_comparison(self, score: float, threshold: float, expected: bool) -> None:
        """Test that the threshold is inclusive."""
        assert is_passing(score, threshold) is expected

    def test_default_threshold_is_75(self) -> None:
        """Test the default pass threshold."""
        assert is_passing(75.0)
        assert not is_passing(50.0)
