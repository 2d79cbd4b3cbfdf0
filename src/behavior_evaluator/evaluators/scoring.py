"""Check scoring.

Combines a rule's weighted checks into its 0-100 score.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from behavior_evaluator.config.defaults import DEFAULT_PASS_THRESHOLD
from behavior_evaluator.models.evaluation import Check

__all__ = ["calculate_score", "is_passing"]


def calculate_score(checks: Iterable[Check]) -> float:
    """Calculate the weighted share of passed checks.

    score = 100 * sum(weights of passed checks) / sum(all weights)

    Sums use math.fsum, so the result does not depend on check order.

    Args:
        checks: Checks of one rule.

    Returns:
        Score clamped to [0, 100]; 0.0 when there are no checks.

    """
    checks = list(checks)
    total_weight = math.fsum(c.weight for c in checks)
    if total_weight <= 0:
        return 0.0

    passed_weight = math.fsum(c.weight for c in checks if c.passed)
    return max(0.0, min(100.0, 100.0 * passed_weight / total_weight))


def is_passing(score: float, threshold: float = DEFAULT_PASS_THRESHOLD) -> bool:
    """Whether a score reaches the pass threshold."""
    return score >= threshold
