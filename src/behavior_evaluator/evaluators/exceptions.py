"""Evaluator-specific exceptions.

This module defines the errors of the rule-evaluation layer.
"""

from behavior_evaluator.exceptions import BehaviorEvaluatorError

__all__ = ["EvaluatorError", "RuleEvaluationError"]


class EvaluatorError(BehaviorEvaluatorError):
    """Base exception for all evaluator-related errors."""

    pass


class RuleEvaluationError(EvaluatorError):
    """A rule failed while evaluating a timeline.

    Rules are expected never to raise; the runner isolates this
    condition per rule and reports it as a failed result.

    Attributes:
        rule: Name of the failing rule.
        message: Human-readable error description.

    """

    def __init__(self, rule: str, message: str) -> None:
        """Initialize the exception.

        Args:
            rule: Name of the failing rule.
            message: Human-readable error description.

        """
        self.rule = rule
        self.message = message
        super().__init__(f"Rule '{rule}' failed: {message}")
