"""Base exceptions for behavior-evaluator.

This module defines the root exception hierarchy for the entire
behavior-evaluator package. All domain-specific exceptions should
inherit from BehaviorEvaluatorError.
"""

__all__ = ["BehaviorEvaluatorError"]


class BehaviorEvaluatorError(Exception):
    """Base exception for all behavior-evaluator errors.

    All exceptions in the behavior_evaluator package inherit from this base.
    Provides a common exception type for clients to catch framework errors.
    """

    pass
