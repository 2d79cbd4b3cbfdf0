"""Exceptions for config module.

This module defines exceptions related to configuration loading,
parsing, and validation errors.
"""

from behavior_evaluator.exceptions import BehaviorEvaluatorError

__all__ = ["ConfigurationError"]


class ConfigurationError(BehaviorEvaluatorError):
    """Base exception for configuration-related errors."""

    pass
