"""Configuration module for behavior-evaluator.

This module provides default values, centralized settings via
pydantic-settings, and loaders for YAML test case definitions.
"""

from behavior_evaluator.config.exceptions import ConfigurationError
from behavior_evaluator.config.loaders import (
    load_test_case,
    load_test_cases,
    load_test_suite,
)
from behavior_evaluator.config.settings import (
    CollectorSettings,
    LoggingSettings,
    RunnerSettings,
    Settings,
    get_settings,
)

__all__ = [
    "CollectorSettings",
    "ConfigurationError",
    "get_settings",
    "load_test_case",
    "load_test_cases",
    "load_test_suite",
    "LoggingSettings",
    "RunnerSettings",
    "Settings",
]
