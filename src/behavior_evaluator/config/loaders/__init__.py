"""Configuration loaders.

This module provides loaders for YAML test definitions:
- Test case: one behavioral test per file
- Test suite: a named collection of test cases
"""

from behavior_evaluator.config.loaders.test_case import (
    load_test_case,
    load_test_cases,
    load_test_suite,
)

__all__ = [
    "load_test_case",
    "load_test_cases",
    "load_test_suite",
]
