"""Pytest configuration and shared fixtures for the behavior-evaluator test suite.

This module provides common fixtures used across unit tests, including
an on-disk session store and isolation of the cached settings.
"""

from pathlib import Path

import pytest
from fixtures import SessionStore, make_session_info

from behavior_evaluator.config.settings import get_settings
from behavior_evaluator.models.session import SessionInfo


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reset the cached settings around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def session_store(tmp_path: Path) -> SessionStore:
    """Provide an empty session storage rooted in a temporary directory.

    Args:
        tmp_path: pytest's built-in temporary directory fixture.

    Returns:
        SessionStore writing records under tmp_path.

    """
    return SessionStore(tmp_path)


@pytest.fixture
def session_info() -> SessionInfo:
    """Provide the identity of the default test session."""
    return make_session_info()
