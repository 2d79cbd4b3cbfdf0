"""Application settings using pydantic-settings.

This module provides environment variable support for configuration
using pydantic-settings. Settings can be overridden via environment
variables with the appropriate prefix.

Environment Variables:
    BEHAVIOR_EVAL_COLLECTOR_STORAGE_PATH: Root of the session storage
    BEHAVIOR_EVAL_COLLECTOR_MAX_DELEGATION_DEPTH: Depth limit for child sessions
    BEHAVIOR_EVAL_RUNNER_PASS_THRESHOLD: Score required to pass (0-100)
    BEHAVIOR_EVAL_RUNNER_POLICY: Aggregation policy (all_pass, weighted_threshold)
    BEHAVIOR_EVAL_RUNNER_MAX_CONCURRENCY: Parallel sessions in batch evaluation
    BEHAVIOR_EVAL_LOG_VERBOSE: Emit debug-level log events
    BEHAVIOR_EVAL_LOG_JSON_OUTPUT: Render log events as JSON lines
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from behavior_evaluator.config.defaults import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_DELEGATION_DEPTH,
    DEFAULT_PASS_THRESHOLD,
    DEFAULT_STORAGE_PATH,
    MAX_CONCURRENCY_MAX,
    MAX_CONCURRENCY_MIN,
    MAX_DELEGATION_DEPTH_MAX,
    MAX_DELEGATION_DEPTH_MIN,
    THRESHOLD_MAX,
    THRESHOLD_MIN,
)
from behavior_evaluator.models.enums import PassPolicy

__all__ = [
    "CollectorSettings",
    "LoggingSettings",
    "RunnerSettings",
    "Settings",
    "get_settings",
]


class CollectorSettings(BaseSettings):
    """Settings for the session collector and timeline builder.

    Attributes:
        storage_path: Root directory of the recorded session storage.
        max_delegation_depth: How deep delegated child sessions are resolved.

    """

    model_config = SettingsConfigDict(
        env_prefix="BEHAVIOR_EVAL_COLLECTOR_",
        extra="ignore",
    )

    storage_path: Path = Field(
        default=DEFAULT_STORAGE_PATH,
        description="Root directory of the recorded session storage",
    )
    max_delegation_depth: int = Field(
        default=DEFAULT_MAX_DELEGATION_DEPTH,
        ge=MAX_DELEGATION_DEPTH_MIN,
        le=MAX_DELEGATION_DEPTH_MAX,
        description="Maximum depth of delegated child sessions to resolve",
    )


class RunnerSettings(BaseSettings):
    """Settings for the evaluator runner.

    Attributes:
        pass_threshold: Score a rule (or the aggregate) must reach to pass.
        policy: How per-rule results combine into the overall verdict.
        max_concurrency: Sessions evaluated in parallel by batch runs.

    """

    model_config = SettingsConfigDict(
        env_prefix="BEHAVIOR_EVAL_RUNNER_",
        extra="ignore",
    )

    pass_threshold: float = Field(
        default=DEFAULT_PASS_THRESHOLD,
        ge=THRESHOLD_MIN,
        le=THRESHOLD_MAX,
        description="Score required to pass (0-100)",
    )
    policy: PassPolicy = Field(
        default=PassPolicy.all_pass,
        description="Aggregation policy for the overall verdict",
    )
    max_concurrency: int = Field(
        default=DEFAULT_MAX_CONCURRENCY,
        ge=MAX_CONCURRENCY_MIN,
        le=MAX_CONCURRENCY_MAX,
        description="Sessions evaluated in parallel by batch runs",
    )


class LoggingSettings(BaseSettings):
    """Settings for structured logging.

    Attributes:
        verbose: Emit debug-level events.
        json_output: Render JSON lines instead of console output.

    """

    model_config = SettingsConfigDict(
        env_prefix="BEHAVIOR_EVAL_LOG_",
        extra="ignore",
    )

    verbose: bool = Field(default=False, description="Emit debug-level events")
    json_output: bool = Field(default=False, description="Render JSON lines")


class Settings(BaseSettings):
    """Root settings container.

    Use get_settings() to access the cached singleton instance.

    Attributes:
        collector: Collector settings.
        runner: Runner settings.
        log: Logging settings.

    """

    model_config = SettingsConfigDict(
        env_prefix="BEHAVIOR_EVAL_",
        extra="ignore",
    )

    collector: CollectorSettings = Field(default_factory=CollectorSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    log: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings singleton.

    Returns:
        The Settings instance with values from environment variables.

    """
    return Settings()
