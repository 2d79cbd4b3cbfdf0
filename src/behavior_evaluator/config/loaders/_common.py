"""Common utilities for configuration loaders.

This module contains shared helper functions used by the test case
and test suite loaders.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from behavior_evaluator.config.exceptions import ConfigurationError

__all__ = ["load_yaml_file", "format_validation_error"]


def load_yaml_file(
    path: Path,
    error_class: type[Exception] = ConfigurationError,
    label: str = "File",
) -> dict[str, Any]:
    """Load and validate a YAML file, returning the parsed dict.

    Handles file existence check, YAML parsing, empty-file check,
    and mapping-type validation.

    Args:
        path: Path to the YAML file.
        error_class: Exception class to raise on validation errors.
        label: Human-readable label for error messages (e.g. "Test case file").

    Returns:
        Parsed dictionary from the YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        error_class: If the file is not valid YAML, is empty, or is not a mapping.

    """
    if not path.exists():
        raise FileNotFoundError(f"{label} not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise error_class(f"Failed to parse YAML file {path}: {e}") from e

    if data is None:
        raise error_class(f"Empty YAML file: {path}")

    if not isinstance(data, dict):
        raise error_class(
            f"Invalid YAML structure in {path}: expected mapping, got {type(data).__name__}"
        )

    return data


def format_validation_error(error: ValidationError, source: Path) -> str:
    """Render a pydantic ValidationError as one readable message.

    Args:
        error: The validation error.
        source: File the invalid data came from.

    Returns:
        Message listing each failing field location.

    """
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        problems.append(f"{location}: {item['msg']}")
    return f"Invalid {source}: " + "; ".join(problems)
