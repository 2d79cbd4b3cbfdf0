"""Structured logging configuration using structlog.

Provides centralized logging configuration with:
- JSON formatting for batch runs feeding dashboards
- Pretty console output for local inspection of sessions
- Session context: events logged while a session is evaluated carry its id
- Integration with standard library logging

Defaults come from the BEHAVIOR_EVAL_LOG_* settings.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

__all__ = ["configure_logging", "get_logger", "session_context"]


def configure_logging(verbose: bool | None = None, json_output: bool | None = None) -> None:
    """Configure structured logging for the application.

    Logs go to stderr so that stdout stays free for evaluation reports.

    Args:
        verbose: Enable debug output. Defaults to BEHAVIOR_EVAL_LOG_VERBOSE.
        json_output: Render JSON lines instead of console output. Defaults to
            BEHAVIOR_EVAL_LOG_JSON_OUTPUT.

    """
    from behavior_evaluator.config.settings import get_settings

    log_settings = get_settings().log
    if verbose is None:
        verbose = log_settings.verbose
    if json_output is None:
        json_output = log_settings.json_output

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.INFO,
        force=True,
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def session_context(session_id: str) -> Iterator[None]:
    """Tag every event logged in this context with the session id.

    The binding lives in a context variable, so it follows the work into
    ``asyncio.to_thread`` workers and does not leak between sessions.

    Args:
        session_id: Session being read or evaluated.

    """
    with structlog.contextvars.bound_contextvars(session_id=session_id):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name, typically __name__ from the calling module.

    Returns:
        Configured structlog logger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("timeline_built", event_count=42)

    """
    return structlog.get_logger(name)
