"""Exceptions for the collector module.

This module defines the errors raised while reading recorded sessions
from storage and normalizing their records.
"""

from behavior_evaluator.exceptions import BehaviorEvaluatorError

__all__ = [
    "CollectorError",
    "NotFoundError",
    "SessionNotFoundError",
    "MessageNotFoundError",
    "PartNotFoundError",
    "MalformedRecordError",
]


class CollectorError(BehaviorEvaluatorError):
    """Base exception for collector errors."""

    pass


class NotFoundError(CollectorError):
    """A referenced record does not exist in storage.

    Fatal to the evaluation of the affected session, but not to a batch.

    Attributes:
        kind: Kind of record ('session', 'message' or 'part').
        record_id: Identifier that could not be resolved.

    """

    kind = "record"

    def __init__(self, record_id: str, message: str | None = None) -> None:
        """Initialize the exception.

        Args:
            record_id: Identifier that could not be resolved.
            message: Optional override of the default message.

        """
        self.record_id = record_id
        super().__init__(message or f"{self.kind.capitalize()} not found: {record_id}")


class SessionNotFoundError(NotFoundError):
    """The session does not exist in storage."""

    kind = "session"


class MessageNotFoundError(NotFoundError):
    """The message does not exist in storage."""

    kind = "message"


class PartNotFoundError(NotFoundError):
    """The message part does not exist in storage."""

    kind = "part"


class MalformedRecordError(CollectorError):
    """A record is present but cannot be normalized.

    Never fatal: the timeline builder logs and skips such records.
    """

    pass
