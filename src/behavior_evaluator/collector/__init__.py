"""Session collection and timeline construction.

This package reads recorded sessions from storage, normalizes their
messages, and builds the ordered timelines consumed by evaluators.
"""

from behavior_evaluator.collector.exceptions import (
    CollectorError,
    MalformedRecordError,
    MessageNotFoundError,
    NotFoundError,
    PartNotFoundError,
    SessionNotFoundError,
)
from behavior_evaluator.collector.message_parser import MessageParser
from behavior_evaluator.collector.session_reader import SessionReader
from behavior_evaluator.collector.timeline_builder import TimelineBuilder

__all__ = [
    "CollectorError",
    "MalformedRecordError",
    "MessageNotFoundError",
    "MessageParser",
    "NotFoundError",
    "PartNotFoundError",
    "SessionNotFoundError",
    "SessionReader",
    "TimelineBuilder",
]
