"""Enumeration types for behavior-evaluator.

This module defines all enum types used throughout the evaluation engine,
including event kinds, message roles, violation severities and
aggregation policies.
"""

from enum import Enum

__all__ = [
    "EventType",
    "MessageRole",
    "Severity",
    "PassPolicy",
    "ToolCategory",
]


class EventType(str, Enum):
    """Kind of a timeline event.

    Attributes:
        user_message: Text sent by the human.
        assistant_message: Text produced by the agent.
        tool_call: A tool invocation by the agent.
        patch: A file-modification record.
    """

    user_message = "user_message"
    assistant_message = "assistant_message"
    tool_call = "tool_call"
    patch = "patch"


class MessageRole(str, Enum):
    """Role of a recorded message.

    Attributes:
        user: Message authored by the human.
        assistant: Message authored by the agent.
    """

    user = "user"
    assistant = "assistant"


class Severity(str, Enum):
    """Severity of a reported violation.

    Attributes:
        error: A breach of a hard rule.
        warning: A deviation from recommended behavior.
    """

    error = "error"
    warning = "warning"


class PassPolicy(str, Enum):
    """How per-rule results combine into the overall verdict.

    Attributes:
        all_pass: Every required rule must pass.
        weighted_threshold: The combined score must reach the threshold.
    """

    all_pass = "all_pass"
    weighted_threshold = "weighted_threshold"


class ToolCategory(str, Enum):
    """Behavioral category of a tool.

    Attributes:
        execution: Tools that change state (shell, writes, edits, delegation).
        read: Tools that only inspect state (read, search, list).
        other: Everything else (todo lists, web fetches, ...).
    """

    execution = "execution"
    read = "read"
    other = "other"
