"""Models module for behavior-evaluator.

This module contains data models organized by concern:
- base: BaseSchema and FrozenSchema for Pydantic models
- enums: EventType, MessageRole, Severity, PassPolicy, ToolCategory
- session: SessionInfo, Message, TokenUsage
- timeline_event: TimelineEvent, DelegationLink, SessionTimeline
- evaluation: Check, Violation, Evidence, EvaluationResult, AggregatedResult
- test_case: BehaviorExpectation, ExpectedViolation, TestCase, TestSuite
"""

from behavior_evaluator.models.base import BaseSchema, FrozenSchema
from behavior_evaluator.models.enums import (
    EventType,
    MessageRole,
    PassPolicy,
    Severity,
    ToolCategory,
)
from behavior_evaluator.models.evaluation import (
    AggregatedResult,
    Check,
    EvaluationResult,
    Evidence,
    MetadataValue,
    Violation,
)
from behavior_evaluator.models.session import Message, SessionInfo, TokenUsage
from behavior_evaluator.models.test_case import (
    BehaviorExpectation,
    ExpectedViolation,
    PromptMessage,
    TestCase,
    TestCategory,
    TestSuite,
)
from behavior_evaluator.models.timeline_event import (
    DelegationLink,
    SessionTimeline,
    TimelineEvent,
)

__all__ = [
    "AggregatedResult",
    "BaseSchema",
    "BehaviorExpectation",
    "Check",
    "DelegationLink",
    "EvaluationResult",
    "EventType",
    "Evidence",
    "ExpectedViolation",
    "FrozenSchema",
    "Message",
    "MessageRole",
    "MetadataValue",
    "PassPolicy",
    "PromptMessage",
    "SessionInfo",
    "SessionTimeline",
    "Severity",
    "TestCase",
    "TestCategory",
    "TestSuite",
    "TimelineEvent",
    "TokenUsage",
    "ToolCategory",
    "Violation",
]
