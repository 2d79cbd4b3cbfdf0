"""Base abstraction for behavioral rules.

This module defines BaseEvaluator, the capability every rule implements,
together with the stateless helpers rules share for filtering timelines
and building auditable results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from behavior_evaluator.config.defaults import DEFAULT_PASS_THRESHOLD
from behavior_evaluator.evaluators.approval_detection import (
    ApprovalDetection,
    detect_approval_request,
)
from behavior_evaluator.evaluators.classification import (
    is_execution_event,
    is_read_event,
)
from behavior_evaluator.evaluators.scoring import calculate_score, is_passing
from behavior_evaluator.models.enums import EventType, Severity
from behavior_evaluator.models.evaluation import (
    Check,
    EvaluationResult,
    Evidence,
    MetadataValue,
    Violation,
)
from behavior_evaluator.models.session import SessionInfo
from behavior_evaluator.models.timeline_event import TimelineEvent

__all__ = ["BaseEvaluator", "Timeline"]

Timeline = Sequence[TimelineEvent]


class BaseEvaluator(ABC):
    """Abstract base class for all behavioral rules.

    A rule inspects a read-only timeline and returns an EvaluationResult.
    Instances keep only their construction-time configuration, so the
    same instance can evaluate any number of timelines, in any order,
    with identical output.

    Attributes:
        name: Stable rule identifier (kebab-case).
        description: What the rule checks.
        threshold: Score required for the rule to pass.

    """

    name: str
    description: str = ""
    threshold: float = DEFAULT_PASS_THRESHOLD

    @abstractmethod
    def evaluate(self, timeline: Timeline, session_info: SessionInfo) -> EvaluationResult:
        """Evaluate the rule on one timeline.

        Implementations must not raise on malformed content: missing data
        fails the affected check instead.

        Args:
            timeline: Ordered events of one session (read-only).
            session_info: Identity of the session.

        Returns:
            The rule's verdict.

        """
        ...

    # Filtering

    @staticmethod
    def get_events_by_type(timeline: Timeline, event_type: EventType) -> list[TimelineEvent]:
        """Events of one kind, in timeline order."""
        return [e for e in timeline if e.type == event_type]

    @staticmethod
    def get_tool_calls(timeline: Timeline, tool: str | None = None) -> list[TimelineEvent]:
        """Tool calls, optionally restricted to one tool name."""
        calls = [e for e in timeline if e.type == EventType.tool_call]
        if tool is None:
            return calls
        wanted = tool.lower()
        return [e for e in calls if (e.tool or "").lower() == wanted]

    @staticmethod
    def get_execution_tools(timeline: Timeline) -> list[TimelineEvent]:
        """Execution-class tool calls sorted by timestamp."""
        return sorted(
            (e for e in timeline if is_execution_event(e)),
            key=lambda e: (e.timestamp, e.sequence),
        )

    @staticmethod
    def get_read_tools(timeline: Timeline) -> list[TimelineEvent]:
        """Read-class tool calls sorted by timestamp."""
        return sorted(
            (e for e in timeline if is_read_event(e)),
            key=lambda e: (e.timestamp, e.sequence),
        )

    @staticmethod
    def get_assistant_messages(timeline: Timeline) -> list[TimelineEvent]:
        """Assistant text events."""
        return [e for e in timeline if e.type == EventType.assistant_message]

    @staticmethod
    def get_user_messages(timeline: Timeline) -> list[TimelineEvent]:
        """User text events."""
        return [e for e in timeline if e.type == EventType.user_message]

    @staticmethod
    def first_event(events: Sequence[TimelineEvent]) -> TimelineEvent | None:
        """Earliest event of a list, or None when empty."""
        if not events:
            return None
        return min(events, key=lambda e: (e.timestamp, e.sequence))

    @staticmethod
    def detect_approval(text: str | None) -> ApprovalDetection:
        """Classify text as an approval request."""
        return detect_approval_request(text)

    # Result building

    @staticmethod
    def create_evidence(
        evidence_type: str,
        description: str,
        data: dict[str, Any] | None = None,
        timestamp: int | None = None,
    ) -> Evidence:
        """Build an Evidence record."""
        return Evidence(
            type=evidence_type,
            description=description,
            data=data or {},
            timestamp=timestamp,
        )

    @staticmethod
    def create_violation(
        code: str,
        severity: Severity,
        message: str,
        timestamp: int,
        data: dict[str, Any] | None = None,
    ) -> Violation:
        """Build a Violation record."""
        return Violation(
            code=code,
            severity=severity,
            message=message,
            timestamp=timestamp,
            data=data or {},
        )

    def build_result(
        self,
        checks: list[Check],
        violations: list[Violation] | None = None,
        evidence: list[Evidence] | None = None,
        metadata: dict[str, MetadataValue] | None = None,
    ) -> EvaluationResult:
        """Score the checks and assemble this rule's result.

        Args:
            checks: Weighted checks of the rule.
            violations: Reported violations.
            evidence: Session-level evidence.
            metadata: Rule-specific metrics.

        Returns:
            EvaluationResult passing when the score reaches the threshold.

        """
        score = calculate_score(checks)
        return EvaluationResult(
            evaluator=self.name,
            passed=is_passing(score, self.threshold),
            score=score,
            checks=checks,
            violations=violations or [],
            evidence=evidence or [],
            metadata=metadata or {},
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
