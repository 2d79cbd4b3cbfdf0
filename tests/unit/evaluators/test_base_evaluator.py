"""Unit tests for the BaseEvaluator capability.

This module tests the shared helpers every rule uses:
- Timeline filtering by event kind and tool
- Execution and read tool selection
- Evidence, violation and result construction
"""

import pytest
from fixtures import assistant_message, patch_event, tool_call, user_message

from behavior_evaluator.evaluators.base import BaseEvaluator
from behavior_evaluator.models.enums import EventType, Severity
from behavior_evaluator.models.evaluation import Check, Evidence


class StubEvaluator(BaseEvaluator):
    """Minimal concrete rule for exercising the helpers."""

    name = "stub"

    def evaluate(self, timeline, session_info):
        """Return a result built from a single passing check."""
        check = Check(name="ok", passed=True, weight=1, evidence=[Evidence(type="t")])
        return self.build_result([check])


TIMELINE = [
    user_message(10, "Please fix it"),
    tool_call(20, "grep", pattern="bug"),
    assistant_message(30, "May I edit app.py?"),
    tool_call(40, "edit", filePath="app.py"),
    tool_call(35, "Read", filePath="app.py"),
    patch_event(50, ["app.py"]),
]


class TestFiltering:
    """Tests for the timeline filtering helpers."""

    def test_events_by_type(self) -> None:
        """Test selecting events of one kind."""
        events = BaseEvaluator.get_events_by_type(TIMELINE, EventType.patch)

        assert [e.timestamp for e in events] == [50]

    def test_tool_calls_by_name_is_case_insensitive(self) -> None:
        """Test filtering tool calls by tool name."""
        assert len(BaseEvaluator.get_tool_calls(TIMELINE)) == 3
        assert [e.timestamp for e in BaseEvaluator.get_tool_calls(TIMELINE, "read")] == [35]

    def test_execution_and_read_tools_are_sorted(self) -> None:
        """Test that categorized calls come back in timestamp order."""
        assert [e.tool for e in BaseEvaluator.get_execution_tools(TIMELINE)] == ["edit"]
        assert [e.tool for e in BaseEvaluator.get_read_tools(TIMELINE)] == ["grep", "Read"]

    def test_message_helpers(self) -> None:
        """Test selecting user and assistant text."""
        assert [e.text for e in BaseEvaluator.get_user_messages(TIMELINE)] == ["Please fix it"]
        assert [e.text for e in BaseEvaluator.get_assistant_messages(TIMELINE)] == [
            "May I edit app.py?"
        ]

    def test_first_event(self) -> None:
        """Test picking the earliest event."""
        assert BaseEvaluator.first_event(TIMELINE).timestamp == 10
        assert BaseEvaluator.first_event([]) is None

    def test_detect_approval(self) -> None:
        """Test the approval classifier hook."""
        assert BaseEvaluator.detect_approval("May I edit app.py?").requested
        assert not BaseEvaluator.detect_approval(None).requested


class TestResultBuilding:
    """Tests for create_evidence(), create_violation() and build_result()."""

    def test_create_violation(self) -> None:
        """Test violation construction with default data."""
        violation = BaseEvaluator.create_violation("code", Severity.warning, "msg", 12)

        assert violation.code == "code"
        assert violation.severity == Severity.warning
        assert violation.timestamp == 12
        assert violation.data == {}

    def test_create_evidence(self) -> None:
        """Test evidence construction."""
        evidence = BaseEvaluator.create_evidence("kind", "desc", {"a": 1}, timestamp=5)

        assert (evidence.type, evidence.data, evidence.timestamp) == ("kind", {"a": 1}, 5)

    def test_build_result_uses_rule_name_and_threshold(self, session_info) -> None:
        """Test that results carry the rule name and pass at the threshold."""
        result = StubEvaluator().evaluate([], session_info)

        assert result.evaluator == "stub"
        assert result.score == 100.0
        assert result.passed is True

    def test_rule_local_threshold(self) -> None:
        """Test overriding the pass threshold per rule."""
        evaluator = StubEvaluator()
        evaluator.threshold = 100.0
        checks = [
            Check(name="a", passed=True, weight=99, evidence=[Evidence(type="t")]),
            Check(name="b", passed=False, weight=1, evidence=[Evidence(type="t")]),
        ]

        result = evaluator.build_result(checks)

        assert result.score == pytest.approx(99.0)
        assert result.passed is False

    def test_cannot_instantiate_abstract_base(self) -> None:
        """Test that the capability requires evaluate()."""
        with pytest.raises(TypeError):
            BaseEvaluator()
