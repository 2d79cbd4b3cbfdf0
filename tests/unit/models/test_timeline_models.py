"""Unit tests for the session and timeline models.

This module tests:
- Immutability of events and sessions
- Event payload accessors
- Walking the delegation call tree
"""

import pytest
from pydantic import ValidationError

from behavior_evaluator.models.enums import EventType
from behavior_evaluator.models.session import SessionInfo, TokenUsage
from behavior_evaluator.models.timeline_event import SessionTimeline, TimelineEvent


class TestTimelineEvent:
    """Tests for TimelineEvent."""

    def test_is_immutable(self) -> None:
        """Test that events reject attribute assignment."""
        event = TimelineEvent(timestamp=1, type=EventType.tool_call)

        with pytest.raises(ValidationError):
            event.timestamp = 2

    def test_accessors(self) -> None:
        """Test the tool, input and text accessors."""
        event = TimelineEvent(
            timestamp=1,
            type=EventType.tool_call,
            data={"tool": "read", "input": {"filePath": "a"}},
        )

        assert event.tool == "read"
        assert event.tool_input == {"filePath": "a"}
        assert event.text == ""

    def test_accessors_tolerate_malformed_payloads(self) -> None:
        """Test that wrong payload types read as empty."""
        event = TimelineEvent(
            timestamp=1, type=EventType.tool_call, data={"tool": 5, "input": "x", "text": None}
        )

        assert event.tool is None
        assert event.tool_input == {}
        assert event.text == ""


class TestSessionModels:
    """Tests for SessionInfo, TokenUsage and SessionTimeline."""

    def test_session_info_requires_id(self) -> None:
        """Test that an empty id is rejected."""
        with pytest.raises(ValidationError):
            SessionInfo(id="")

    def test_token_total(self) -> None:
        """Test summing token counts."""
        assert TokenUsage(input=1, output=2, reasoning=3, cache_read=4, cache_write=5).total == 15

    def test_walk_is_depth_first(self) -> None:
        """Test the traversal order of the call tree."""
        leaf = SessionTimeline(session=SessionInfo(id="c"), depth=2)
        middle = SessionTimeline(session=SessionInfo(id="b"), depth=1, children=(leaf,))
        other = SessionTimeline(session=SessionInfo(id="d"), depth=1)
        root = SessionTimeline(session=SessionInfo(id="a"), children=(middle, other))

        assert [n.session.id for n in root.walk()] == ["a", "b", "c", "d"]
