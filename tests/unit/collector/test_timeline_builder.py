"""Unit tests for the TimelineBuilder module.

This module tests timeline construction including:
- Event extraction from text, tool and patch parts
- Ordering by timestamp with record-order tie-breaking
- Skipping malformed messages and synthetic text
- Delegation links and the delegation call tree
"""

import pytest

from behavior_evaluator.collector.exceptions import SessionNotFoundError
from behavior_evaluator.collector.session_reader import SessionReader
from behavior_evaluator.collector.timeline_builder import TimelineBuilder
from behavior_evaluator.models.enums import EventType


def _builder(session_store, max_depth: int = 5) -> TimelineBuilder:
    return TimelineBuilder(SessionReader(session_store.root), max_delegation_depth=max_depth)


class TestBuildTimeline:
    """Tests for TimelineBuilder.build_timeline()."""

    def test_builds_events_from_parts(self, session_store) -> None:
        """Test that user text, tool calls and assistant text become events."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_1", role="user", created=100)
        session_store.add_text("msg_1", "prt_1", "Please fix the bug")
        session_store.add_message("ses_a", "msg_2", role="assistant", created=200, completed=400)
        session_store.add_tool("msg_2", "prt_2", "read", {"filePath": "src/app.py"}, start=210)
        session_store.add_text("msg_2", "prt_3", "Found it.", start=300)

        events = _builder(session_store).build_timeline("ses_a")

        assert [e.type for e in events] == [
            EventType.user_message,
            EventType.tool_call,
            EventType.assistant_message,
        ]
        assert [e.timestamp for e in events] == [100, 210, 300]
        assert events[1].tool == "read"
        assert events[1].tool_input == {"filePath": "src/app.py"}
        assert events[1].data["status"] == "completed"
        assert events[2].text == "Found it."
        assert all(e.session_id == "ses_a" for e in events)

    def test_ties_keep_record_order(self, session_store) -> None:
        """Test that equal timestamps keep storage order."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_1", created=100)
        session_store.add_tool("msg_1", "prt_1", "read", {"filePath": "a"}, start=150)
        session_store.add_tool("msg_1", "prt_2", "edit", {"filePath": "a"}, start=150)

        events = _builder(session_store).build_timeline("ses_a")

        assert [e.tool for e in events] == ["read", "edit"]
        assert events[0].sequence < events[1].sequence

    def test_events_sorted_by_timestamp_across_messages(self, session_store) -> None:
        """Test that part timestamps take precedence over message order."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_1", created=100)
        session_store.add_tool("msg_1", "prt_1", "bash", {"command": "make"}, start=500)
        session_store.add_message("ses_a", "msg_2", created=200)
        session_store.add_tool("msg_2", "prt_2", "read", {"filePath": "b"}, start=250)

        events = _builder(session_store).build_timeline("ses_a")

        assert [e.tool for e in events] == ["read", "bash"]

    def test_patch_uses_completion_time(self, session_store) -> None:
        """Test that patch events are placed at message completion."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_1", created=100, completed=900)
        session_store.add_part("msg_1", "prt_1", {"type": "patch", "files": ["a.py", 3], "hash": "h"})

        (event,) = _builder(session_store).build_timeline("ses_a")

        assert event.type == EventType.patch
        assert event.timestamp == 900
        assert event.data["files"] == ["a.py"]

    def test_skips_synthetic_empty_and_unknown_parts(self, session_store) -> None:
        """Test that non-behavioral parts produce no events."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_1", role="user", created=100)
        session_store.add_text("msg_1", "prt_1", "injected", synthetic=True)
        session_store.add_text("msg_1", "prt_2", "   ")
        session_store.add_part("msg_1", "prt_3", {"type": "step-start"})
        session_store.add_text("msg_1", "prt_4", "real prompt")

        events = _builder(session_store).build_timeline("ses_a")

        assert [e.text for e in events] == ["real prompt"]

    def test_malformed_message_is_skipped(self, session_store) -> None:
        """Test that a message with an unknown role does not abort the build."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_bad", role="system", created=100)
        session_store.add_text("msg_bad", "prt_1", "ignored")
        session_store.add_message("ses_a", "msg_ok", created=200)
        session_store.add_text("msg_ok", "prt_2", "kept", start=210)

        events = _builder(session_store).build_timeline("ses_a")

        assert [e.text for e in events] == ["kept"]

    def test_invalid_utf8_part_is_skipped(self, session_store) -> None:
        """Test that an undecodable part file does not abort the build."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_1", created=100)
        session_store.add_tool("msg_1", "prt_1", "read", {"filePath": "a.py"}, start=110)
        bad = session_store.write_raw("part/msg_1/prt_2.json", "")
        bad.write_bytes(b'{"id":"prt_2","type":"text","text":"\xff\xfe"}')

        events = _builder(session_store).build_timeline("ses_a")

        assert [e.tool for e in events] == ["read"]

    def test_non_finite_part_start_uses_message_time(self, session_store) -> None:
        """Test that an overflowing start time falls back to the message creation time."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_1", created=200)
        session_store.add_part(
            "msg_1",
            "prt_1",
            {
                "type": "tool",
                "tool": "read",
                "callID": "call_1",
                "state": {"status": "completed", "input": {}, "time": {"start": 1e400}},
            },
        )

        events = _builder(session_store).build_timeline("ses_a")

        assert [(e.tool, e.timestamp) for e in events] == [("read", 200)]

    def test_non_finite_message_time_is_tolerated(self, session_store) -> None:
        """Test that an infinite message creation time does not abort the build."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_ok", created=100)
        session_store.add_text("msg_ok", "prt_1", "first", start=110)
        session_store.write_raw(
            "message/ses_a/msg_inf.json",
            '{"id": "msg_inf", "sessionID": "ses_a", "role": "assistant", "time": {"created": Infinity}}',
        )
        session_store.add_text("msg_inf", "prt_2", "second", start=150)

        events = _builder(session_store).build_timeline("ses_a")

        assert [e.text for e in events] == ["first", "second"]

    def test_tool_failure_details_are_kept(self, session_store) -> None:
        """Test that status, error and metadata reach the event payload."""
        session_store.add_session("ses_a")
        session_store.add_message("ses_a", "msg_1", created=100)
        session_store.add_tool(
            "msg_1",
            "prt_1",
            "bash",
            {"command": "pytest"},
            start=110,
            status="error",
            error="exit status 1",
            metadata={"exit": 1},
        )

        (event,) = _builder(session_store).build_timeline("ses_a")

        assert event.data["status"] == "error"
        assert event.data["error"] == "exit status 1"
        assert event.data["metadata"] == {"exit": 1}
        assert event.data["call_id"] == "call_prt_1"

    def test_missing_session_raises(self, session_store) -> None:
        """Test that an unknown session propagates SessionNotFoundError."""
        with pytest.raises(SessionNotFoundError):
            _builder(session_store).build_timeline("ses_missing")

    def test_empty_session_has_no_events(self, session_store) -> None:
        """Test that a session without messages has an empty timeline."""
        session_store.add_session("ses_a")

        assert _builder(session_store).build_timeline("ses_a") == []


class TestDelegation:
    """Tests for delegation links and build_tree()."""

    def _delegating_session(self, session_store, parent: str, child: str, ts: int) -> None:
        session_store.add_session(parent, created=ts)
        session_store.add_message(parent, f"msg_{parent}", created=ts)
        session_store.add_tool(
            f"msg_{parent}",
            f"prt_{parent}",
            "task",
            {"subagent_type": "coder", "description": "Implement", "prompt": "Do it"},
            start=ts + 1,
            metadata={"sessionId": child},
        )

    def test_task_call_records_delegation_link(self, session_store) -> None:
        """Test that a task call links to its child session."""
        self._delegating_session(session_store, "ses_root", "ses_child", 100)

        (event,) = _builder(session_store).build_timeline("ses_root")

        link = event.data["delegation"]
        assert link["child_session_id"] == "ses_child"
        assert link["agent"] == "coder"
        assert link["depth"] == 1

    def test_child_events_are_not_merged(self, session_store) -> None:
        """Test that the parent timeline excludes child events."""
        self._delegating_session(session_store, "ses_root", "ses_child", 100)
        session_store.add_session("ses_child", parent_id="ses_root", created=200)
        session_store.add_message("ses_child", "msg_c", created=200)
        session_store.add_tool("msg_c", "prt_c", "write", {"filePath": "x"}, start=210)

        events = _builder(session_store).build_timeline("ses_root")

        assert [e.tool for e in events] == ["task"]

    def test_build_tree_resolves_children(self, session_store) -> None:
        """Test the explicit delegation call tree."""
        self._delegating_session(session_store, "ses_root", "ses_child", 100)
        self._delegating_session(session_store, "ses_child", "ses_grandchild", 200)
        session_store.add_session("ses_grandchild", created=300)
        session_store.add_message("ses_grandchild", "msg_g", created=300)
        session_store.add_tool("msg_g", "prt_g", "edit", {"filePath": "y"}, start=310)

        tree = _builder(session_store).build_tree("ses_root")

        assert [(n.session.id, n.depth) for n in tree.walk()] == [
            ("ses_root", 0),
            ("ses_child", 1),
            ("ses_grandchild", 2),
        ]
        assert tree.children[0].events[0].data["delegation"]["depth"] == 2

    def test_build_tree_respects_depth_limit(self, session_store) -> None:
        """Test that children beyond the depth limit are not resolved."""
        self._delegating_session(session_store, "ses_root", "ses_child", 100)
        self._delegating_session(session_store, "ses_child", "ses_grandchild", 200)
        session_store.add_session("ses_grandchild", created=300)

        tree = _builder(session_store, max_depth=1).build_tree("ses_root")

        assert [n.session.id for n in tree.walk()] == ["ses_root", "ses_child"]

    def test_build_tree_survives_cycles_and_missing_children(self, session_store) -> None:
        """Test that cyclic links and absent children are skipped."""
        self._delegating_session(session_store, "ses_root", "ses_child", 100)
        self._delegating_session(session_store, "ses_child", "ses_root", 200)
        session_store.add_message("ses_root", "msg_extra", created=150)
        session_store.add_tool(
            "msg_extra",
            "prt_extra",
            "task",
            {"subagent_type": "tester"},
            start=160,
            metadata={"sessionId": "ses_gone"},
        )

        tree = _builder(session_store).build_tree("ses_root")

        assert [n.session.id for n in tree.walk()] == ["ses_root", "ses_child"]
