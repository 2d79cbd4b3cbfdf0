"""Test fixtures for behavior-evaluator tests.

This package provides builders for timeline events and a helper that
writes sessions in the on-disk storage layout read by SessionReader.
"""

import json
from pathlib import Path
from typing import Any

from behavior_evaluator.models.enums import EventType
from behavior_evaluator.models.session import SessionInfo
from behavior_evaluator.models.timeline_event import TimelineEvent

__all__ = [
    "DEFAULT_SESSION_ID",
    "SessionStore",
    "assistant_message",
    "make_session_info",
    "patch_event",
    "tool_call",
    "user_message",
]

DEFAULT_SESSION_ID = "ses_test"


def make_session_info(session_id: str = DEFAULT_SESSION_ID, title: str = "Test session") -> SessionInfo:
    """Build a SessionInfo for evaluator tests."""
    return SessionInfo(id=session_id, title=title, created_at=0)


def tool_call(
    timestamp: int,
    tool: str,
    status: str = "completed",
    error: str | None = None,
    metadata: dict[str, Any] | None = None,
    sequence: int | None = None,
    session_id: str = DEFAULT_SESSION_ID,
    **tool_input: Any,
) -> TimelineEvent:
    """Build a tool_call event; keyword arguments become the tool input."""
    return TimelineEvent(
        timestamp=timestamp,
        type=EventType.tool_call,
        session_id=session_id,
        sequence=timestamp if sequence is None else sequence,
        data={
            "tool": tool,
            "input": tool_input,
            "status": status,
            "error": error,
            "metadata": metadata or {},
        },
    )


def assistant_message(
    timestamp: int,
    text: str,
    sequence: int | None = None,
    session_id: str = DEFAULT_SESSION_ID,
) -> TimelineEvent:
    """Build an assistant_message event."""
    return TimelineEvent(
        timestamp=timestamp,
        type=EventType.assistant_message,
        session_id=session_id,
        sequence=timestamp if sequence is None else sequence,
        data={"text": text},
    )


def user_message(
    timestamp: int,
    text: str,
    sequence: int | None = None,
    session_id: str = DEFAULT_SESSION_ID,
) -> TimelineEvent:
    """Build a user_message event."""
    return TimelineEvent(
        timestamp=timestamp,
        type=EventType.user_message,
        session_id=session_id,
        sequence=timestamp if sequence is None else sequence,
        data={"text": text},
    )


def patch_event(timestamp: int, files: list[str], session_id: str = DEFAULT_SESSION_ID) -> TimelineEvent:
    """Build a patch event."""
    return TimelineEvent(
        timestamp=timestamp,
        type=EventType.patch,
        session_id=session_id,
        sequence=timestamp,
        data={"files": files, "hash": "abc123"},
    )


class SessionStore:
    """Writes session, message and part records under a storage root.

    Attributes:
        root: Storage path handed to SessionReader.

    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._storage = root / "storage"

    def add_session(
        self,
        session_id: str,
        project_id: str = "proj_test",
        title: str = "",
        created: int = 1000,
        parent_id: str | None = None,
        **extra: Any,
    ) -> Path:
        """Write a session metadata record."""
        record: dict[str, Any] = {
            "id": session_id,
            "title": title,
            "time": {"created": created, "updated": created},
            **extra,
        }
        if parent_id is not None:
            record["parentID"] = parent_id
        return self._write(self._storage / "session" / project_id / f"{session_id}.json", record)

    def add_message(
        self,
        session_id: str,
        message_id: str,
        role: str = "assistant",
        created: int = 1000,
        completed: int | None = None,
        **extra: Any,
    ) -> Path:
        """Write a message record."""
        time: dict[str, int] = {"created": created}
        if completed is not None:
            time["completed"] = completed
        record = {"id": message_id, "sessionID": session_id, "role": role, "time": time, **extra}
        return self._write(self._storage / "message" / session_id / f"{message_id}.json", record)

    def add_part(self, message_id: str, part_id: str, record: dict[str, Any]) -> Path:
        """Write a raw part record."""
        return self._write(
            self._storage / "part" / message_id / f"{part_id}.json",
            {"id": part_id, "messageID": message_id, **record},
        )

    def add_text(
        self,
        message_id: str,
        part_id: str,
        text: str,
        start: int | None = None,
        **extra: Any,
    ) -> Path:
        """Write a text part."""
        record: dict[str, Any] = {"type": "text", "text": text, **extra}
        if start is not None:
            record["time"] = {"start": start, "end": start}
        return self.add_part(message_id, part_id, record)

    def add_tool(
        self,
        message_id: str,
        part_id: str,
        tool: str,
        tool_input: dict[str, Any] | None = None,
        start: int | None = None,
        status: str = "completed",
        **state: Any,
    ) -> Path:
        """Write a tool part; extra keywords go into the tool state."""
        tool_state: dict[str, Any] = {"status": status, "input": tool_input or {}, **state}
        if start is not None:
            tool_state["time"] = {"start": start, "end": start + 1}
        return self.add_part(
            message_id,
            part_id,
            {"type": "tool", "tool": tool, "callID": f"call_{part_id}", "state": tool_state},
        )

    def write_raw(self, relative: str, content: str) -> Path:
        """Write arbitrary text under the storage directory."""
        path = self._storage / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    @staticmethod
    def _write(path: Path, record: dict[str, Any]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(record), encoding="utf-8")
        return path
