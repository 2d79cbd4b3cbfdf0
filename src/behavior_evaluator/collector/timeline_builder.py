"""Timeline construction from recorded sessions.

This module provides the TimelineBuilder class, which merges normalized
messages and their parts into one ordered sequence of typed events and
resolves delegated sub-sessions into an explicit call tree.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from behavior_evaluator.collector.exceptions import MalformedRecordError, NotFoundError
from behavior_evaluator.collector.message_parser import MessageParser, as_int, get_path
from behavior_evaluator.collector.session_reader import SessionReader
from behavior_evaluator.config.defaults import DELEGATION_TOOLS
from behavior_evaluator.config.settings import get_settings
from behavior_evaluator.logging_config import get_logger
from behavior_evaluator.models.enums import EventType, MessageRole
from behavior_evaluator.models.session import Message
from behavior_evaluator.models.timeline_event import (
    DelegationLink,
    SessionTimeline,
    TimelineEvent,
)

__all__ = ["TimelineBuilder"]

logger = get_logger(__name__)


class TimelineBuilder:
    """Builds ordered timelines from a SessionReader.

    Malformed messages and parts never abort a build: they are logged
    and skipped, or emitted with best-effort payloads.

    Attributes:
        reader: Source of session records.
        max_delegation_depth: Deepest child session resolved by build_tree.

    """

    def __init__(
        self,
        reader: SessionReader,
        parser: MessageParser | None = None,
        max_delegation_depth: int | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            reader: Source of session records.
            parser: Message normalizer.
            max_delegation_depth: Depth limit for child sessions. Defaults
                to the configured collector setting.

        """
        self.reader = reader
        self._parser = parser or MessageParser()
        if max_delegation_depth is None:
            max_delegation_depth = get_settings().collector.max_delegation_depth
        self.max_delegation_depth = max_delegation_depth

    def build_timeline(self, session_id: str) -> list[TimelineEvent]:
        """Build the ordered events of one session.

        Delegated child sessions are linked from their tool_call events
        but their events are not merged into this timeline.

        Args:
            session_id: Session identifier.

        Returns:
            Events sorted by timestamp, ties kept in record order.

        Raises:
            SessionNotFoundError: If the session is absent from storage.

        """
        return self._build_events(session_id, depth=0)

    def build_tree(self, session_id: str) -> SessionTimeline:
        """Build the session's timeline together with its delegated children.

        Args:
            session_id: Root session identifier.

        Returns:
            Root node of the delegation call tree.

        Raises:
            SessionNotFoundError: If the root session is absent from storage.

        """
        return self._build_node(session_id, depth=0, visited={session_id})

    def _build_node(
        self,
        session_id: str,
        depth: int,
        visited: set[str],
    ) -> SessionTimeline:
        session = self.reader.get_session_info(session_id)
        events = self._build_events(session_id, depth=depth)

        children: list[SessionTimeline] = []
        for event in events:
            link = event.data.get("delegation")
            if not isinstance(link, Mapping):
                continue
            child_id = link.get("child_session_id")
            if not child_id or child_id in visited:
                continue
            if depth + 1 > self.max_delegation_depth:
                logger.debug(
                    "delegation_depth_limit_reached",
                    session_id=session_id,
                    child_session_id=child_id,
                    max_depth=self.max_delegation_depth,
                )
                continue

            visited.add(child_id)
            try:
                children.append(self._build_node(child_id, depth + 1, visited))
            except NotFoundError as e:
                logger.warning(
                    "child_session_missing",
                    session_id=session_id,
                    child_session_id=child_id,
                    error=str(e),
                )

        return SessionTimeline(
            session=session,
            depth=depth,
            events=tuple(events),
            children=tuple(children),
        )

    def _build_events(self, session_id: str, depth: int) -> list[TimelineEvent]:
        raw_messages = self.reader.get_messages(session_id)

        events: list[TimelineEvent] = []
        sequence = 0
        for raw in raw_messages:
            try:
                message = self._parser.parse_message(raw, session_id=session_id)
            except MalformedRecordError as e:
                logger.warning("message_skipped", session_id=session_id, error=str(e))
                continue

            try:
                parts = self.reader.get_parts(message.id)
            except NotFoundError as e:
                logger.warning("parts_unavailable", message_id=message.id, error=str(e))
                continue

            for part in parts:
                event = self._part_to_event(part, message, sequence, depth)
                sequence += 1
                if event is not None:
                    events.append(event)

        events.sort(key=lambda e: (e.timestamp, e.sequence))

        logger.debug(
            "timeline_built",
            session_id=session_id,
            message_count=len(raw_messages),
            event_count=len(events),
        )
        return events

    def _part_to_event(
        self,
        part: Any,
        message: Message,
        sequence: int,
        depth: int,
    ) -> TimelineEvent | None:
        if not isinstance(part, Mapping):
            return None

        part_type = part.get("type")
        if part_type == "text":
            return self._text_event(part, message, sequence)
        if part_type == "tool":
            return self._tool_event(part, message, sequence, depth)
        if part_type == "patch":
            return self._patch_event(part, message, sequence)
        return None

    def _text_event(
        self,
        part: Mapping[str, Any],
        message: Message,
        sequence: int,
    ) -> TimelineEvent | None:
        text = part.get("text")
        if not isinstance(text, str) or not text.strip():
            return None
        # Synthetic parts are injected by the harness, not written by either party.
        if part.get("synthetic") or part.get("ignored"):
            return None

        event_type = (
            EventType.user_message
            if message.role == MessageRole.user
            else EventType.assistant_message
        )
        return self._event(
            event_type,
            message,
            sequence,
            timestamp=as_int(get_path(part, "time", "start")),
            data={"text": text, "part_id": part.get("id")},
        )

    def _tool_event(
        self,
        part: Mapping[str, Any],
        message: Message,
        sequence: int,
        depth: int,
    ) -> TimelineEvent:
        state = part.get("state")
        if not isinstance(state, Mapping):
            state = {}

        tool = part.get("tool") if isinstance(part.get("tool"), str) else "unknown"
        tool_input = state.get("input")
        metadata = state.get("metadata")
        data: dict[str, Any] = {
            "tool": tool,
            "input": dict(tool_input) if isinstance(tool_input, Mapping) else {},
            "status": state.get("status") if isinstance(state.get("status"), str) else None,
            "output": state.get("output") if isinstance(state.get("output"), str) else None,
            "error": state.get("error") if isinstance(state.get("error"), str) else None,
            "call_id": part.get("callID"),
            "metadata": dict(metadata) if isinstance(metadata, Mapping) else {},
            "part_id": part.get("id"),
        }

        if tool in DELEGATION_TOOLS:
            child_id = get_path(state, "metadata", "sessionId") or get_path(
                state, "metadata", "sessionID"
            )
            agent = data["input"].get("subagent_type")
            data["delegation"] = DelegationLink(
                call_id=data["call_id"] if isinstance(data["call_id"], str) else None,
                agent=agent if isinstance(agent, str) else None,
                child_session_id=child_id if isinstance(child_id, str) else None,
                depth=depth + 1,
            ).model_dump()

        return self._event(
            EventType.tool_call,
            message,
            sequence,
            timestamp=as_int(get_path(state, "time", "start")),
            data=data,
        )

    def _patch_event(
        self,
        part: Mapping[str, Any],
        message: Message,
        sequence: int,
    ) -> TimelineEvent:
        files = part.get("files")
        return self._event(
            EventType.patch,
            message,
            sequence,
            # Patches are recorded when a step finishes.
            timestamp=message.completed_at,
            data={
                "files": [f for f in files if isinstance(f, str)]
                if isinstance(files, list)
                else [],
                "hash": part.get("hash"),
                "part_id": part.get("id"),
            },
        )

    @staticmethod
    def _event(
        event_type: EventType,
        message: Message,
        sequence: int,
        timestamp: int | None,
        data: dict[str, Any],
    ) -> TimelineEvent:
        return TimelineEvent(
            timestamp=timestamp if timestamp is not None else message.created_at,
            type=event_type,
            session_id=message.session_id,
            message_id=message.id,
            agent=message.agent,
            model=message.model,
            sequence=sequence,
            data=data,
        )
