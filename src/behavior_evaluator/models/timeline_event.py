"""Timeline models for behavior-evaluator.

This module defines the TimelineEvent model, the unit every evaluator
consumes, along with the delegation tree built from nested sessions.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from behavior_evaluator.models.base import FrozenSchema
from behavior_evaluator.models.enums import EventType
from behavior_evaluator.models.session import SessionInfo

__all__ = ["TimelineEvent", "DelegationLink", "SessionTimeline"]


class TimelineEvent(FrozenSchema):
    """A typed event in a session timeline.

    Events of one session are totally ordered by timestamp, with ties
    broken by the original record order kept in ``sequence``.

    Attributes:
        timestamp: When the event occurred, in epoch milliseconds.
        type: Kind of event.
        session_id: Session the event belongs to.
        message_id: Message the event was extracted from (optional).
        agent: Acting agent (optional).
        model: Model that produced the event (optional).
        sequence: Position of the source record in storage order.
        data: Kind-specific payload (text, tool/input/status, files).

    """

    timestamp: int
    type: EventType
    session_id: str = ""
    message_id: str | None = None
    agent: str | None = None
    model: str | None = None
    sequence: int = 0
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def tool(self) -> str | None:
        """Tool name for tool_call events."""
        tool = self.data.get("tool")
        return tool if isinstance(tool, str) else None

    @property
    def tool_input(self) -> dict[str, Any]:
        """Structured tool input, empty when missing or malformed."""
        value = self.data.get("input")
        return value if isinstance(value, dict) else {}

    @property
    def text(self) -> str:
        """Text of message events, empty for other kinds."""
        value = self.data.get("text")
        return value if isinstance(value, str) else ""


class DelegationLink(FrozenSchema):
    """Parent to child linkage recorded on a delegating tool call.

    Attributes:
        call_id: Identifier of the delegating tool call.
        agent: Target sub-agent, when recorded.
        child_session_id: Session spawned for the delegation, when known.
        depth: Depth of the child session (root session is 0).

    """

    call_id: str | None = None
    agent: str | None = None
    child_session_id: str | None = None
    depth: int = Field(default=1, ge=1)


class SessionTimeline(FrozenSchema):
    """One node of the delegation call tree.

    Child sessions stay separate nodes rather than being merged into
    the parent's events, so each can be evaluated independently.

    Attributes:
        session: Session identity.
        depth: Depth in the call tree (root session is 0).
        events: Ordered events of this session only.
        children: Child session timelines in delegation order.

    """

    session: SessionInfo
    depth: int = Field(default=0, ge=0)
    events: tuple[TimelineEvent, ...] = ()
    children: tuple[SessionTimeline, ...] = ()

    def walk(self) -> list[SessionTimeline]:
        """Return this node and all descendants, depth-first."""
        nodes = [self]
        for child in self.children:
            nodes.extend(child.walk())
        return nodes
