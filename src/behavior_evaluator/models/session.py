"""Session and message models for behavior-evaluator.

This module defines the normalized shapes of a recorded session:
its identity (SessionInfo) and its turns (Message).
"""

from pydantic import Field

from behavior_evaluator.models.base import FrozenSchema
from behavior_evaluator.models.enums import MessageRole

__all__ = ["SessionInfo", "TokenUsage", "Message"]


class SessionInfo(FrozenSchema):
    """Identity and framing of one recorded interaction.

    Attributes:
        id: Session identifier.
        title: Display title.
        created_at: Creation time in epoch milliseconds.
        updated_at: Last update time in epoch milliseconds.
        parent_id: Parent session for delegated child sessions.
        directory: Working directory of the session, when recorded.

    """

    id: str = Field(..., min_length=1)
    title: str = ""
    created_at: int | None = None
    updated_at: int | None = None
    parent_id: str | None = None
    directory: str | None = None


class TokenUsage(FrozenSchema):
    """Token counts reported for one assistant message."""

    input: int = 0
    output: int = 0
    reasoning: int = 0
    cache_read: int = 0
    cache_write: int = 0

    @property
    def total(self) -> int:
        """All tokens, including cache reads and writes."""
        return (
            self.input + self.output + self.reasoning + self.cache_read + self.cache_write
        )


class Message(FrozenSchema):
    """One normalized turn of a session.

    Attributes:
        id: Message identifier.
        role: Author role.
        session_id: Owning session.
        agent: Acting agent name, when recorded.
        model: Model identifier (provider/model), when recorded.
        tokens: Token usage, when recorded.
        cost: Cost in USD, when recorded.
        created_at: Creation time in epoch milliseconds.
        completed_at: Completion time in epoch milliseconds.
        error: Error text reported for the message, if any.

    """

    id: str = Field(..., min_length=1)
    role: MessageRole
    session_id: str
    agent: str | None = None
    model: str | None = None
    tokens: TokenUsage | None = None
    cost: float | None = None
    created_at: int = 0
    completed_at: int | None = None
    error: str | None = None

    @property
    def duration_ms(self) -> int | None:
        """Wall time between creation and completion."""
        if self.completed_at is None:
            return None
        return max(0, self.completed_at - self.created_at)
