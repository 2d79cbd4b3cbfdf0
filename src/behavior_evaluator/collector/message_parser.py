"""Normalization of raw session records.

Raw records come straight from the JSON storage and may be missing any
optional field. MessageParser maps them onto the normalized models and
leaves gaps as None rather than failing.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from behavior_evaluator.collector.exceptions import MalformedRecordError
from behavior_evaluator.models.enums import MessageRole
from behavior_evaluator.models.session import Message, SessionInfo, TokenUsage

__all__ = ["MessageParser", "get_path", "as_int"]


def get_path(record: Any, *keys: str) -> Any:
    """Follow nested mapping keys, returning None on any gap."""
    value = record
    for key in keys:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def as_int(value: Any) -> int | None:
    """Coerce a numeric value to int, returning None for anything else.

    Non-finite values (inf, nan, or strings such as "1e400") yield None.

    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


def _as_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class MessageParser:
    """Maps raw message and session records onto normalized models."""

    def parse_message(
        self,
        raw: Any,
        session_id: str | None = None,
    ) -> Message:
        """Normalize one raw message record.

        Args:
            raw: Raw record as read from storage.
            session_id: Owning session, used when the record omits it.

        Returns:
            The normalized Message.

        Raises:
            MalformedRecordError: If the record is not a mapping, has no id,
                or has no recognizable role.

        """
        if not isinstance(raw, Mapping):
            raise MalformedRecordError(
                f"Message record must be a mapping, got {type(raw).__name__}"
            )

        message_id = _as_str(raw.get("id"))
        if message_id is None:
            raise MalformedRecordError("Message record has no id")

        try:
            role = MessageRole(raw.get("role"))
        except ValueError as e:
            raise MalformedRecordError(
                f"Message {message_id} has unknown role: {raw.get('role')!r}"
            ) from e

        created_at = as_int(get_path(raw, "time", "created")) or 0

        try:
            return Message(
                id=message_id,
                role=role,
                session_id=_as_str(raw.get("sessionID")) or session_id or "",
                agent=_as_str(raw.get("agent")) or _as_str(raw.get("mode")),
                model=self._parse_model(raw),
                tokens=self._parse_tokens(raw.get("tokens")),
                cost=_as_float(raw.get("cost")),
                created_at=created_at,
                completed_at=as_int(get_path(raw, "time", "completed")),
                error=self._parse_error(raw.get("error")),
            )
        except ValidationError as e:
            raise MalformedRecordError(f"Message {message_id} is invalid: {e}") from e

    def parse_session_info(self, raw: Any, session_id: str | None = None) -> SessionInfo:
        """Normalize a raw session metadata record.

        Args:
            raw: Raw record as read from storage.
            session_id: Identifier to use when the record omits it.

        Returns:
            The normalized SessionInfo.

        Raises:
            MalformedRecordError: If neither the record nor the caller
                provides an identifier.

        """
        record = raw if isinstance(raw, Mapping) else {}
        resolved_id = _as_str(record.get("id")) or session_id
        if not resolved_id:
            raise MalformedRecordError("Session record has no id")

        return SessionInfo(
            id=resolved_id,
            title=_as_str(record.get("title")) or "",
            created_at=as_int(get_path(record, "time", "created")),
            updated_at=as_int(get_path(record, "time", "updated")),
            parent_id=_as_str(record.get("parentID")),
            directory=_as_str(record.get("directory")),
        )

    @staticmethod
    def extract_text(parts: Iterable[Any]) -> str:
        """Concatenate the text of all text parts."""
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, Mapping)
            and part.get("type") == "text"
            and isinstance(part.get("text"), str)
        ]
        return "\n".join(texts)

    @staticmethod
    def _parse_model(raw: Mapping[str, Any]) -> str | None:
        # Assistant records carry flat ids, user records a nested "model" object.
        model_id = _as_str(raw.get("modelID")) or _as_str(get_path(raw, "model", "modelID"))
        provider_id = _as_str(raw.get("providerID")) or _as_str(
            get_path(raw, "model", "providerID")
        )
        if model_id is None:
            return _as_str(raw.get("model"))
        if provider_id is None:
            return model_id
        return f"{provider_id}/{model_id}"

    @staticmethod
    def _parse_tokens(raw: Any) -> TokenUsage | None:
        if not isinstance(raw, Mapping):
            return None
        return TokenUsage(
            input=as_int(raw.get("input")) or 0,
            output=as_int(raw.get("output")) or 0,
            reasoning=as_int(raw.get("reasoning")) or 0,
            cache_read=as_int(get_path(raw, "cache", "read")) or 0,
            cache_write=as_int(get_path(raw, "cache", "write")) or 0,
        )

    @staticmethod
    def _parse_error(raw: Any) -> str | None:
        if raw is None:
            return None
        if isinstance(raw, str):
            return raw or None
        if isinstance(raw, Mapping):
            return (
                _as_str(get_path(raw, "data", "message"))
                or _as_str(raw.get("message"))
                or _as_str(raw.get("name"))
            )
        return str(raw)
