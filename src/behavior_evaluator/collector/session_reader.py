"""Read-only access to recorded sessions.

This module provides the SessionReader class, the single seam through
which the engine reaches stored session data.

Storage layout (rooted at ``storage_path``):
    storage/session/{project_id}/{session_id}.json   <- session metadata
    storage/message/{session_id}/{message_id}.json   <- one file per message
    storage/part/{message_id}/{part_id}.json         <- one file per part
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from behavior_evaluator.collector.exceptions import (
    MalformedRecordError,
    MessageNotFoundError,
    PartNotFoundError,
    SessionNotFoundError,
)
from behavior_evaluator.collector.message_parser import MessageParser, as_int, get_path
from behavior_evaluator.config.settings import get_settings
from behavior_evaluator.logging_config import get_logger
from behavior_evaluator.models.session import SessionInfo

__all__ = ["SessionReader"]

logger = get_logger(__name__)


class SessionReader:
    """Reads session metadata, messages and parts from JSON storage.

    The reader holds no cache and has no side effects, so it may be
    called repeatedly and from several threads for different sessions.

    Attributes:
        storage_path: Root of the session storage.

    """

    def __init__(
        self,
        storage_path: Path | str | None = None,
        parser: MessageParser | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            storage_path: Root of the session storage. Defaults to the
                configured collector storage path.
            parser: Normalizer used for session metadata records.

        """
        if storage_path is None:
            storage_path = get_settings().collector.storage_path
        self.storage_path = Path(storage_path).expanduser()
        self._parser = parser or MessageParser()
        self._root = self.storage_path / "storage"

    def get_session_info(self, session_id: str) -> SessionInfo:
        """Return the metadata of a session.

        A session whose metadata file is missing but whose messages exist
        yields a minimal SessionInfo carrying only its id.

        Args:
            session_id: Session identifier.

        Returns:
            The session's SessionInfo.

        Raises:
            SessionNotFoundError: If the session is absent from storage.

        """
        self._require_id(session_id, SessionNotFoundError)
        session_file = self._find_session_file(session_id)

        if session_file is None:
            if self._message_dir(session_id).is_dir():
                logger.debug("session_info_missing", session_id=session_id)
                return SessionInfo(id=session_id)
            raise SessionNotFoundError(session_id)

        raw = self._read_json(session_file)
        try:
            return self._parser.parse_session_info(raw, session_id=session_id)
        except MalformedRecordError:
            return SessionInfo(id=session_id)

    def get_messages(self, session_id: str) -> list[dict[str, Any]]:
        """Return the raw message records of a session in creation order.

        Messages are ordered by creation time, then by id.

        Args:
            session_id: Session identifier.

        Returns:
            Raw message records; empty for a session without messages.

        Raises:
            SessionNotFoundError: If the session is absent from storage.

        """
        self._require_id(session_id, SessionNotFoundError)
        message_dir = self._message_dir(session_id)

        if not message_dir.is_dir():
            if self._find_session_file(session_id) is None:
                raise SessionNotFoundError(session_id)
            return []

        messages = self._read_dir(message_dir)
        messages.sort(
            key=lambda m: (as_int(get_path(m, "time", "created")) or 0, str(m.get("id", "")))
        )
        return messages

    def get_message(self, session_id: str, message_id: str) -> dict[str, Any]:
        """Return one raw message record.

        Raises:
            MessageNotFoundError: If the message is absent from storage.

        """
        self._require_id(session_id, MessageNotFoundError)
        self._require_id(message_id, MessageNotFoundError)
        path = self._message_dir(session_id) / f"{message_id}.json"
        raw = self._read_json(path) if path.is_file() else None
        if raw is None:
            raise MessageNotFoundError(message_id)
        return raw

    def get_parts(self, message_id: str) -> list[dict[str, Any]]:
        """Return the raw part records of a message, ordered by part id.

        A message without a part directory has no parts.

        """
        self._require_id(message_id, MessageNotFoundError)
        part_dir = self._root / "part" / message_id
        if not part_dir.is_dir():
            return []
        return self._read_dir(part_dir)

    def get_part(self, message_id: str, part_id: str) -> dict[str, Any]:
        """Return one raw part record.

        Raises:
            PartNotFoundError: If the part is absent from storage.

        """
        self._require_id(message_id, PartNotFoundError)
        self._require_id(part_id, PartNotFoundError)
        path = self._root / "part" / message_id / f"{part_id}.json"
        raw = self._read_json(path) if path.is_file() else None
        if raw is None:
            raise PartNotFoundError(part_id)
        return raw

    def list_sessions(self, project_id: str | None = None) -> list[SessionInfo]:
        """List stored sessions, oldest first.

        Args:
            project_id: Restrict the listing to one project directory.

        Returns:
            SessionInfo of every readable session file.

        """
        session_root = self._root / "session"
        if not session_root.is_dir():
            return []

        pattern = f"{project_id}/*.json" if project_id else "*/*.json"
        sessions: list[SessionInfo] = []
        for path in sorted(session_root.glob(pattern)):
            raw = self._read_json(path)
            if raw is None:
                continue
            try:
                sessions.append(self._parser.parse_session_info(raw, session_id=path.stem))
            except MalformedRecordError as e:
                logger.warning("session_record_skipped", path=str(path), error=str(e))

        sessions.sort(key=lambda s: (s.created_at or 0, s.id))
        return sessions

    def get_child_sessions(self, session_id: str) -> list[SessionInfo]:
        """Return the sessions delegated from the given session."""
        return [s for s in self.list_sessions() if s.parent_id == session_id]

    def _message_dir(self, session_id: str) -> Path:
        return self._root / "message" / session_id

    def _find_session_file(self, session_id: str) -> Path | None:
        session_root = self._root / "session"
        if not session_root.is_dir():
            return None
        matches = sorted(session_root.glob(f"*/{session_id}.json"))
        return matches[0] if matches else None

    def _read_dir(self, directory: Path) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        for path in sorted(directory.glob("*.json")):
            raw = self._read_json(path)
            if raw is not None:
                records.append(raw)
        return records

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any] | None:
        """Load a JSON object, returning None for unreadable records.

        Invalid JSON and invalid UTF-8 both surface as ValueError.

        """
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("record_unreadable", path=str(path), error=str(e))
            return None

        if not isinstance(data, dict):
            logger.warning(
                "record_not_mapping",
                path=str(path),
                actual_type=type(data).__name__,
            )
            return None
        return data

    @staticmethod
    def _require_id(record_id: str, error_class: type[Exception]) -> None:
        """Reject identifiers that could escape the storage root."""
        if (
            not record_id
            or "/" in record_id
            or "\\" in record_id
            or record_id.startswith(".")
        ):
            raise error_class(record_id)
