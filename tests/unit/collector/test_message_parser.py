"""Unit tests for the MessageParser module.

This module tests normalization of raw records including:
- Message fields, model ids and token usage
- Error extraction from structured errors
- Rejection of malformed message records
- Session metadata normalization
- Text extraction from parts
"""

import pytest

from behavior_evaluator.collector.exceptions import MalformedRecordError
from behavior_evaluator.collector.message_parser import MessageParser, as_int, get_path
from behavior_evaluator.models.enums import MessageRole


class TestParseMessage:
    """Tests for MessageParser.parse_message()."""

    def test_parses_assistant_message(self) -> None:
        """Test a fully populated assistant record."""
        raw = {
            "id": "msg_1",
            "sessionID": "ses_a",
            "role": "assistant",
            "mode": "build",
            "providerID": "anthropic",
            "modelID": "claude-sonnet",
            "cost": 0.25,
            "tokens": {"input": 10, "output": 5, "reasoning": 1, "cache": {"read": 3, "write": 2}},
            "time": {"created": 1000, "completed": 1500},
        }

        message = MessageParser().parse_message(raw)

        assert message.id == "msg_1"
        assert message.role == MessageRole.assistant
        assert message.session_id == "ses_a"
        assert message.agent == "build"
        assert message.model == "anthropic/claude-sonnet"
        assert message.cost == 0.25
        assert message.tokens.total == 21
        assert message.created_at == 1000
        assert message.duration_ms == 500

    def test_nested_model_of_user_message(self) -> None:
        """Test the nested model object carried by user records."""
        raw = {
            "id": "msg_1",
            "role": "user",
            "agent": "build",
            "model": {"providerID": "openai", "modelID": "gpt"},
            "time": {"created": 1},
        }

        message = MessageParser().parse_message(raw, session_id="ses_b")

        assert message.model == "openai/gpt"
        assert message.session_id == "ses_b"
        assert message.tokens is None

    def test_missing_optional_fields_stay_empty(self) -> None:
        """Test that gaps become None rather than errors."""
        message = MessageParser().parse_message({"id": "msg_1", "role": "assistant"})

        assert message.created_at == 0
        assert message.completed_at is None
        assert message.duration_ms is None
        assert message.model is None
        assert message.error is None

    def test_structured_error_message(self) -> None:
        """Test extraction of the message from a structured error."""
        raw = {
            "id": "msg_1",
            "role": "assistant",
            "error": {"name": "APIError", "data": {"message": "rate limited"}},
        }

        assert MessageParser().parse_message(raw).error == "rate limited"

    def test_error_falls_back_to_name(self) -> None:
        """Test that an error without a message reports its name."""
        raw = {"id": "msg_1", "role": "assistant", "error": {"name": "MessageAbortedError"}}

        assert MessageParser().parse_message(raw).error == "MessageAbortedError"

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            ["not", "a", "mapping"],
            {"role": "assistant"},
            {"id": "  ", "role": "assistant"},
            {"id": "msg_1", "role": "system"},
            {"id": "msg_1"},
        ],
    )
    def test_malformed_records_raise(self, raw) -> None:
        """Test that records without id or known role are rejected."""
        with pytest.raises(MalformedRecordError):
            MessageParser().parse_message(raw)


class TestParseSessionInfo:
    """Tests for MessageParser.parse_session_info()."""

    def test_parses_metadata(self) -> None:
        """Test a complete session record."""
        raw = {
            "id": "ses_a",
            "title": " Refactor ",
            "parentID": "ses_root",
            "directory": "/work",
            "time": {"created": 10, "updated": 20},
        }

        info = MessageParser().parse_session_info(raw)

        assert info.id == "ses_a"
        assert info.title == "Refactor"
        assert info.parent_id == "ses_root"
        assert info.directory == "/work"
        assert (info.created_at, info.updated_at) == (10, 20)

    def test_uses_fallback_id(self) -> None:
        """Test that the caller's id fills a missing record id."""
        assert MessageParser().parse_session_info({}, session_id="ses_x").id == "ses_x"

    def test_no_id_raises(self) -> None:
        """Test that a record without any id is rejected."""
        with pytest.raises(MalformedRecordError):
            MessageParser().parse_session_info({"title": "x"})


class TestHelpers:
    """Tests for extract_text(), get_path() and as_int()."""

    def test_extract_text_joins_text_parts(self) -> None:
        """Test that only text parts contribute."""
        parts = [
            {"type": "text", "text": "Hello"},
            {"type": "tool", "tool": "read"},
            {"type": "text", "text": "World"},
            "garbage",
        ]

        assert MessageParser.extract_text(parts) == "Hello\nWorld"

    def test_get_path(self) -> None:
        """Test nested lookups and gaps."""
        record = {"time": {"created": 5}}

        assert get_path(record, "time", "created") == 5
        assert get_path(record, "time", "missing") is None
        assert get_path(record, "time", "created", "deeper") is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (5, 5),
            (5.9, 5),
            ("12", 12),
            ("x", None),
            (True, None),
            (None, None),
            (float("inf"), None),
            (float("nan"), None),
            ("1e400", None),
            ("NaN", None),
        ],
    )
    def test_as_int(self, value, expected) -> None:
        """Test numeric coercion."""
        assert as_int(value) == expected
