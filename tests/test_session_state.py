"""
Unit tests for session state transitions.
"""

import re
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from alphachat.core import session_state
from alphachat.models import SessionMessage, MessageMetadata, SessionSettings
from alphachat.models.session import DEFAULT_SYSTEM_PROMPT

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _session(**kwargs):
    return session_state.new_session(now=NOW, ttl_hours=24, **kwargs)


def _assistant(content="reply", tokens=10, category="chat"):
    return SessionMessage(
        role="assistant",
        content=content,
        metadata=MessageMetadata(model="gpt-3.5-turbo", tokens=tokens, category=category),
    )


class TestNewSession:

    def test_defaults(self):
        session = _session()
        assert session.title == "Temporary Chat"
        assert session.settings == SessionSettings()
        assert session.messages == []
        assert session.is_active is True
        assert session.metadata.total_messages == 0
        assert session.metadata.total_tokens_used == 0
        assert session.created_at == NOW
        assert session.expires_at == NOW + timedelta(hours=24)

    def test_blank_title_falls_back_to_default(self):
        assert _session(title="   ").title == "Temporary Chat"
        assert _session(title="Trip ideas").title == "Trip ideas"

    def test_session_id_format(self):
        session_id = session_state.generate_session_id(NOW)
        assert re.fullmatch(r"temp_[0-9a-z]+_[0-9a-z]{9}", session_id)
        millis = int(session_id.split("_")[1], 36)
        assert millis == int(NOW.timestamp() * 1000)

    def test_session_ids_differ(self):
        ids = {session_state.generate_session_id(NOW) for _ in range(50)}
        assert len(ids) == 50


class TestIsActive:

    def test_expiry_boundary(self):
        session = _session()
        assert session_state.is_active(session, NOW + timedelta(hours=23, minutes=59))
        assert not session_state.is_active(session, NOW + timedelta(hours=24))

    def test_deactivated_session(self):
        session = session_state.deactivate(_session(), NOW)
        assert not session_state.is_active(session, NOW)


class TestAppendMessage:

    def test_counters_follow_messages(self):
        session = _session()
        later = NOW + timedelta(minutes=5)
        session = session_state.append_message(session, SessionMessage(role="user", content="Hello"), NOW)
        session = session_state.append_message(session, _assistant(tokens=42), later)

        assert session.metadata.total_messages == 2
        assert session.metadata.total_tokens_used == 42
        assert session.messages[1].timestamp == later
        assert session.last_activity == later
        assert session.updated_at == later

    def test_input_session_is_not_modified(self):
        session = _session()
        session_state.append_message(session, SessionMessage(role="user", content="Hello"), NOW)
        assert session.messages == []


class TestMergeSettings:

    def test_shallow_merge_keeps_other_fields(self):
        session = _session(settings=SessionSettings(temperature=0.3, system_prompt="Be terse."))
        merged = session_state.merge_settings(session, {"max_tokens": 200, "temperature": None}, NOW)

        assert merged.settings.max_tokens == 200
        assert merged.settings.temperature == 0.3
        assert merged.settings.system_prompt == "Be terse."
        assert merged.settings.ai_model == "gpt-3.5-turbo"

    def test_unknown_keys_are_ignored(self):
        merged = session_state.merge_settings(_session(), {"is_active": False}, NOW)
        assert merged.is_active is True

    def test_out_of_range_value_rejected(self):
        with pytest.raises(PydanticValidationError):
            session_state.merge_settings(_session(), {"temperature": 3.5}, NOW)

    def test_unknown_model_rejected(self):
        with pytest.raises(PydanticValidationError):
            session_state.merge_settings(_session(), {"ai_model": "llama-9000"}, NOW)


class TestExtendExpiry:

    def test_resets_from_now(self):
        session = _session()
        later = NOW + timedelta(hours=10)
        extended = session_state.extend_expiry(session, 48, later)
        assert extended.expires_at == later + timedelta(hours=48)

    def test_can_shorten_remaining_lifetime(self):
        session = session_state.extend_expiry(_session(), 100, NOW)
        shortened = session_state.extend_expiry(session, 1, NOW)
        assert shortened.expires_at == NOW + timedelta(hours=1)


class TestBuildHistory:

    def test_system_prompt_only_for_first_message(self):
        session = _session()
        session = session_state.append_message(session, SessionMessage(role="user", content="Hi"), NOW)

        history = session_state.build_history(session)
        assert [m.role for m in history] == ["system", "user"]
        assert history[0].content == DEFAULT_SYSTEM_PROMPT

        session = session_state.append_message(session, _assistant(), NOW)
        session = session_state.append_message(session, SessionMessage(role="user", content="Again"), NOW)
        history = session_state.build_history(session)
        assert [m.role for m in history] == ["user", "assistant", "user"]
