"""
Session state transitions.

Pure functions from a session (plus the current time) to a new session. They
never perform I/O; the session store loads a record, applies one transition
and persists the result once.
"""

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

from ..llm.base import LLMMessage
from ..models.session import (
    TemporarySession,
    SessionMessage,
    SessionSettings,
    SessionMetadata,
    DEFAULT_TITLE,
)

SETTINGS_FIELDS = ("ai_model", "temperature", "max_tokens", "system_prompt")

_BASE36 = string.digits + string.ascii_lowercase


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_session_id(now: datetime) -> str:
    """``temp_<millis in base36>_<9 random base36 chars>``. Collisions are not re-checked."""
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"temp_{_to_base36(millis)}_{suffix}"


def new_session(
    *,
    now: datetime,
    ttl_hours: float,
    user_id: Optional[str] = None,
    title: Optional[str] = None,
    settings: Optional[SessionSettings] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> TemporarySession:
    return TemporarySession(
        session_id=generate_session_id(now),
        user_id=user_id,
        title=(title or "").strip() or DEFAULT_TITLE,
        settings=settings or SessionSettings(),
        metadata=SessionMetadata(ip_address=ip_address, user_agent=user_agent),
        created_at=now,
        updated_at=now,
        last_activity=now,
        expires_at=now + timedelta(hours=ttl_hours),
    )


def is_active(session: TemporarySession, now: datetime) -> bool:
    """A session is usable iff it has not expired and was not deactivated."""
    return session.is_active and session.expires_at > now


def _touch(session: TemporarySession, now: datetime, **changes: Any) -> TemporarySession:
    return session.model_copy(update={"updated_at": now, "last_activity": now, **changes})


def append_message(session: TemporarySession, message: SessionMessage, now: datetime) -> TemporarySession:
    """Append a message stamped with ``now`` and advance the usage counters."""
    stamped = message.model_copy(update={"timestamp": now})
    messages = [*session.messages, stamped]
    tokens = stamped.metadata.tokens if stamped.metadata else 0
    metadata = session.metadata.model_copy(update={
        "total_messages": len(messages),
        "total_tokens_used": session.metadata.total_tokens_used + max(tokens, 0),
    })
    return _touch(session, now, messages=messages, metadata=metadata)


def merge_settings(session: TemporarySession, partial: Mapping[str, Any], now: datetime) -> TemporarySession:
    """
    Shallow-merge known settings fields that are present and not None.

    Raises:
        pydantic.ValidationError: If the merged settings are invalid
    """
    changes = {k: v for k, v in partial.items() if k in SETTINGS_FIELDS and v is not None}
    merged = SessionSettings.model_validate({**session.settings.model_dump(), **changes})
    return _touch(session, now, settings=merged)


def extend_expiry(session: TemporarySession, hours: float, now: datetime) -> TemporarySession:
    """Reset the expiry window to ``now + hours`` (not added to the old expiry)."""
    return _touch(session, now, expires_at=now + timedelta(hours=hours))


def deactivate(session: TemporarySession, now: datetime) -> TemporarySession:
    return _touch(session, now, is_active=False)


def build_history(session: TemporarySession) -> List[LLMMessage]:
    """
    Conversation sent to the provider.

    The system prompt is prepended only when the latest user message is the
    only message in the session.
    """
    history = [LLMMessage.text(m.role, m.content) for m in session.messages]
    if len(history) == 1:
        history.insert(0, LLMMessage.text("system", session.settings.system_prompt))
    return history


def summary_fields(session: TemporarySession) -> Dict[str, Any]:
    return {
        "session_id": session.session_id,
        "title": session.title,
        "last_activity": session.last_activity,
        "expires_at": session.expires_at,
        "total_messages": session.metadata.total_messages,
        "total_tokens_used": session.metadata.total_tokens_used,
    }
