"""
Temporary Chat Service - lifecycle of ephemeral AI chat sessions.

Every operation re-reads the session from the store; nothing is cached across
calls. ``send_message`` spans several store operations without a
transaction: if generation fails the user message stays in the history.
"""

import logging
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.errors import SessionNotFoundError, ValidationError
from ..core.session_state import build_history, summary_fields
from ..llm.registry import ProviderRegistry
from ..models.session import (
    TemporarySession,
    SessionMessage,
    MessageMetadata,
    SessionSettings,
    GenerationSummary,
    SendMessageResult,
    SessionStats,
    SessionSummary,
)
from ..storage.session_store import SessionStore
from .usage import UsageAccountant

logger = logging.getLogger(__name__)

CHAT_CATEGORY = "chat"


def clean_message(message: Any, max_length: int) -> str:
    """
    Return the stripped message.

    Raises:
        ValidationError: If the message is empty or longer than max_length
    """
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("Message is required and cannot be empty")
    if len(message) > max_length:
        raise ValidationError(f"Message too long. Maximum {max_length} characters allowed")
    return message.strip()


class TemporaryChatService:
    """
    Orchestrates temporary sessions over a session store and the AI providers.
    """

    def __init__(
        self,
        store: SessionStore,
        providers: ProviderRegistry,
        usage: Optional[UsageAccountant] = None,
        max_message_length: int = 4000,
        max_extend_hours: float = 168,
    ):
        """
        Args:
            store: Session persistence
            providers: Registry resolving model ids to providers
            usage: Quota checks for owned sessions (None disables them)
            max_message_length: Longest accepted user message
            max_extend_hours: Upper bound of an expiry extension
        """
        self.store = store
        self.providers = providers
        self.usage = usage
        self.max_message_length = max_message_length
        self.max_extend_hours = max_extend_hours

    async def create_session(
        self,
        user_id: Optional[str] = None,
        title: Optional[str] = None,
        ai_model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> TemporarySession:
        overrides = {
            "ai_model": ai_model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "system_prompt": system_prompt,
        }
        try:
            settings = SessionSettings(**{k: v for k, v in overrides.items() if v is not None})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid settings: {e.errors()[0]['msg']}") from e

        session = await self.store.create(
            user_id=user_id,
            title=title,
            settings=settings,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.info(
            f"Created temporary chat session: {session.session_id}",
            extra={"extra_fields": {
                "session_id": session.session_id,
                "user_id": user_id,
                "ai_model": settings.ai_model,
            }}
        )
        return session

    async def get_session(self, session_id: str) -> TemporarySession:
        """
        Raises:
            SessionNotFoundError: If the session is missing or expired
        """
        session = await self.store.find_active(session_id)
        if session is None:
            raise SessionNotFoundError()
        return session

    async def send_message(self, session_id: str, message: str) -> SendMessageResult:
        """
        Append a user message, generate the assistant reply and append it.

        Raises:
            ValidationError: If the message is empty or too long
            SessionNotFoundError: If the session is missing or expired
            QuotaExceededError: If the session owner is out of chat quota
            ProviderError: If generation fails (the user message is kept)
        """
        text = clean_message(message, self.max_message_length)

        session = await self.get_session(session_id)
        if session.user_id and self.usage is not None:
            await self.usage.check_quota(session.user_id, CHAT_CATEGORY)

        session = await self.store.append(session_id, SessionMessage(role="user", content=text))

        settings = session.settings
        response = await self.providers.generate(
            settings.ai_model,
            build_history(session),
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

        session = await self.store.append(session_id, SessionMessage(
            role="assistant",
            content=response.content,
            metadata=MessageMetadata(
                model=settings.ai_model,
                tokens=response.token_count,
                processing_time=response.latency_ms,
                category=CHAT_CATEGORY,
            ),
        ))
        if session.user_id and self.usage is not None:
            await self.usage.record_output(
                session.user_id, CHAT_CATEGORY, model=settings.ai_model, tokens=response.token_count
            )

        return SendMessageResult(
            session_id=session.session_id,
            last_message=GenerationSummary(
                content=response.content,
                model=settings.ai_model,
                tokens=response.token_count,
                processing_time=response.latency_ms,
            ),
            total_messages=session.metadata.total_messages,
            total_tokens=session.metadata.total_tokens_used,
            messages=session.messages,
        )

    async def update_settings(self, session_id: str, new_settings: Mapping[str, Any]) -> TemporarySession:
        """Merge the provided settings; fields that are absent or None are kept."""
        return await self.store.update_settings(session_id, new_settings)

    async def extend_expiry(self, session_id: str, hours: float = 24) -> TemporarySession:
        """
        Reset the session expiry to now + hours.

        Raises:
            ValidationError: If hours is outside [1, max_extend_hours]
        """
        if not 1 <= hours <= self.max_extend_hours:
            raise ValidationError(
                f"Hours must be between 1 and {self.max_extend_hours:g}"
            )
        return await self.store.extend_expiry(session_id, hours)

    async def delete_session(self, session_id: str) -> str:
        if not await self.store.delete(session_id):
            raise SessionNotFoundError("Chat session not found")
        logger.info(f"Deleted temporary chat session: {session_id}")
        return session_id

    async def get_session_stats(self, session_id: str) -> SessionStats:
        session = await self.get_session(session_id)
        return SessionStats(
            session_id=session.session_id,
            total_messages=session.metadata.total_messages,
            total_tokens_used=session.metadata.total_tokens_used,
            created_at=session.created_at,
            last_activity=session.last_activity,
            expires_at=session.expires_at,
            settings=session.settings,
            is_active=session.is_active,
        )

    async def list_user_sessions(self, user_id: str) -> List[SessionSummary]:
        sessions = await self.store.list_active_for_user(user_id)
        return [SessionSummary(**summary_fields(s)) for s in sessions]

    async def cleanup_expired(self) -> int:
        deleted = await self.store.sweep_expired()
        logger.info(f"Cleaned up {deleted} expired temporary chat sessions")
        return deleted
