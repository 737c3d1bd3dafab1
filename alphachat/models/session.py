"""
Temporary Chat Session Models.

JSON field names are camelCase (``aiModel``, ``expiresAt``...) while Python
attributes stay snake_case; both spellings are accepted on input.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional, List, Literal
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..llm.catalog import DEFAULT_MODEL_ID, SUPPORTED_MODEL_IDS

MessageRole = Literal["user", "assistant", "system"]

DEFAULT_TITLE = "Temporary Chat"
DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _check_model_id(value: str) -> str:
    if value not in SUPPORTED_MODEL_IDS:
        raise ValueError(f"Unsupported model: {value}")
    return value


ModelId = Annotated[str, AfterValidator(_check_model_id)]


class CamelModel(BaseModel):
    """Base model serializing to camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageMetadata(CamelModel):
    """Generation details recorded on assistant messages."""
    model: Optional[str] = None
    tokens: int = 0
    processing_time: Optional[float] = None  # milliseconds
    category: Optional[str] = None  # usage category, e.g. "chat"


class SessionMessage(CamelModel):
    """A single message in a session. Never edited once stored."""
    role: MessageRole
    content: str = Field(..., min_length=1)
    timestamp: datetime = Field(default_factory=_utc_now)
    metadata: Optional[MessageMetadata] = None


class SessionSettings(CamelModel):
    """Mutable generation settings of a session."""
    ai_model: ModelId = DEFAULT_MODEL_ID
    temperature: float = Field(0.7, ge=0, le=2)
    max_tokens: int = Field(1000, ge=1, le=4096)
    system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, min_length=1)


class SettingsUpdate(CamelModel):
    """Partial settings; unset fields are left untouched on merge."""
    ai_model: Optional[ModelId] = None
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, ge=1, le=4096)
    system_prompt: Optional[str] = Field(None, min_length=1)


class SessionMetadata(CamelModel):
    """Client info captured at creation plus running usage counters."""
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    total_tokens_used: int = 0
    total_messages: int = 0


class TemporarySession(CamelModel):
    """A TTL-bound conversation, optionally owned by a user."""
    session_id: str
    user_id: Optional[str] = None
    title: str = Field(DEFAULT_TITLE, max_length=100)
    messages: List[SessionMessage] = Field(default_factory=list)
    settings: SessionSettings = Field(default_factory=SessionSettings)
    is_active: bool = True
    metadata: SessionMetadata = Field(default_factory=SessionMetadata)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
    last_activity: datetime = Field(default_factory=_utc_now)
    expires_at: datetime


class CreateSessionRequest(CamelModel):
    """Body of the session creation endpoint."""
    title: Optional[str] = Field(None, max_length=100)
    ai_model: Optional[ModelId] = None
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, ge=1, le=4096)
    system_prompt: Optional[str] = Field(None, min_length=1)


class SendMessageRequest(BaseModel):
    message: str


class ExtendExpiryRequest(BaseModel):
    hours: float = 24


class GenerationSummary(CamelModel):
    """The assistant reply returned to the caller of send_message."""
    content: str
    model: str
    tokens: int = 0
    processing_time: float = 0.0


class SendMessageResult(CamelModel):
    session_id: str
    last_message: GenerationSummary
    total_messages: int
    total_tokens: int
    messages: List[SessionMessage] = Field(default_factory=list)


class SessionStats(CamelModel):
    session_id: str
    total_messages: int
    total_tokens_used: int
    created_at: datetime
    last_activity: datetime
    expires_at: datetime
    settings: SessionSettings
    is_active: bool


class SessionSummary(CamelModel):
    """Listing entry for a user's active sessions."""
    session_id: str
    title: str
    last_activity: datetime
    expires_at: datetime
    total_messages: int
    total_tokens_used: int
