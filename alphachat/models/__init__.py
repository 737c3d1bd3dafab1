"""Models module."""

from .user import (
    User, UserCreate, UserInDB, LoginRequest, Token, TokenData,
    Subscription, SubscriptionFeatures,
)
from .session import (
    TemporarySession, SessionMessage, MessageMetadata, SessionSettings, SettingsUpdate,
    SessionMetadata, CreateSessionRequest, SendMessageRequest, ExtendExpiryRequest,
    GenerationSummary, SendMessageResult, SessionStats, SessionSummary,
)
from .usage import QuotaStatus, UsageRecord
from .ai import (
    ChatRequest, CodeRequest, ImageRequest, VideoRequest, AIReply, ImageResult,
)

__all__ = [
    'User', 'UserCreate', 'UserInDB', 'LoginRequest', 'Token', 'TokenData',
    'Subscription', 'SubscriptionFeatures',
    'TemporarySession', 'SessionMessage', 'MessageMetadata', 'SessionSettings', 'SettingsUpdate',
    'SessionMetadata', 'CreateSessionRequest', 'SendMessageRequest', 'ExtendExpiryRequest',
    'GenerationSummary', 'SendMessageResult', 'SessionStats', 'SessionSummary',
    'QuotaStatus', 'UsageRecord',
    'ChatRequest', 'CodeRequest', 'ImageRequest', 'VideoRequest', 'AIReply', 'ImageResult',
]
