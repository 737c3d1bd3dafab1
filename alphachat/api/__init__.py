"""API module."""

from .auth import router as auth_router
from .temporary_chat import router as temporary_chat_router
from .ai import router as ai_router

__all__ = ['auth_router', 'temporary_chat_router', 'ai_router']
