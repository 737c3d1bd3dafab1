"""Services module - session lifecycle, AI generation, usage accounting and scheduled cleanup."""

from .usage import UsageAccountant
from .temporary_chat import TemporaryChatService
from .ai_generation import AIGenerationService
from .scheduler import CleanupScheduler

__all__ = ['UsageAccountant', 'TemporaryChatService', 'AIGenerationService', 'CleanupScheduler']
