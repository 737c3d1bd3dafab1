"""LLM module - uniform interface over the AI text-generation backends."""

from .base import LLMProvider, LLMMessage, LLMResponse
from .catalog import ModelInfo, MODEL_CATALOG
from .openai_provider import OpenAICompatibleProvider
from .gemini_provider import GeminiProvider
from .registry import ProviderRegistry
from .factory import create_llm_provider, build_provider_registry

__all__ = [
    'LLMProvider',
    'LLMMessage',
    'LLMResponse',
    'ModelInfo',
    'MODEL_CATALOG',
    'OpenAICompatibleProvider',
    'GeminiProvider',
    'ProviderRegistry',
    'create_llm_provider',
    'build_provider_registry',
]
