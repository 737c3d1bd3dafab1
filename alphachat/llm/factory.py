"""
LLM Provider Factory - Creates provider instances and the model registry.
"""

import logging
from typing import Any, Optional

from .base import LLMProvider
from .openai_provider import OpenAICompatibleProvider, deepseek_provider
from .gemini_provider import GeminiProvider
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

OPENAI_MODELS = ("gpt-3.5-turbo", "gpt-4", "gpt-4-turbo")


def create_llm_provider(
    provider: str = "openai",
    api_key: Optional[str] = "",
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    **kwargs
) -> Optional[LLMProvider]:
    """
    Create an LLM provider instance.

    Args:
        provider: Provider name ("openai", "gemini" or "deepseek")
        api_key: API key for the provider
        model: Default model name (uses provider default if not specified)
        base_url: Custom base URL (uses provider default if not specified)
        **kwargs: Additional provider-specific parameters

    Returns:
        LLMProvider instance, or None if api_key is not configured
    """
    if not api_key:
        return None

    params = {"api_key": api_key}
    if model:
        params["model"] = model
    if base_url:
        params["base_url"] = base_url
    params.update(kwargs)

    if provider == "openai":
        return OpenAICompatibleProvider(**params)
    elif provider == "gemini":
        return GeminiProvider(**params)
    elif provider == "deepseek":
        return deepseek_provider(**params)
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")


def build_provider_registry(config: Any) -> ProviderRegistry:
    """
    Build the model registry from application settings.
    Providers without an API key are left unregistered.

    Args:
        config: Settings object with provider keys and base URLs
    """
    registry = ProviderRegistry()
    timeout = config.provider_timeout_seconds

    openai = create_llm_provider(
        "openai", config.openai_api_key, base_url=config.openai_base_url, timeout=timeout
    )
    if openai:
        for model_id in OPENAI_MODELS:
            registry.register(model_id, openai)
        registry.register_image(openai, model=config.image_model)

    gemini = create_llm_provider(
        "gemini", config.gemini_api_key, base_url=config.gemini_base_url, timeout=timeout
    )
    if gemini:
        registry.register("gemini-pro", gemini, remote_model=config.gemini_model)

    deepseek = create_llm_provider(
        "deepseek", config.deepseek_api_key, base_url=config.deepseek_base_url, timeout=timeout
    )
    if deepseek:
        registry.register("deepseek-chat", deepseek)

    available = [m.id for m in registry.list_models() if registry.is_available(m.id)]
    logger.info(f"AI providers configured: {', '.join(available) or 'none'}")
    return registry
