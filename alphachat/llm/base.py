"""
LLM Provider Base - Abstract base for all text-generation backends.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field

from ..core.errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass
class LLMMessage:
    """A message in a conversation sent to a provider."""
    role: str  # "system", "user", "assistant"
    content: str

    @staticmethod
    def text(role: str, text: str) -> "LLMMessage":
        """Create a text message."""
        return LLMMessage(role=role, content=text)


@dataclass
class LLMResponse:
    """
    Response from a provider call.

    ``token_count`` is whatever the provider reported, or 0 when it reported
    nothing. It is never estimated.
    """
    content: str
    model: str = ""
    token_count: int = 0
    latency_ms: float = 0.0
    usage: Dict[str, int] = field(default_factory=dict)
    raw: Optional[Dict[str, Any]] = None


@dataclass
class ImageResponse:
    """A generated image. ``url`` points at the provider-hosted file."""
    url: str
    model: str = ""
    revised_prompt: Optional[str] = None
    latency_ms: float = 0.0


class LLMProvider(ABC):
    """
    Abstract base class for text-generation providers.
    Subclasses implement ``_complete``; ``generate`` adds timing, logging
    and error wrapping.
    """

    provider_name: str = "unknown"

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None,
                 default_temperature: float = 0.7, default_max_tokens: int = 1000,
                 timeout: float = 120.0):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/") if base_url else base_url
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens
        self.timeout = timeout

    async def generate(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """
        Generate a reply to the conversation.

        Args:
            messages: Conversation history, oldest first
            temperature: Sampling temperature override
            max_tokens: Max tokens override
            model: Remote model name override

        Returns:
            LLMResponse with content, token count and latency

        Raises:
            ProviderError: If the remote call fails or returns no content
        """
        model_name = model or self.model
        temperature = temperature if temperature is not None else self.default_temperature
        max_tokens = max_tokens or self.default_max_tokens

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"LLM call starting: provider={self.provider_name}, model={model_name}, "
                f"temperature={temperature}, max_tokens={max_tokens}, {len(messages)} messages"
            )

        start_time = time.time()
        try:
            response = await self._complete(messages, model_name, temperature, max_tokens)
        except ProviderError:
            raise
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"LLM call failed: {str(e)}",
                exc_info=True,
                extra={"extra_fields": {
                    "provider": self.provider_name,
                    "model": model_name,
                    "duration_ms": round(duration_ms, 2),
                    "error": str(e),
                }}
            )
            raise ProviderError(self.provider_name, str(e)) from e

        if not response.content:
            raise ProviderError(self.provider_name, "empty response")

        response.latency_ms = round((time.time() - start_time) * 1000, 2)
        logger.info(
            "LLM call completed",
            extra={"extra_fields": {
                "provider": self.provider_name,
                "model": response.model or model_name,
                "total_tokens": response.token_count,
                "duration_ms": response.latency_ms,
            }}
        )
        return response

    @abstractmethod
    async def _complete(
        self,
        messages: List[LLMMessage],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> LLMResponse:
        """Perform the remote call. Any exception is wrapped by ``generate``."""

    def _format_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert LLMMessage list to OpenAI-style dicts."""
        return [{"role": m.role, "content": m.content} for m in messages]
