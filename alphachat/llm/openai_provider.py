"""
OpenAI-compatible provider.
Serves OpenAI itself and any backend exposing the same /chat/completions
contract (DeepSeek). OpenAI also serves image generation.
"""

import time
import httpx
import logging
from typing import Optional, List, Dict, Any

from .base import LLMProvider, LLMMessage, LLMResponse, ImageResponse
from ..core.errors import ProviderError

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(LLMProvider):
    """Provider for the OpenAI chat/completions API and its clones."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        base_url: str = "https://api.openai.com/v1",
        default_temperature: float = 0.7,
        default_max_tokens: int = 1000,
        timeout: float = 120.0,
        provider_name: str = "openai",
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout)
        self.provider_name = provider_name

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _complete(
        self,
        messages: List[LLMMessage],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> LLMResponse:
        url = f"{self.base_url}/chat/completions"
        payload: Dict[str, Any] = {
            "model": model,
            "messages": self._format_messages(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(url, json=payload, headers=self._get_headers())
            logger.debug(f"{self.provider_name} response status: {resp.status_code}")
            resp.raise_for_status()
            data = resp.json()

        usage = data.get("usage") or {}
        return LLMResponse(
            content=data["choices"][0]["message"]["content"] or "",
            model=data.get("model", model),
            token_count=int(usage.get("total_tokens") or 0),
            usage=usage,
            raw=data,
        )

    async def generate_image(
        self,
        prompt: str,
        model: str = "dall-e-3",
        size: str = "1024x1024",
    ) -> ImageResponse:
        """
        Generate one image through /images/generations.

        Raises:
            ProviderError: If the call fails or returns no image URL
        """
        url = f"{self.base_url}/images/generations"
        payload = {"model": model, "prompt": prompt, "n": 1, "size": size}

        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, json=payload, headers=self._get_headers())
                resp.raise_for_status()
                data = resp.json()
        except Exception as e:
            logger.error(
                f"Image generation failed: {str(e)}",
                exc_info=True,
                extra={"extra_fields": {"provider": self.provider_name, "model": model}}
            )
            raise ProviderError(self.provider_name, str(e)) from e

        images = data.get("data") or []
        if not images or not images[0].get("url"):
            raise ProviderError(self.provider_name, "no image returned")

        latency_ms = round((time.time() - start_time) * 1000, 2)
        logger.info(
            "Image generation completed",
            extra={"extra_fields": {
                "provider": self.provider_name,
                "model": model,
                "duration_ms": latency_ms,
            }}
        )
        return ImageResponse(
            url=images[0]["url"],
            model=model,
            revised_prompt=images[0].get("revised_prompt"),
            latency_ms=latency_ms,
        )


def deepseek_provider(api_key: str, base_url: Optional[str] = None, **kwargs) -> OpenAICompatibleProvider:
    """DeepSeek speaks the OpenAI protocol with its own base URL and model."""
    return OpenAICompatibleProvider(
        api_key=api_key,
        model=kwargs.pop("model", "deepseek-chat"),
        base_url=base_url or "https://api.deepseek.com/v1",
        provider_name="deepseek",
        **kwargs,
    )
