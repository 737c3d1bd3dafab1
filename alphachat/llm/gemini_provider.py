"""
Google Gemini provider using the Generative Language REST API.
"""

import httpx
import logging
from typing import List, Dict, Any

from .base import LLMProvider, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """
    Provider for ``models/{model}:generateContent``.
    System messages are sent as ``systemInstruction`` and assistant turns use
    the ``model`` role.
    """

    provider_name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-pro",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        default_temperature: float = 0.7,
        default_max_tokens: int = 1000,
        timeout: float = 120.0,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _build_payload(self, messages: List[LLMMessage], temperature: float, max_tokens: int) -> Dict[str, Any]:
        system_parts = [{"text": m.content} for m in messages if m.role == "system"]
        contents = [
            {
                "role": "model" if m.role == "assistant" else "user",
                "parts": [{"text": m.content}],
            }
            for m in messages if m.role != "system"
        ]
        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        if system_parts:
            payload["systemInstruction"] = {"parts": system_parts}
        return payload

    async def _complete(
        self,
        messages: List[LLMMessage],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> LLMResponse:
        url = f"{self.base_url}/models/{model}:generateContent"
        payload = self._build_payload(messages, temperature, max_tokens)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(url, json=payload, headers=self._get_headers())
            logger.debug(f"gemini response status: {resp.status_code}")
            resp.raise_for_status()
            data = resp.json()

        text = ""
        candidates = data.get("candidates") or []
        if candidates:
            for part in candidates[0].get("content", {}).get("parts", []):
                text += part.get("text", "")

        # usageMetadata is missing on some tiers
        usage_meta = data.get("usageMetadata") or {}
        return LLMResponse(
            content=text,
            model=data.get("modelVersion", model),
            token_count=int(usage_meta.get("totalTokenCount") or 0),
            usage={
                "prompt_tokens": int(usage_meta.get("promptTokenCount") or 0),
                "completion_tokens": int(usage_meta.get("candidatesTokenCount") or 0),
                "total_tokens": int(usage_meta.get("totalTokenCount") or 0),
            } if usage_meta else {},
            raw=data,
        )
