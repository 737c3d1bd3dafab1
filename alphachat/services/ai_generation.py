"""
AI Generation Service - stateless chat, code and image outputs for signed-in users.

Each call checks the quota of its category first and records the output in the
usage ledger once the provider has answered. Failed generations are not counted.
"""

import logging
from typing import Optional

from ..core.errors import FeatureNotImplementedError
from ..llm.base import LLMMessage
from ..llm.registry import ProviderRegistry
from ..models.ai import AIReply, ImageResult
from ..models.session import DEFAULT_SYSTEM_PROMPT
from .temporary_chat import clean_message
from .usage import UsageAccountant

logger = logging.getLogger(__name__)


def code_system_prompt(language: str) -> str:
    return (
        f"You are an expert {language} programmer. Answer with working, idiomatic "
        f"{language} code in a fenced code block, followed by a short explanation."
    )


class AIGenerationService:
    """Quota-checked one-shot generation, one usage category per method."""

    def __init__(
        self,
        providers: ProviderRegistry,
        usage: UsageAccountant,
        max_message_length: int = 4000,
    ):
        self.providers = providers
        self.usage = usage
        self.max_message_length = max_message_length

    async def _text(
        self,
        user_id: str,
        category: str,
        model: str,
        system_prompt: str,
        message: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AIReply:
        text = clean_message(message, self.max_message_length)
        await self.usage.check_quota(user_id, category)

        response = await self.providers.generate(
            model,
            [LLMMessage.text("system", system_prompt), LLMMessage.text("user", text)],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        await self.usage.record_output(user_id, category, model=model, tokens=response.token_count)

        logger.info(
            f"Generated {category} output for user {user_id}",
            extra={"extra_fields": {
                "user_id": user_id,
                "category": category,
                "model": model,
                "tokens": response.token_count,
            }}
        )
        return AIReply(
            response=response.content,
            category=category,
            model=model,
            tokens=response.token_count,
            processing_time=response.latency_ms,
        )

    async def chat(
        self,
        user_id: str,
        message: str,
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> AIReply:
        """
        Raises:
            ValidationError: If the message is empty or too long
            QuotaExceededError: If the user's chat allowance is used up
            ProviderError: If generation fails
        """
        return await self._text(
            user_id, "chat", model, system_prompt, message,
            temperature=temperature, max_tokens=max_tokens,
        )

    async def code(self, user_id: str, message: str, language: str, model: str) -> AIReply:
        """Code answers share the daily chat allowance."""
        return await self._text(
            user_id, "code", model, code_system_prompt(language), message,
            temperature=0.2,
        )

    async def image(self, user_id: str, prompt: str, size: str = "1024x1024") -> ImageResult:
        """
        Raises:
            QuotaExceededError: If the user's image allowance is used up
            ProviderUnavailableError: If no image provider is configured
            ProviderError: If generation fails
        """
        await self.usage.check_quota(user_id, "image")

        result = await self.providers.generate_image(prompt, size=size)
        await self.usage.record_output(user_id, "image", model=result.model)

        logger.info(
            f"Generated image for user {user_id}",
            extra={"extra_fields": {"user_id": user_id, "model": result.model}}
        )
        return ImageResult(
            image_url=result.url,
            prompt=prompt,
            revised_prompt=result.revised_prompt,
            model=result.model,
            processing_time=result.latency_ms,
        )

    async def video(self, user_id: str, prompt: str) -> None:
        """
        Raises:
            QuotaExceededError: If the user's video allowance is used up
            FeatureNotImplementedError: Always, once the quota allows the call
        """
        await self.usage.check_quota(user_id, "video")
        raise FeatureNotImplementedError("Video generation is not yet implemented")
