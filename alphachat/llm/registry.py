"""
Provider Registry - resolves a catalog model id to the provider serving it.
"""

from typing import Any, Dict, List, Optional, Tuple, Iterable

from .base import LLMProvider, LLMMessage, LLMResponse, ImageResponse
from .catalog import MODEL_CATALOG, ModelInfo
from ..core.errors import UnsupportedModelError, ProviderUnavailableError


class ProviderRegistry:
    """
    Maps model ids to provider instances.

    A model must be in the catalog to be resolvable at all; a catalog model
    with no registered provider is reported as unavailable.
    """

    def __init__(self, catalog: Iterable[ModelInfo] = MODEL_CATALOG):
        self._catalog: Dict[str, ModelInfo] = {m.id: m for m in catalog}
        self._routes: Dict[str, Tuple[LLMProvider, str]] = {}
        self._image_route: Optional[Tuple[Any, str]] = None

    def register(self, model_id: str, provider: LLMProvider, remote_model: Optional[str] = None) -> None:
        """
        Route ``model_id`` to ``provider``.

        Args:
            model_id: Catalog model id
            provider: Provider instance handling the model
            remote_model: Model name sent to the provider (defaults to model_id)
        """
        if model_id not in self._catalog:
            raise UnsupportedModelError(model_id)
        self._routes[model_id] = (provider, remote_model or model_id)

    def resolve(self, model_id: str) -> Tuple[LLMProvider, str]:
        """Return ``(provider, remote_model)`` for a model id."""
        info = self._catalog.get(model_id)
        if info is None:
            raise UnsupportedModelError(model_id)
        route = self._routes.get(model_id)
        if route is None:
            raise ProviderUnavailableError(model_id, info.provider)
        return route

    def is_available(self, model_id: str) -> bool:
        return model_id in self._routes

    def list_models(self) -> List[ModelInfo]:
        return list(self._catalog.values())

    async def generate(
        self,
        model_id: str,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Dispatch a generation request to the provider of ``model_id``."""
        provider, remote_model = self.resolve(model_id)
        return await provider.generate(
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            model=remote_model,
        )

    def register_image(self, provider: Any, model: str = "dall-e-3") -> None:
        """Route image generation to ``provider`` (anything with ``generate_image``)."""
        self._image_route = (provider, model)

    def image_available(self) -> bool:
        return self._image_route is not None

    async def generate_image(self, prompt: str, size: str = "1024x1024") -> ImageResponse:
        """
        Raises:
            ProviderUnavailableError: If no image provider is configured
        """
        if self._image_route is None:
            raise ProviderUnavailableError("image-generation", "OpenAI")
        provider, model = self._image_route
        return await provider.generate_image(prompt, model=model, size=size)
