"""
Unit tests for the LLM module.
Tests providers, the model registry and the factory.
"""

import pytest
import httpx
from unittest.mock import AsyncMock, patch, MagicMock

from alphachat.core.errors import ProviderError, UnsupportedModelError, ProviderUnavailableError
from alphachat.config import Settings
from alphachat.llm.base import LLMMessage, LLMResponse
from alphachat.llm.openai_provider import OpenAICompatibleProvider
from alphachat.llm.gemini_provider import GeminiProvider
from alphachat.llm.registry import ProviderRegistry
from alphachat.llm.factory import create_llm_provider, build_provider_registry

from conftest import FakeProvider


def _mock_client(mock_client, json_body=None, error=None):
    mock_response = MagicMock()
    mock_response.json.return_value = json_body
    mock_response.status_code = 200
    mock_response.raise_for_status = MagicMock(side_effect=error)

    mock_instance = AsyncMock()
    mock_instance.post.return_value = mock_response
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    mock_client.return_value = mock_instance
    return mock_instance


class TestLLMResponse:

    def test_defaults(self):
        resp = LLMResponse(content="Hello!")
        assert resp.token_count == 0
        assert resp.latency_ms == 0.0
        assert resp.usage == {}
        assert resp.raw is None


class TestOpenAICompatibleProvider:

    def test_init_defaults(self):
        provider = OpenAICompatibleProvider(api_key="test-key")
        assert provider.model == "gpt-3.5-turbo"
        assert provider.base_url == "https://api.openai.com/v1"
        assert provider.provider_name == "openai"

    def test_format_messages(self):
        provider = OpenAICompatibleProvider(api_key="test")
        formatted = provider._format_messages([
            LLMMessage.text("system", "sys prompt"),
            LLMMessage.text("user", "hello"),
        ])
        assert formatted == [
            {"role": "system", "content": "sys prompt"},
            {"role": "user", "content": "hello"},
        ]

    def test_headers(self):
        provider = OpenAICompatibleProvider(api_key="sk-test123")
        headers = provider._get_headers()
        assert headers["Authorization"] == "Bearer sk-test123"

    @pytest.mark.asyncio
    async def test_generate_success(self):
        provider = OpenAICompatibleProvider(api_key="test-key")
        with patch("httpx.AsyncClient") as mock_client:
            instance = _mock_client(mock_client, {
                "choices": [{"message": {"content": "Test response"}}],
                "model": "gpt-4",
                "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
            })
            result = await provider.generate(
                [LLMMessage.text("user", "Hello")], temperature=0.2, max_tokens=50, model="gpt-4"
            )

        assert result.content == "Test response"
        assert result.token_count == 15
        assert result.latency_ms >= 0
        url = instance.post.call_args.args[0]
        payload = instance.post.call_args.kwargs["json"]
        assert url == "https://api.openai.com/v1/chat/completions"
        assert payload["model"] == "gpt-4"
        assert payload["temperature"] == 0.2
        assert payload["max_tokens"] == 50

    @pytest.mark.asyncio
    async def test_missing_usage_reports_zero_tokens(self):
        provider = OpenAICompatibleProvider(api_key="test-key")
        with patch("httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, {"choices": [{"message": {"content": "ok"}}]})
            result = await provider.generate([LLMMessage.text("user", "Hello")])

        assert result.token_count == 0

    @pytest.mark.asyncio
    async def test_http_error_becomes_provider_error(self):
        provider = OpenAICompatibleProvider(api_key="test-key")
        error = httpx.HTTPStatusError("boom", request=MagicMock(), response=MagicMock())
        with patch("httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, {}, error=error)
            with pytest.raises(ProviderError) as exc_info:
                await provider.generate([LLMMessage.text("user", "Hello")])

        assert exc_info.value.provider == "openai"
        assert exc_info.value.__cause__ is error
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_empty_content_is_an_error(self):
        provider = OpenAICompatibleProvider(api_key="test-key")
        with patch("httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, {"choices": [{"message": {"content": None}}]})
            with pytest.raises(ProviderError):
                await provider.generate([LLMMessage.text("user", "Hello")])

    @pytest.mark.asyncio
    async def test_generate_image(self):
        provider = OpenAICompatibleProvider(api_key="test-key")
        with patch("httpx.AsyncClient") as mock_client:
            instance = _mock_client(mock_client, {
                "data": [{"url": "https://cdn.example.com/img.png", "revised_prompt": "a fluffy cat"}],
            })
            result = await provider.generate_image("a cat", model="dall-e-3", size="512x512")

        assert result.url == "https://cdn.example.com/img.png"
        assert result.revised_prompt == "a fluffy cat"
        assert result.model == "dall-e-3"
        url = instance.post.call_args.args[0]
        payload = instance.post.call_args.kwargs["json"]
        assert url == "https://api.openai.com/v1/images/generations"
        assert payload == {"model": "dall-e-3", "prompt": "a cat", "n": 1, "size": "512x512"}

    @pytest.mark.asyncio
    async def test_generate_image_without_url_is_an_error(self):
        provider = OpenAICompatibleProvider(api_key="test-key")
        with patch("httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, {"data": []})
            with pytest.raises(ProviderError):
                await provider.generate_image("a cat")

    @pytest.mark.asyncio
    async def test_generate_image_http_error(self):
        provider = OpenAICompatibleProvider(api_key="test-key")
        error = httpx.HTTPStatusError("rejected", request=MagicMock(), response=MagicMock())
        with patch("httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, {}, error=error)
            with pytest.raises(ProviderError) as exc_info:
                await provider.generate_image("a cat")
        assert exc_info.value.__cause__ is error

    def test_deepseek_via_factory(self):
        provider = create_llm_provider("deepseek", api_key="ds-key")
        assert isinstance(provider, OpenAICompatibleProvider)
        assert provider.provider_name == "deepseek"
        assert provider.model == "deepseek-chat"
        assert provider.base_url == "https://api.deepseek.com/v1"


class TestGeminiProvider:

    def test_payload_conversion(self):
        provider = GeminiProvider(api_key="g-key")
        payload = provider._build_payload([
            LLMMessage.text("system", "Be brief."),
            LLMMessage.text("user", "Hi"),
            LLMMessage.text("assistant", "Hello"),
            LLMMessage.text("user", "How are you?"),
        ], temperature=0.5, max_tokens=64)

        assert payload["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
        assert [c["role"] for c in payload["contents"]] == ["user", "model", "user"]
        assert payload["generationConfig"] == {"temperature": 0.5, "maxOutputTokens": 64}

    @pytest.mark.asyncio
    async def test_generate_success(self):
        provider = GeminiProvider(api_key="g-key")
        with patch("httpx.AsyncClient") as mock_client:
            instance = _mock_client(mock_client, {
                "candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "there"}]}}],
                "usageMetadata": {"promptTokenCount": 3, "candidatesTokenCount": 2, "totalTokenCount": 5},
            })
            result = await provider.generate([LLMMessage.text("user", "Hi")], model="gemini-pro")

        assert result.content == "Hello there"
        assert result.token_count == 5
        assert instance.post.call_args.args[0].endswith("/models/gemini-pro:generateContent")
        assert instance.post.call_args.kwargs["headers"]["x-goog-api-key"] == "g-key"

    @pytest.mark.asyncio
    async def test_missing_usage_metadata_reports_zero(self):
        provider = GeminiProvider(api_key="g-key")
        with patch("httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, {
                "candidates": [{"content": {"parts": [{"text": "Hello"}]}}],
            })
            result = await provider.generate([LLMMessage.text("user", "Hi")])

        assert result.token_count == 0
        assert result.usage == {}


class TestProviderRegistry:

    def test_unknown_model_is_unsupported(self):
        registry = ProviderRegistry()
        with pytest.raises(UnsupportedModelError):
            registry.resolve("llama-9000")

    def test_catalog_model_without_provider_is_unavailable(self):
        registry = ProviderRegistry()
        with pytest.raises(ProviderUnavailableError) as exc_info:
            registry.resolve("gemini-pro")
        assert exc_info.value.status_code == 501

    def test_register_rejects_models_outside_catalog(self):
        with pytest.raises(UnsupportedModelError):
            ProviderRegistry().register("not-a-model", FakeProvider())

    @pytest.mark.asyncio
    async def test_generate_dispatches_with_remote_model(self):
        provider = FakeProvider(reply="pong")
        registry = ProviderRegistry()
        registry.register("gemini-pro", provider, remote_model="gemini-1.5-flash")

        result = await registry.generate("gemini-pro", [LLMMessage.text("user", "ping")], temperature=0.1, max_tokens=5)

        assert result.content == "pong"
        assert provider.calls[0]["model"] == "gemini-1.5-flash"
        assert provider.calls[0]["temperature"] == 0.1
        assert provider.calls[0]["max_tokens"] == 5


    @pytest.mark.asyncio
    async def test_image_without_provider_is_unavailable(self):
        registry = ProviderRegistry()
        assert not registry.image_available()
        with pytest.raises(ProviderUnavailableError):
            await registry.generate_image("a cat")


class TestLLMFactory:

    def test_no_api_key_returns_none(self):
        assert create_llm_provider(provider="openai", api_key="") is None
        assert create_llm_provider(provider="gemini", api_key=None) is None

    def test_unsupported_provider_raises(self):
        with pytest.raises(ValueError, match="Unsupported"):
            create_llm_provider(provider="unsupported", api_key="key")

    def test_build_registry_only_registers_configured_providers(self):
        config = Settings(openai_api_key="sk-test", gemini_api_key=None, deepseek_api_key=None)
        registry = build_provider_registry(config)

        assert registry.is_available("gpt-3.5-turbo")
        assert registry.is_available("gpt-4")
        assert registry.is_available("gpt-4-turbo")
        assert not registry.is_available("gemini-pro")
        assert not registry.is_available("deepseek-chat")
        assert registry.image_available()

    def test_build_registry_gemini_remote_model(self):
        config = Settings(gemini_api_key="g-key", gemini_model="gemini-1.5-pro")
        registry = build_provider_registry(config)

        provider, remote = registry.resolve("gemini-pro")
        assert isinstance(provider, GeminiProvider)
        assert remote == "gemini-1.5-pro"

    def test_build_registry_without_openai_has_no_images(self):
        config = Settings(openai_api_key=None, deepseek_api_key="ds-key")
        registry = build_provider_registry(config)
        assert not registry.image_available()
