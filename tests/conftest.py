"""
Shared test fixtures and configuration.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("LOCAL_STORAGE_PATH", os.path.join(tempfile.gettempdir(), "alphachat_test_data"))
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")
os.environ.setdefault("CLEANUP_ENABLED", "false")

from alphachat.llm.base import ImageResponse, LLMProvider, LLMResponse
from alphachat.llm.catalog import MODEL_CATALOG
from alphachat.llm.registry import ProviderRegistry
from alphachat.services import TemporaryChatService, UsageAccountant
from alphachat.storage import LocalStorage, LocalSessionStore, UsageLedger, UserStorage


class MutableClock:
    """Controllable time source."""

    def __init__(self, now: datetime = None):
        self.now = now or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeProvider(LLMProvider):
    """Provider returning a canned reply and recording every call."""

    provider_name = "fake"

    def __init__(self, reply: str = "Hi! How can I help you today?", token_count: int = 12, error: Exception = None):
        super().__init__(api_key="fake-key", model="fake-model")
        self.reply = reply
        self.token_count = token_count
        self.error = error
        self.calls = []

    async def _complete(self, messages, model, temperature, max_tokens):
        self.calls.append({
            "messages": list(messages),
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply, model=model, token_count=self.token_count)


class FakeImageProvider:
    """Image backend returning a fixed URL."""

    def __init__(self, url: str = "https://images.example.com/cat.png", error: Exception = None):
        self.url = url
        self.error = error
        self.calls = []

    async def generate_image(self, prompt, model="dall-e-3", size="1024x1024"):
        self.calls.append({"prompt": prompt, "model": model, "size": size})
        if self.error is not None:
            raise self.error
        return ImageResponse(url=self.url, model=model, revised_prompt=prompt, latency_ms=5.0)


def make_registry(provider: LLMProvider, model_ids=None) -> ProviderRegistry:
    registry = ProviderRegistry()
    for model_id in model_ids or [m.id for m in MODEL_CATALOG]:
        registry.register(model_id, provider)
    return registry


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "data"))


@pytest.fixture
def session_store(storage, clock):
    return LocalSessionStore(storage, ttl_hours=24, clock=clock)


@pytest.fixture
def user_storage(storage):
    return UserStorage(storage)


@pytest.fixture
def ledger(storage, clock):
    return UsageLedger(storage, clock=clock)


@pytest.fixture
def usage(user_storage, ledger, clock):
    return UsageAccountant(user_storage, ledger, clock=clock)


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def registry(fake_provider):
    return make_registry(fake_provider)


@pytest.fixture
def service(session_store, registry, usage):
    return TemporaryChatService(session_store, registry, usage=usage)


@pytest.fixture
def image_provider():
    return FakeImageProvider()
