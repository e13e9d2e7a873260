"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - knowledge_base: The bundled profile dataset
    - fake_provider: Scriptable stand-in for an LLM adapter
    - server_config: Server configuration independent of the environment
    - limiter: Token bucket limiter without a sweep thread
    - test_app / async_client: App wired to the fakes, and an HTTPX client for it
"""

from collections.abc import AsyncGenerator, Sequence
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.api.config import ServerConfig
from src.knowledge.base import DEFAULT_KNOWLEDGE_BASE_PATH, KnowledgeBase, load_knowledge_base
from src.limiter.token_bucket import TokenBucketLimiter
from src.models.schemas import ChatMessage
from src.providers.errors import ErrorCode, ProviderError


class FakeProvider:
    """In-memory provider adapter.

    Yields ``chunks`` then raises ``error`` if one is set. Records every
    message list it was asked to answer.
    """

    name = "fake"

    def __init__(
        self,
        chunks: Sequence[str] = ("Hello", " there", "!"),
        error: Exception | None = None,
        missing_key: bool = False,
    ) -> None:
        self.chunks = list(chunks)
        self.error = error
        self.missing_key = missing_key
        self.calls: list[list[ChatMessage]] = []
        self.closed = False

    def check_credentials(self) -> None:
        if self.missing_key:
            raise ProviderError.from_code(ErrorCode.MISSING_API_KEY)

    async def stream_chat_response(
        self,
        messages: Sequence[ChatMessage],
    ) -> AsyncGenerator[str]:
        self.calls.append(list(messages))
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def profile_path() -> Path:
    """Return path to the bundled profile dataset."""
    return DEFAULT_KNOWLEDGE_BASE_PATH


@pytest.fixture
def knowledge_base(profile_path: Path) -> KnowledgeBase:
    """Load the bundled profile dataset (uncached)."""
    return load_knowledge_base(profile_path)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def server_config() -> ServerConfig:
    """Server configuration with explicit values, unaffected by the environment."""
    return ServerConfig(
        rate_limit_max_tokens=30,
        rate_limit_refill_rate=0.5,
        rate_limit_window_seconds=60,
        cors_allow_origins=["*"],
        auto_detect_language=False,
        guardrail_short_circuit=False,
    )


@pytest.fixture
def limiter(server_config: ServerConfig, fake_clock: FakeClock) -> TokenBucketLimiter:
    """Limiter on a fake clock with no background thread."""
    return TokenBucketLimiter(
        max_tokens=server_config.rate_limit_max_tokens,
        refill_rate=server_config.rate_limit_refill_rate,
        window_seconds=server_config.rate_limit_window_seconds,
        clock=fake_clock,
        start_cleanup=False,
    )


@pytest.fixture
def test_app(
    server_config: ServerConfig,
    limiter: TokenBucketLimiter,
    fake_provider: FakeProvider,
    knowledge_base: KnowledgeBase,
):
    """FastAPI app wired to the fake provider and the bundled profile."""
    return create_app(
        server_config,
        limiter=limiter,
        provider=fake_provider,
        knowledge_base=knowledge_base,
    )


@pytest.fixture
async def async_client(test_app) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
