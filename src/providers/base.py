"""Shared streaming, validation and retry logic for provider adapters.

Concrete adapters only describe how to open one upstream stream and how to
pull text out of it; this module wraps that in input checks, sanitization,
bounded exponential backoff and error classification.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Awaitable, Callable, Sequence
from contextlib import aclosing
from typing import Protocol, runtime_checkable

import httpx

from src.models.schemas import ChatMessage, strip_control_chars
from src.providers.config import ProviderConfig
from src.providers.errors import ErrorCode, ProviderError, classify_error

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@runtime_checkable
class ProviderAdapter(Protocol):
    """Streaming interface every LLM backend implements."""

    name: str

    def check_credentials(self) -> None: ...

    def stream_chat_response(self, messages: Sequence[ChatMessage]) -> AsyncGenerator[str]: ...

    async def aclose(self) -> None: ...


def validate_messages(messages: Sequence[ChatMessage], max_length: int) -> None:
    """Check a message list before anything is sent upstream.

    Raises:
        ProviderError: INVALID_INPUT if the list is empty, the last message
            is not from the user, or any content is too long or empty once
            sanitized.
    """
    if not messages:
        raise ProviderError.from_code(ErrorCode.INVALID_INPUT)
    if messages[-1].role != "user":
        raise ProviderError.from_code(ErrorCode.INVALID_INPUT)
    for message in messages:
        if len(message.content) > max_length or not sanitize_content(message.content):
            raise ProviderError.from_code(ErrorCode.INVALID_INPUT)


def sanitize_content(content: str) -> str:
    """Remove control characters and surrounding whitespace."""
    return strip_control_chars(content).strip()


class BaseProviderAdapter(ABC):
    """Base class for httpx-backed adapters.

    Args:
        config: Provider configuration.
        client: HTTP client to use; one with the configured timeout is
            created when omitted.
        sleep: Awaitable used for backoff delays.
    """

    name: str = "provider"

    def __init__(
        self,
        config: ProviderConfig,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(config.timeout))
        self._sleep = sleep

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identifier sent upstream."""

    def check_credentials(self) -> None:
        """Raise MISSING_API_KEY if the adapter needs a key and has none."""

    @abstractmethod
    def _open_stream(self, messages: Sequence[ChatMessage]) -> AsyncGenerator[str]:
        """Open one upstream stream and yield text chunks from it."""

    async def stream_chat_response(
        self,
        messages: Sequence[ChatMessage],
    ) -> AsyncGenerator[str]:
        """Stream the assistant's reply to ``messages``.

        Transient failures are retried with exponential backoff as long as
        nothing has been yielded yet.

        Args:
            messages: Conversation ending with the user's message.

        Yields:
            Non-empty text chunks in arrival order.

        Raises:
            ProviderError: Classified failure.
        """
        self.check_credentials()
        validate_messages(messages, self._config.max_message_length)
        cleaned = [
            ChatMessage(role=message.role, content=sanitize_content(message.content))
            for message in messages
        ]

        attempt = 0
        while True:
            yielded = False
            try:
                async with aclosing(self._open_stream(cleaned)) as stream:
                    async for chunk in stream:
                        if chunk:
                            yielded = True
                            yield chunk
                return
            except Exception as e:
                error = classify_error(e)
                if error.retryable and not yielded and attempt < self._config.max_retries:
                    delay = self._config.initial_retry_delay * 2**attempt
                    attempt += 1
                    logger.warning(
                        f"{self.name} request failed with {error.code.value}, "
                        f"retry {attempt}/{self._config.max_retries} in {delay:.2f}s"
                    )
                    await self._sleep(delay)
                    continue

                logger.error(
                    f"{self.name} request failed: {error.code.value} "
                    f"(status={error.status_code}, attempts={attempt + 1})"
                )
                if error is e:
                    raise
                raise error from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
