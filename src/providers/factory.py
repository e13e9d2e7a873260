"""Adapter selection by configuration."""

import logging

import httpx

from src.providers.base import BaseProviderAdapter, Sleep
from src.providers.config import ProviderConfig, get_provider_config
from src.providers.gemini import GeminiAdapter
from src.providers.groq import GroqAdapter
from src.providers.ollama import OllamaAdapter

logger = logging.getLogger(__name__)

ADAPTERS: dict[str, type[BaseProviderAdapter]] = {
    "groq": GroqAdapter,
    "gemini": GeminiAdapter,
    "ollama": OllamaAdapter,
}


def build_provider_adapter(
    config: ProviderConfig | None = None,
    client: httpx.AsyncClient | None = None,
    sleep: Sleep | None = None,
) -> BaseProviderAdapter:
    """Create the adapter named by ``config.provider``.

    Args:
        config: Provider configuration. Loads from environment if not provided.
        client: Optional HTTP client shared by the adapter.
        sleep: Optional backoff sleep, mainly for tests.

    Returns:
        The configured adapter.
    """
    config = config or get_provider_config()
    adapter_cls = ADAPTERS[config.provider]
    if sleep is None:
        adapter = adapter_cls(config, client=client)
    else:
        adapter = adapter_cls(config, client=client, sleep=sleep)
    logger.info(f"Using {adapter.name} provider with model {adapter.model}")
    return adapter
