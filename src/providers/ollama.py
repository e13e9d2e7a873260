"""Ollama adapter for a locally hosted model."""

import json
import logging
from collections.abc import AsyncGenerator, Sequence

from src.models.schemas import ChatMessage
from src.providers.base import BaseProviderAdapter
from src.providers.errors import UpstreamStreamError

logger = logging.getLogger(__name__)


class OllamaAdapter(BaseProviderAdapter):
    """Streams newline-delimited JSON from Ollama's ``/api/chat``.

    Needs no credential.
    """

    name = "ollama"

    @property
    def model(self) -> str:
        return self._config.ollama_model

    def build_payload(self, messages: Sequence[ChatMessage]) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "stream": True,
            "options": {
                "temperature": self._config.temperature,
                "num_predict": self._config.max_tokens,
            },
        }

    async def _open_stream(self, messages: Sequence[ChatMessage]) -> AsyncGenerator[str]:
        url = f"{self._config.ollama_base_url.rstrip('/')}/api/chat"

        async with self._client.stream(
            "POST", url, json=self.build_payload(messages)
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                line = line.strip()
                if not line:
                    continue
                try:
                    payload = json.loads(line)
                except json.JSONDecodeError:
                    logger.debug("Skipping malformed Ollama stream line")
                    continue
                if payload.get("error"):
                    raise UpstreamStreamError("Ollama reported an error mid-stream")

                content = (payload.get("message") or {}).get("content") or payload.get("response")
                if content:
                    yield content
                if payload.get("done"):
                    return
