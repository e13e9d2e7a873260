"""Groq adapter over the OpenAI-compatible chat completions API."""

import json
import logging
from collections.abc import AsyncGenerator, Sequence

from src.models.schemas import ChatMessage
from src.providers.base import BaseProviderAdapter
from src.providers.errors import ErrorCode, ProviderError, UpstreamStreamError

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


def parse_sse_data(line: str) -> str | None:
    """Return the payload of an SSE ``data:`` line, or None for any other line."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    return line[len("data:") :].strip()


class GroqAdapter(BaseProviderAdapter):
    """Streams completions from Groq using server-sent events."""

    name = "groq"

    @property
    def model(self) -> str:
        return self._config.groq_model

    def check_credentials(self) -> None:
        if not self._config.groq_api_key:
            raise ProviderError.from_code(ErrorCode.MISSING_API_KEY)

    def build_payload(self, messages: Sequence[ChatMessage]) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
            "stream": True,
        }

    async def _open_stream(self, messages: Sequence[ChatMessage]) -> AsyncGenerator[str]:
        url = f"{self._config.groq_base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self._config.groq_api_key}",
            "Accept": "text/event-stream",
        }

        async with self._client.stream(
            "POST", url, json=self.build_payload(messages), headers=headers
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                data = parse_sse_data(line)
                if not data:
                    continue
                if data == DONE_SENTINEL:
                    return
                try:
                    payload = json.loads(data)
                except json.JSONDecodeError:
                    logger.debug("Skipping malformed Groq stream line")
                    continue
                if "error" in payload:
                    raise UpstreamStreamError("Groq reported an error mid-stream")
                for choice in payload.get("choices") or []:
                    content = (choice.get("delta") or {}).get("content")
                    if content:
                        yield content
