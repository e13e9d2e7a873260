"""Google Gemini adapter over the streamGenerateContent REST API."""

import json
import logging
from collections.abc import AsyncGenerator, Sequence

from src.models.schemas import ChatMessage
from src.providers.base import BaseProviderAdapter
from src.providers.errors import ErrorCode, ProviderError, UpstreamStreamError
from src.providers.groq import parse_sse_data

logger = logging.getLogger(__name__)


class GeminiAdapter(BaseProviderAdapter):
    """Streams completions from Gemini.

    System messages become ``systemInstruction`` and assistant turns are
    sent with Gemini's ``model`` role.
    """

    name = "gemini"

    @property
    def model(self) -> str:
        return self._config.gemini_model

    def check_credentials(self) -> None:
        if not self._config.gemini_api_key:
            raise ProviderError.from_code(ErrorCode.MISSING_API_KEY)

    def build_payload(self, messages: Sequence[ChatMessage]) -> dict:
        system_text = "\n\n".join(m.content for m in messages if m.role == "system")
        contents = [
            {
                "role": "model" if m.role == "assistant" else "user",
                "parts": [{"text": m.content}],
            }
            for m in messages
            if m.role != "system"
        ]

        payload: dict = {
            "contents": contents,
            "generationConfig": {
                "temperature": self._config.temperature,
                "maxOutputTokens": self._config.max_tokens,
            },
        }
        if system_text:
            payload["systemInstruction"] = {"parts": [{"text": system_text}]}
        return payload

    async def _open_stream(self, messages: Sequence[ChatMessage]) -> AsyncGenerator[str]:
        url = (
            f"{self._config.gemini_base_url.rstrip('/')}/models/"
            f"{self.model}:streamGenerateContent"
        )
        headers = {"x-goog-api-key": self._config.gemini_api_key or ""}

        async with self._client.stream(
            "POST",
            url,
            params={"alt": "sse"},
            json=self.build_payload(messages),
            headers=headers,
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                data = parse_sse_data(line)
                if not data:
                    continue
                try:
                    payload = json.loads(data)
                except json.JSONDecodeError:
                    logger.debug("Skipping malformed Gemini stream line")
                    continue
                if "error" in payload:
                    raise UpstreamStreamError("Gemini reported an error mid-stream")

                candidates = payload.get("candidates") or []
                if not candidates:
                    continue
                parts = (candidates[0].get("content") or {}).get("parts") or []
                text = "".join(part.get("text", "") for part in parts)
                if text:
                    yield text
