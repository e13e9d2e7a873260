"""Chat endpoint streaming the persona's replies over SSE.

Request pipeline: rate check, JSON decoding, validation, credential check,
context retrieval and prompt assembly. Every failure up to that point is
answered with a JSON error; after that the reply is streamed and failures
arrive as an in-stream ``error`` event.
"""

import logging
import math
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse, StreamingResponse

from src.api.config import ServerConfig
from src.api.sse import relay_stream
from src.knowledge.base import KnowledgeBase, KnowledgeBaseError, get_knowledge_base
from src.limiter.token_bucket import TokenBucketLimiter
from src.models.prompt import Language, PromptConfig
from src.models.schemas import ChatRequest, ErrorResponse
from src.models.validation import INVALID_JSON, ChatRequestError, parse_chat_request
from src.prompt.builder import build_chat_messages
from src.prompt.guardrails import canned_response, classify_request
from src.prompt.language import detect_language_from_history
from src.providers.base import ProviderAdapter
from src.providers.errors import ProviderError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

CONTEXT_ERROR = "CONTEXT_ERROR"
RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
UNHANDLED_ERROR = "UNHANDLED_ERROR"

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def error_response(
    status_code: int,
    message: str,
    code: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the ``{error, code, details?}`` JSON body used by every pre-stream error."""
    body = ErrorResponse(error=message, code=code, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def get_client_key(request: Request) -> str:
    """Identify the client for rate limiting.

    Uses the first ``X-Forwarded-For`` hop, then ``X-Real-IP``, then
    "unknown".
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return "unknown"


def get_profile(request: Request) -> KnowledgeBase:
    """Return the injected knowledge base, or the cached one from disk.

    Raises:
        KnowledgeBaseError: If the dataset cannot be loaded.
    """
    knowledge_base: KnowledgeBase | None = request.app.state.knowledge_base
    if knowledge_base is not None:
        return knowledge_base
    config: ServerConfig = request.app.state.config
    return get_knowledge_base(
        config.knowledge_base_path,
        min_entries=config.knowledge_base_min_entries,
    )


def resolve_language(chat_request: ChatRequest, config: ServerConfig) -> Language:
    if chat_request.language is not None:
        return chat_request.language
    if config.auto_detect_language:
        user_texts = [m.content for m in chat_request.messages if m.role == "user"]
        return detect_language_from_history(user_texts)
    return "en"


async def single_reply(text: str) -> AsyncGenerator[str]:
    yield text


@router.options("")
async def chat_options() -> Response:
    """Answer CORS preflight requests."""
    return Response(
        status_code=status.HTTP_204_NO_CONTENT,
        headers={
            "Access-Control-Allow-Methods": "POST, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
        },
    )


@router.post("")
async def chat(request: Request) -> Response:
    """Stream the persona's reply to the latest user message.

    Accepts a ``ChatRequest`` JSON body and returns a ``text/event-stream``
    of ``content`` events followed by ``done`` or ``error``.

    Returns:
        StreamingResponse on success, JSON error response otherwise.
    """
    try:
        return await _handle_chat(request)
    except Exception:
        logger.exception("Unhandled error before the stream opened")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            UNHANDLED_ERROR,
        )


async def _handle_chat(request: Request) -> Response:
    config: ServerConfig = request.app.state.config
    limiter: TokenBucketLimiter = request.app.state.limiter
    provider: ProviderAdapter = request.app.state.provider

    client_key = get_client_key(request)
    if not limiter.is_allowed(client_key):
        retry_after = limiter.retry_after_seconds(client_key)
        if math.isinf(retry_after):
            retry_after = config.rate_limit_window_seconds
        seconds = max(1, math.ceil(retry_after))
        logger.warning(f"Rate limit exceeded for {client_key}")
        return error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Too many requests. Please try again later.",
            RATE_LIMIT_EXCEEDED,
            details={"retryAfter": seconds},
            headers={"Retry-After": str(seconds)},
        )

    try:
        payload = await request.json()
    except ValueError:
        logger.info("Rejected chat request: invalid JSON")
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid JSON", INVALID_JSON)

    try:
        chat_request = parse_chat_request(payload)
    except ChatRequestError as e:
        logger.info(f"Rejected chat request: {e.code}")
        return error_response(status.HTTP_400_BAD_REQUEST, e.message, e.code, e.details)

    try:
        provider.check_credentials()
    except ProviderError as e:
        logger.error(f"Provider {provider.name} is not configured: {e.code.value}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message, e.code.value)

    language = resolve_language(chat_request, config)
    user_message = chat_request.latest_message.content
    try:
        profile = get_profile(request)
        messages = build_chat_messages(
            user_message,
            chat_request.history,
            PromptConfig(language=language),
            chat_request.user_name,
            entries=profile.entries,
        )
    except KnowledgeBaseError as e:
        logger.error(f"Profile context unavailable: {e}")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to load profile context",
            CONTEXT_ERROR,
        )

    canned = None
    if config.guardrail_short_circuit:
        canned = canned_response(classify_request(user_message), language)

    if canned is not None:
        logger.info("Answering with canned guardrail response")
        chunks = single_reply(canned)
    else:
        chunks = provider.stream_chat_response(messages)

    return StreamingResponse(
        relay_stream(request, chunks),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
