"""Server-Sent Events framing and the provider-to-client relay."""

import logging
from collections.abc import AsyncGenerator

from fastapi import Request

from src.models.schemas import ContentEvent, DoneEvent, ErrorEvent
from src.providers.errors import USER_MESSAGES, ErrorCode, ProviderError

logger = logging.getLogger(__name__)


def format_sse(event: ContentEvent | DoneEvent | ErrorEvent) -> str:
    """Frame one event as an SSE ``data:`` record."""
    return f"data: {event.model_dump_json()}\n\n"


async def relay_stream(
    request: Request,
    chunks: AsyncGenerator[str],
) -> AsyncGenerator[str]:
    """Relay provider chunks to the client as SSE events.

    Emits one ``content`` event per chunk and ends with exactly one ``done``
    or ``error`` event. If the client disconnects, stops without emitting
    anything further. The provider generator is always closed.

    Args:
        request: Incoming request, polled for disconnection.
        chunks: Text chunks from the provider.

    Yields:
        SSE-formatted event strings.
    """
    try:
        async for chunk in chunks:
            if await request.is_disconnected():
                logger.info("Client disconnected, stopping stream")
                return
            yield format_sse(ContentEvent(data=chunk))
        yield format_sse(DoneEvent())
    except ProviderError as e:
        yield format_sse(ErrorEvent(error=e.message, code=e.code.value))
    except Exception:
        logger.exception("Unexpected error while streaming")
        yield format_sse(
            ErrorEvent(
                error=USER_MESSAGES[ErrorCode.UNKNOWN_ERROR],
                code=ErrorCode.UNKNOWN_ERROR.value,
            )
        )
    finally:
        await chunks.aclose()
