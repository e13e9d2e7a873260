"""Pydantic models for API requests, stream events and prompt settings.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ChatMessage: Provider-agnostic conversation message
    - ChatRequest: Incoming chat request payload
    - ContentEvent / DoneEvent / ErrorEvent: SSE stream events
    - ErrorResponse: JSON body of pre-stream errors
    - PromptConfig: Retrieval and prompt assembly settings
"""

from src.models.prompt import DEFAULT_PROMPT_CONFIG, PromptConfig
from src.models.schemas import (
    ChatMessage,
    ChatRequest,
    ClientMessage,
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    ErrorResponse,
    StreamEvent,
)
from src.models.validation import ChatRequestError, parse_chat_request

__all__ = [
    "DEFAULT_PROMPT_CONFIG",
    "ChatMessage",
    "ChatRequest",
    "ChatRequestError",
    "ClientMessage",
    "ContentEvent",
    "DoneEvent",
    "ErrorEvent",
    "ErrorResponse",
    "PromptConfig",
    "StreamEvent",
    "parse_chat_request",
]
