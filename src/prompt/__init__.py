"""Prompt assembly for the persona chat.

Responsibilities:
    - Rendering the persona system prompt with retrieved profile context
    - Keeping a bounded rolling window of prior turns
    - Truncating oversized messages
    - Classifying user messages for guardrail directives
    - Extracting the user's name and detecting the conversation language

Everything in this package is pure and deterministic.
"""

from src.prompt.builder import (
    ELLIPSIS,
    build_chat_messages,
    build_system_prompt,
    format_profile_context,
    truncate_message,
    truncate_text,
)
from src.prompt.guardrails import RequestCategory, canned_response, classify_request
from src.prompt.language import detect_language, detect_language_from_history
from src.prompt.names import extract_user_name

__all__ = [
    "ELLIPSIS",
    "RequestCategory",
    "build_chat_messages",
    "build_system_prompt",
    "canned_response",
    "classify_request",
    "detect_language",
    "detect_language_from_history",
    "extract_user_name",
    "format_profile_context",
    "truncate_message",
    "truncate_text",
]
