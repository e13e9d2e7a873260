"""LLM provider adapters.

Responsibilities:
    - One streaming interface over Groq, Gemini and Ollama
    - Input validation and sanitization before any upstream call
    - Retry with exponential backoff for transient failures
    - Classification of every failure into a fixed error code
"""

from src.providers.base import (
    BaseProviderAdapter,
    ProviderAdapter,
    sanitize_content,
    validate_messages,
)
from src.providers.config import ProviderConfig, get_provider_config
from src.providers.errors import (
    USER_MESSAGES,
    ErrorCode,
    ProviderError,
    classify_error,
)
from src.providers.factory import build_provider_adapter
from src.providers.gemini import GeminiAdapter
from src.providers.groq import GroqAdapter
from src.providers.ollama import OllamaAdapter

__all__ = [
    "USER_MESSAGES",
    "BaseProviderAdapter",
    "ErrorCode",
    "GeminiAdapter",
    "GroqAdapter",
    "OllamaAdapter",
    "ProviderAdapter",
    "ProviderConfig",
    "ProviderError",
    "build_provider_adapter",
    "classify_error",
    "get_provider_config",
    "sanitize_content",
    "validate_messages",
]
