"""Provider configuration with environment variable loading.

Pydantic-based configuration for the upstream LLM adapters.
Supports Groq, Gemini and a local Ollama server.
"""

import os
from collections.abc import Callable
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

ProviderName = Literal["groq", "gemini", "ollama"]


def _env(name: str, default: str | None = None) -> Callable[[], str | None]:
    return lambda: os.getenv(name, default)


class ProviderConfig(BaseModel):
    """Configuration for the upstream LLM provider.

    API keys are optional here so that a missing key is reported per
    request as MISSING_API_KEY instead of preventing startup.

    Attributes:
        provider: Which backend to use.
        groq_api_key / groq_model / groq_base_url: Groq settings.
        gemini_api_key / gemini_model / gemini_base_url: Gemini settings.
        ollama_base_url / ollama_model: Ollama settings.
        timeout: Per-request timeout in seconds.
        max_retries: Retries after the first attempt for transient failures.
        initial_retry_delay: Backoff base in seconds (doubles per retry).
        temperature: Sampling temperature.
        max_tokens: Maximum tokens in the generated response.
        max_message_length: Longest message content accepted for sending.
    """

    provider: ProviderName = Field(
        default_factory=_env("LLM_PROVIDER", "groq"),
        validate_default=True,
        description="LLM backend: groq, gemini or ollama",
    )
    groq_api_key: str | None = Field(default_factory=_env("GROQ_API_KEY"), validate_default=True)
    groq_model: str = Field(default_factory=_env("GROQ_MODEL", "llama-3.1-8b-instant"))
    groq_base_url: str = Field(
        default_factory=_env("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
    )
    gemini_api_key: str | None = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_GEMINI_API_KEY"),
        validate_default=True,
    )
    gemini_model: str = Field(default_factory=_env("GEMINI_MODEL", "gemini-1.5-flash"))
    gemini_base_url: str = Field(
        default_factory=_env(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        )
    )
    ollama_base_url: str = Field(
        default_factory=_env("OLLAMA_BASE_URL", "http://localhost:11434")
    )
    ollama_model: str = Field(default_factory=_env("OLLAMA_MODEL", "phi"))
    timeout: float = Field(
        default_factory=_env("LLM_TIMEOUT", "30"),
        validate_default=True,
        gt=0,
        description="Upstream request timeout in seconds",
    )
    max_retries: int = Field(
        default_factory=_env("LLM_MAX_RETRIES", "3"),
        validate_default=True,
        ge=0,
        le=10,
    )
    initial_retry_delay: float = Field(
        default_factory=_env("LLM_INITIAL_RETRY_DELAY", "1.0"),
        validate_default=True,
        ge=0.0,
    )
    temperature: float = Field(
        default_factory=_env("LLM_TEMPERATURE", "0.7"),
        validate_default=True,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default_factory=_env("LLM_MAX_TOKENS", "1024"),
        validate_default=True,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    max_message_length: int = Field(
        default_factory=_env("LLM_MAX_MESSAGE_LENGTH", "4096"),
        validate_default=True,
        ge=1,
    )

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: object) -> object:
        """Accept provider names in any case and with surrounding spaces."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("groq_api_key", "gemini_api_key")
    @classmethod
    def blank_key_is_missing(cls, v: str | None) -> str | None:
        """Strip API keys and treat blank ones as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()


def get_provider_config() -> ProviderConfig:
    """Create provider configuration from environment.

    Raises:
        ValidationError: If an environment value is out of range.
    """
    return ProviderConfig()
