"""Server configuration with environment variable loading.

Covers rate limiting, the knowledge base source, CORS and optional chat
behaviours. Provider settings live in ``src.providers.config``.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from src.knowledge.base import DEFAULT_KNOWLEDGE_BASE_PATH, DEFAULT_MIN_ENTRIES

# Load environment variables from .env file
load_dotenv()


class ServerConfig(BaseModel):
    """Configuration for the chat server.

    Attributes:
        service_name: Name reported by the health endpoint.
        rate_limit_max_tokens: Requests a client may burst.
        rate_limit_refill_rate: Requests regained per second.
        rate_limit_window_seconds: Cleanup interval for idle clients.
        knowledge_base_path: Profile dataset to load.
        knowledge_base_min_entries: Minimum entries the dataset must contain.
        cors_allow_origins: Allowed CORS origins.
        auto_detect_language: Detect the language when the request omits it.
        guardrail_short_circuit: Answer out-of-scope and project questions
            with a canned reply instead of calling the provider.
    """

    service_name: str = "persona-chat"
    rate_limit_max_tokens: float = Field(
        default_factory=lambda: os.getenv("RATE_LIMIT_MAX_TOKENS", "30"),
        validate_default=True,
        gt=0,
    )
    rate_limit_refill_rate: float = Field(
        default_factory=lambda: os.getenv("RATE_LIMIT_REFILL_RATE", "0.5"),
        validate_default=True,
        gt=0,
        description="Tokens added per second",
    )
    rate_limit_window_seconds: float = Field(
        default_factory=lambda: os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"),
        validate_default=True,
        gt=0,
    )
    knowledge_base_path: Path = Field(
        default_factory=lambda: os.getenv("KNOWLEDGE_BASE_PATH") or DEFAULT_KNOWLEDGE_BASE_PATH,
        validate_default=True,
    )
    knowledge_base_min_entries: int = Field(
        default_factory=lambda: os.getenv("KNOWLEDGE_BASE_MIN_ENTRIES", str(DEFAULT_MIN_ENTRIES)),
        validate_default=True,
        ge=0,
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: os.getenv("CORS_ALLOW_ORIGINS", "*"),
        validate_default=True,
    )
    auto_detect_language: bool = Field(
        default_factory=lambda: os.getenv("CHAT_AUTO_DETECT_LANGUAGE", "false"),
        validate_default=True,
    )
    guardrail_short_circuit: bool = Field(
        default_factory=lambda: os.getenv("CHAT_GUARDRAIL_SHORT_CIRCUIT", "false"),
        validate_default=True,
    )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def split_origins(cls, v: object) -> object:
        """Accept a comma-separated string of origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


def get_server_config() -> ServerConfig:
    """Create server configuration from environment.

    Raises:
        ValidationError: If an environment value is out of range.
    """
    return ServerConfig()
