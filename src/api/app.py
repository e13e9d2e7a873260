"""Builds the persona chat FastAPI app.

``create_app`` wires the rate limiter, the LLM provider adapter and the
profile knowledge base onto ``app.state``, mounts the chat and profile routers and a
health probe, and ties the limiter and provider lifetimes to the app
lifespan. Serve it with ``uvicorn --factory src.api.app:create_app``.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.api.chat import get_profile
from src.api.chat import router as chat_router
from src.api.config import ServerConfig, get_server_config
from src.api.profile import router as profile_router
from src.knowledge.base import KnowledgeBase, KnowledgeBaseError, get_knowledge_base
from src.limiter.token_bucket import TokenBucketLimiter
from src.providers.base import ProviderAdapter
from src.providers.factory import build_provider_adapter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Loads the profile once on startup so the first request does not pay for
    it, and releases the limiter sweep thread and the provider's HTTP client
    on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info(f"Starting {app.state.config.service_name} with {app.state.provider.name} provider")
    if app.state.knowledge_base is None:
        config: ServerConfig = app.state.config
        try:
            get_knowledge_base(config.knowledge_base_path, config.knowledge_base_min_entries)
        except KnowledgeBaseError as e:
            logger.error(f"Profile failed to load at startup: {e}")
    yield
    logger.info(f"Shutting down {app.state.config.service_name}...")
    app.state.limiter.destroy()
    await app.state.provider.aclose()


def create_app(
    config: ServerConfig | None = None,
    *,
    limiter: TokenBucketLimiter | None = None,
    provider: ProviderAdapter | None = None,
    knowledge_base: KnowledgeBase | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Server configuration. Loads from environment if not provided.
        limiter: Rate limiter; built from ``config`` when omitted.
        provider: LLM adapter; chosen by ``LLM_PROVIDER`` when omitted.
        knowledge_base: Profile to answer from; loaded from
            ``config.knowledge_base_path`` when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or get_server_config()

    application = FastAPI(
        title="Persona Chat API",
        description=(
            "Streaming chat gateway answering questions about a professional "
            "profile in the first person. Retrieves relevant profile entries, "
            "assembles a guarded persona prompt, and relays the reply of a "
            "configurable LLM provider (Groq, Gemini or Ollama) over SSE."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    if limiter is None:
        limiter = TokenBucketLimiter(
            max_tokens=config.rate_limit_max_tokens,
            refill_rate=config.rate_limit_refill_rate,
            window_seconds=config.rate_limit_window_seconds,
        )
    if provider is None:
        provider = build_provider_adapter()

    application.state.config = config
    application.state.limiter = limiter
    application.state.provider = provider
    application.state.knowledge_base = knowledge_base

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_methods=["POST", "OPTIONS", "GET"],
        allow_headers=["Content-Type"],
    )

    application.include_router(chat_router)
    application.include_router(profile_router)

    @application.get("/health")
    async def health_check(request: Request) -> dict[str, Any]:
        """Check service health status."""
        try:
            profile: dict[str, Any] | None = get_profile(request).metadata()
        except KnowledgeBaseError:
            profile = None
        return {
            "status": "healthy",
            "service": config.service_name,
            "provider": request.app.state.provider.name,
            "knowledge_base": profile,
        }

    return application

