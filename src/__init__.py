"""Persona Chat - a streaming chat gateway that answers as a professional profile.

Combines FastAPI for HTTP streaming, httpx for upstream LLM calls,
and Pydantic for configuration and data validation.

Components:
    - api: HTTP endpoints and the SSE relay
    - limiter: Per-client token bucket rate limiting
    - knowledge: Bilingual profile dataset and relevance retrieval
    - prompt: Persona prompt assembly and guardrails
    - providers: Groq, Gemini and Ollama streaming adapters
    - models: Request, message and stream event schemas
"""

__version__ = "0.1.0"
