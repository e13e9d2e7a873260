"""FastAPI endpoints for the persona chat.

Endpoints:
    - GET /health: Service health, provider and profile metadata
    - GET /profile: Profile dataset, or only its metadata
    - POST /chat: Streaming chat replies over Server-Sent Events
    - OPTIONS /chat: CORS preflight
"""

from src.api.app import create_app

__all__ = ["create_app"]
