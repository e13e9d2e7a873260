"""Integration tests for components working together as a system.

Coverage:
    - POST /chat from rate check to the last SSE event
    - GET /health and CORS preflight
    - Real adapters streaming from a mocked upstream through the app

Runs the real FastAPI app with ASGITransport; only the network edge is faked.
"""
