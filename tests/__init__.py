"""Test package for Persona Chat.

Unit tests for isolated logic and integration tests for the HTTP and
streaming workflow.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end request tests against the ASGI app

Upstream LLMs are never called: adapters run against httpx.MockTransport
and the app runs with an in-memory provider.
Leverages pytest with pytest-check for soft assertions.
"""
