"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - limiter/: Token bucket behaviour on a fake clock
    - knowledge/: Dataset validation, loading and relevance scoring
    - prompt/: Prompt assembly, guardrails, names and language detection
    - models/: Request validation
    - providers/: Adapters, retries and error classification

Follows single responsibility per test function. Leverages pytest-check for
multiple assertions per test.
"""
