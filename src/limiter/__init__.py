"""Per-client rate limiting for the chat endpoint.

Token bucket limiter with lazy refill and a background sweep that drops
buckets for clients that have gone quiet.
"""

from src.limiter.token_bucket import TokenBucket, TokenBucketLimiter

__all__ = ["TokenBucket", "TokenBucketLimiter"]
