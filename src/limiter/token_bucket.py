"""In-memory token bucket rate limiter keyed by client identity.

Each key owns a bucket that starts full and refills continuously at
``refill_rate`` tokens per second, capped at ``max_tokens``. Refill is
computed lazily from elapsed clock time on every call, so correctness never
depends on the background thread; the thread only bounds memory by deleting
buckets that have been idle for more than two windows.
"""

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class TokenBucket:
    """Token bucket state for a single key.

    Attributes:
        tokens: Tokens currently available (0 <= tokens <= max_tokens).
        last_refill: Clock reading of the last refill, in seconds.
    """

    tokens: float
    last_refill: float


class TokenBucketLimiter:
    """Token bucket limiter with lazy refill and periodic idle-key cleanup.

    All bucket reads and writes happen under one lock. The critical sections
    are a handful of float operations, so a single lock does not serialize
    unrelated keys in any measurable way.
    """

    def __init__(
        self,
        max_tokens: float = 10,
        refill_rate: float = 10 / 60,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        start_cleanup: bool = True,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_tokens: Bucket capacity (burst size).
            refill_rate: Tokens added per second.
            window_seconds: Cleanup interval; buckets idle for more than
                twice this long are deleted.
            clock: Monotonic clock returning seconds. Injectable for tests.
            start_cleanup: Start the background sweep thread.
        """
        if max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        if refill_rate < 0:
            raise ValueError("refill_rate must not be negative")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_tokens = float(max_tokens)
        self.refill_rate = float(refill_rate)
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._cleanup_thread: threading.Thread | None = None

        if start_cleanup:
            self._cleanup_thread = threading.Thread(
                target=self._cleanup_loop,
                name="token-bucket-cleanup",
                daemon=True,
            )
            self._cleanup_thread.start()

    def _refill(self, bucket: TokenBucket, now: float) -> None:
        elapsed = max(0.0, now - bucket.last_refill)
        bucket.tokens = min(self.max_tokens, bucket.tokens + elapsed * self.refill_rate)
        bucket.last_refill = now

    def _projected_tokens(self, key: str, now: float) -> float:
        bucket = self._buckets.get(key)
        if bucket is None:
            return self.max_tokens
        elapsed = max(0.0, now - bucket.last_refill)
        return min(self.max_tokens, bucket.tokens + elapsed * self.refill_rate)

    def is_allowed(self, key: str, cost: float = 1) -> bool:
        """Consume ``cost`` tokens for ``key`` if enough are available.

        A cost larger than ``max_tokens`` can never succeed and is always
        rejected; callers should treat it as a client error rather than a
        rate-limit state.

        Args:
            key: Client identity (e.g. IP address).
            cost: Tokens to consume.

        Returns:
            True if the tokens were consumed, False otherwise (tokens are
            left untouched on rejection).
        """
        with self._lock:
            now = self._clock()
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = TokenBucket(tokens=self.max_tokens, last_refill=now)
                self._buckets[key] = bucket

            self._refill(bucket, now)

            if bucket.tokens >= cost:
                bucket.tokens -= cost
                return True
            return False

    def remaining_tokens(self, key: str) -> float:
        """Return tokens available for ``key`` as of now, without mutating state."""
        with self._lock:
            return self._projected_tokens(key, self._clock())

    def retry_after_seconds(self, key: str, cost: float = 1) -> float:
        """Return whole seconds until ``cost`` tokens will be available.

        Returns:
            0 if the tokens are available now, ``math.inf`` if they never
            will be (no refill, or cost above capacity), otherwise the
            ceiling of the wait in seconds.
        """
        with self._lock:
            available = self._projected_tokens(key, self._clock())

        if available >= cost:
            return 0
        if cost > self.max_tokens or self.refill_rate == 0:
            return math.inf
        return float(math.ceil((cost - available) / self.refill_rate))

    def cleanup(self) -> int:
        """Delete buckets idle for more than two windows.

        Returns:
            Number of buckets removed.
        """
        with self._lock:
            cutoff = self._clock() - 2 * self.window_seconds
            stale = [key for key, bucket in self._buckets.items() if bucket.last_refill < cutoff]
            for key in stale:
                del self._buckets[key]

        if stale:
            logger.debug(f"Removed {len(stale)} idle rate-limit buckets")
        return len(stale)

    def _cleanup_loop(self) -> None:
        while not self._stop_event.wait(self.window_seconds):
            self.cleanup()

    def destroy(self) -> None:
        """Stop the background sweep and drop all buckets.

        No cleanup work runs after this returns.
        """
        self._stop_event.set()
        if self._cleanup_thread is not None and self._cleanup_thread is not threading.current_thread():
            self._cleanup_thread.join()
        self._cleanup_thread = None
        with self._lock:
            self._buckets.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)
