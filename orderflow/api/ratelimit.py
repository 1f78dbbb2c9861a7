"""Per-client token-bucket throttling, used as a route dependency."""

import threading
import time

from fastapi import HTTPException, Request


class TokenBucket:
    def __init__(self, per_minute: int, burst: int, now: float):
        self.rate = per_minute / 60.0
        self.burst = max(1, burst)
        self.tokens = float(self.burst)
        self.updated = now

    def allow(self, now: float) -> bool:
        self.tokens = min(self.burst, self.tokens + (now - self.updated) * self.rate)
        self.updated = now
        if self.tokens >= 1:
            self.tokens -= 1
            return True
        return False

    def full(self, now: float) -> bool:
        return self.tokens + (now - self.updated) * self.rate >= self.burst


class RateLimiter:
    """Callable dependency; one bucket per client address. ``per_minute=0`` disables it."""

    def __init__(self, per_minute: int, burst: int, clock=time.monotonic):
        self.per_minute = per_minute
        self.burst = burst
        self.clock = clock
        self._buckets: dict[str, TokenBucket] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        if self.per_minute <= 0:
            return True
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = self._buckets[key] = TokenBucket(self.per_minute, self.burst, self.clock())
            return bucket.allow(self.clock())

    def cleanup(self) -> None:
        """Drop buckets that have refilled completely."""
        with self._lock:
            now = self.clock()
            for key in [k for k, b in self._buckets.items() if b.full(now)]:
                del self._buckets[key]

    def __call__(self, request: Request) -> None:
        client = request.client.host if request.client else "unknown"
        if len(self._buckets) > 10_000:
            self.cleanup()
        if not self.allow(client):
            raise HTTPException(status_code=429, detail="Rate limit exceeded. Please try again later.")
