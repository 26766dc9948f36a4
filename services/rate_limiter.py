"""Per-source request pacing for the update job."""

import asyncio
import logging
import random
import time

import config

LOGGER = logging.getLogger(__name__)


class TokenBucket:
    """
    Async token bucket.

    ``rate`` tokens are added per second up to ``capacity`` (default: one
    second worth of quota). Waiters are admitted one at a time, so the
    token accounting never races.
    """

    def __init__(self, rate, capacity=None, clock=time.monotonic):
        if rate <= 0:
            raise ValueError("rate must be positive")
        self.rate = float(rate)
        self.capacity = float(capacity if capacity is not None else rate)
        self._clock = clock
        self._tokens = self.capacity
        self._updated_at = clock()
        self._lock = asyncio.Lock()

    def _refill(self):
        now = self._clock()
        elapsed = max(0.0, now - self._updated_at)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)
        self._updated_at = now

    async def acquire(self):
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                await asyncio.sleep((1 - self._tokens) / self.rate)
                self._refill()
            self._tokens -= 1


class KeyedRateLimiter:
    """One :class:`TokenBucket` per key, created on first use; keys never share quota."""

    def __init__(self, rate_per_second=None, max_jitter_seconds=None, clock=time.monotonic):
        self.rate_per_second = (
            config.CRAWLER_RATE_LIMIT_PER_SECOND if rate_per_second is None else rate_per_second
        )
        self.max_jitter_seconds = (
            config.CRAWLER_RATE_LIMIT_JITTER_SECONDS if max_jitter_seconds is None else max_jitter_seconds
        )
        self._clock = clock
        self._buckets = {}

    def bucket_for(self, key):
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = TokenBucket(self.rate_per_second, clock=self._clock)
            self._buckets[key] = bucket
        return bucket

    async def acquire(self, key):
        await self.bucket_for(key).acquire()
        if self.max_jitter_seconds > 0:
            await asyncio.sleep(random.uniform(0, self.max_jitter_seconds))
