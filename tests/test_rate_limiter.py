import asyncio
import heapq
import time

import pytest

import services.rate_limiter as rate_limiter
from models.source import MangaSource
from services.rate_limiter import KeyedRateLimiter, TokenBucket

REAL_SLEEP = asyncio.sleep


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class VirtualClock(FakeClock):
    """Sleepers wake in deadline order; concurrent sleeps overlap instead of adding up."""

    def __init__(self):
        super().__init__()
        self._timers = []
        self._sequence = 0

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        future = asyncio.get_running_loop().create_future()
        self._sequence += 1
        heapq.heappush(self._timers, (self.now + seconds, self._sequence, future))
        await future

    async def run(self, *coros):
        tasks = [asyncio.ensure_future(coro) for coro in coros]
        while not all(task.done() for task in tasks):
            for _ in range(10):
                await REAL_SLEEP(0)
            if self._timers:
                deadline, _, future = heapq.heappop(self._timers)
                self.now = max(self.now, deadline)
                future.set_result(None)
        return await asyncio.gather(*tasks)


def test_bucket_admits_burst_then_paces(monkeypatch):
    clock = FakeClock()
    monkeypatch.setattr(rate_limiter.asyncio, "sleep", clock.sleep)
    bucket = TokenBucket(2, clock=clock)

    async def _run():
        for _ in range(4):
            await bucket.acquire()

    asyncio.run(_run())

    assert clock.sleeps == [0.5, 0.5]
    assert clock.now == 1.0


def test_bucket_refills_while_idle(monkeypatch):
    clock = FakeClock()
    monkeypatch.setattr(rate_limiter.asyncio, "sleep", clock.sleep)
    bucket = TokenBucket(2, clock=clock)

    async def _run():
        await bucket.acquire()
        await bucket.acquire()
        clock.now += 10
        await bucket.acquire()
        await bucket.acquire()

    asyncio.run(_run())

    assert clock.sleeps == []


def test_bucket_rejects_non_positive_rate():
    with pytest.raises(ValueError):
        TokenBucket(0)


def test_keys_do_not_share_quota():
    limiter = KeyedRateLimiter(rate_per_second=1, max_jitter_seconds=0)

    assert limiter.bucket_for(MangaSource.COMIC_DAYS) is limiter.bucket_for(MangaSource.COMIC_DAYS)
    assert limiter.bucket_for(MangaSource.COMIC_DAYS) is not limiter.bucket_for(MangaSource.GANMA)

    async def _run():
        started = time.monotonic()
        await limiter.acquire(MangaSource.COMIC_DAYS)
        await limiter.acquire(MangaSource.GANMA)
        await limiter.acquire(MangaSource.YANMAGA)
        return time.monotonic() - started

    assert asyncio.run(_run()) < 0.5


def test_concurrent_waiters_on_one_key_are_serialized():
    limiter = KeyedRateLimiter(rate_per_second=20, max_jitter_seconds=0)

    async def _run():
        started = time.monotonic()
        await asyncio.gather(*(limiter.acquire(MangaSource.COMIC_DAYS) for _ in range(25)))
        return time.monotonic() - started

    # 20 tokens up front, the remaining 5 at 20/s.
    assert asyncio.run(_run()) >= 0.2


def test_jitter_is_applied_after_admission(monkeypatch):
    clock = FakeClock()
    monkeypatch.setattr(rate_limiter.asyncio, "sleep", clock.sleep)
    monkeypatch.setattr(rate_limiter.random, "uniform", lambda low, high: high / 4)
    limiter = KeyedRateLimiter(rate_per_second=100, max_jitter_seconds=1.0)

    asyncio.run(limiter.acquire(MangaSource.COMIC_DAYS))

    assert clock.sleeps == [0.25]


def test_defaults_come_from_config(monkeypatch):
    monkeypatch.setattr(rate_limiter.config, "CRAWLER_RATE_LIMIT_PER_SECOND", 7)
    monkeypatch.setattr(rate_limiter.config, "CRAWLER_RATE_LIMIT_JITTER_SECONDS", 0)

    limiter = KeyedRateLimiter()

    assert limiter.rate_per_second == 7
    assert limiter.max_jitter_seconds == 0


def test_busy_sources_are_paced_independently(monkeypatch):
    clock = VirtualClock()
    monkeypatch.setattr(rate_limiter.asyncio, "sleep", clock.sleep)
    limiter = KeyedRateLimiter(rate_per_second=2, max_jitter_seconds=0, clock=clock)
    finished = {MangaSource.COMIC_DAYS: [], MangaSource.GANMA: []}

    async def acquire_and_stamp(key):
        await limiter.acquire(key)
        finished[key].append(clock.now)

    keys = [MangaSource.COMIC_DAYS, MangaSource.GANMA] * 10
    asyncio.run(clock.run(*(acquire_and_stamp(key) for key in keys)))

    # Two tokens up front, the other eight at 2/s.
    for key, stamps in finished.items():
        assert len(stamps) == 10
        assert max(stamps) >= 4.0 - 1e-9
        assert max(stamps) == pytest.approx(4.0)
    assert sorted(finished[MangaSource.COMIC_DAYS]) == pytest.approx(sorted(finished[MangaSource.GANMA]))
