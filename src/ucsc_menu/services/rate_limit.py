"""Outbound request rate limiting."""

import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol


class RateLimiter(Protocol):
    """Interface for waiting until an outbound request may be sent."""

    async def acquire(self) -> None:
        """Block until the caller may issue one request."""


@dataclass
class TokenBucketRateLimiter(RateLimiter):
    """Token bucket capped at ``rate`` tokens per second with random jitter.

    Each acquisition sleeps for a random 0..``max_jitter_seconds`` first so
    concurrent fan-out requests do not reach the site in one burst.
    """

    rate: float = 20.0
    capacity: float | None = None
    max_jitter_seconds: float = 2.0
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    jitter: Callable[[float, float], float] = random.uniform
    _tokens: float = field(init=False)
    _updated_at: float = field(init=False)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        if self.rate <= 0:
            raise ValueError("rate must be positive")
        if self.capacity is None:
            self.capacity = self.rate
        self._tokens = self.capacity
        self._updated_at = self.clock()

    async def acquire(self) -> None:
        """Wait out the jitter, then take one token from the bucket."""
        if self.max_jitter_seconds > 0:
            await self.sleep(self.jitter(0.0, self.max_jitter_seconds))
        async with self._lock:
            while True:
                self._refill()
                if self._tokens >= 1:
                    self._tokens -= 1
                    return
                await self.sleep((1 - self._tokens) / self.rate)

    def _refill(self) -> None:
        now = self.clock()
        elapsed = now - self._updated_at
        self._updated_at = now
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)


@dataclass
class UnlimitedRateLimiter(RateLimiter):
    """Limiter that never waits."""

    async def acquire(self) -> None:
        return None
