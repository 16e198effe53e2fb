"""Token-bucket rate limiter for outbound catalog requests.

The bucket holds ``capacity`` tokens and refills at ``refill_rate`` tokens
per second.  Every request takes one token; when the bucket is empty the
caller sleeps until a token is available.  If that wait would exceed
``max_wait_seconds`` the limiter raises :class:`RateLimiterError` instead of
stalling the whole discovery batch behind one slow catalog.

Usage::

    limiter = TokenBucketRateLimiter(capacity=5, refill_rate=5.0, name="deezer")
    await limiter.acquire()
    response = await client.get(url)
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable

import structlog

from linkscout.utils.errors import RateLimiterError

logger = structlog.get_logger(logger_name=__name__)


class TokenBucketRateLimiter:
    """Async token bucket with a bounded wait.

    Parameters
    ----------
    capacity:
        Maximum burst size.
    refill_rate:
        Tokens added per second.
    max_wait_seconds:
        Longest a single :meth:`acquire` may sleep.  ``None`` waits forever.
    name:
        Label used in log events and error messages.
    clock:
        Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        capacity: int = 10,
        refill_rate: float = 2.0,
        max_wait_seconds: float | None = 30.0,
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if refill_rate <= 0:
            raise ValueError(f"refill_rate must be > 0, got {refill_rate}")
        self._capacity = capacity
        self._refill_rate = refill_rate
        self._max_wait = max_wait_seconds
        self._name = name
        self._clock = clock
        self._tokens = float(capacity)
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    @classmethod
    def per_minute(cls, requests: int, name: str, max_wait_seconds: float | None = 30.0) -> TokenBucketRateLimiter:
        """Build a limiter allowing *requests* per minute with no extra burst."""
        return cls(
            capacity=max(1, requests),
            refill_rate=requests / 60.0,
            max_wait_seconds=max_wait_seconds,
            name=name,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def available_tokens(self) -> float:
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        self._tokens = min(float(self._capacity), self._tokens + elapsed * self._refill_rate)
        self._last_refill = now

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available.

        Raises
        ------
        RateLimiterError
            If the required wait exceeds ``max_wait_seconds``.
        """
        async with self._lock:
            self._refill()
            if self._tokens < 1.0:
                wait_time = (1.0 - self._tokens) / self._refill_rate
                if self._max_wait is not None and wait_time > self._max_wait:
                    raise RateLimiterError(
                        message=(
                            f"Token wait of {wait_time:.2f}s exceeds "
                            f"limit of {self._max_wait:.2f}s"
                        ),
                        provider_name=self._name,
                    )
                logger.debug("rate_limiter_waiting", limiter=self._name, wait_seconds=round(wait_time, 3))
                # Sleeping while holding the lock keeps waiters in FIFO order.
                await asyncio.sleep(wait_time)
                self._refill()
            self._tokens = max(0.0, self._tokens - 1.0)
