"""Sliding-window limiter on job starts."""

from __future__ import annotations

import asyncio
import logging
import time

from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from lookout.shared.constants import (
    DEFAULT_RATE_LIMIT_MAX,
    DEFAULT_RATE_LIMIT_WINDOW_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass
class SlidingWindowRateLimiter:
    """Allows at most ``max_starts`` acquisitions in any ``window_seconds``.

    Shared by every worker in a pool, so the cap applies to the pool as a
    whole. Waiters are served one at a time in arrival order.
    """

    max_starts: int = DEFAULT_RATE_LIMIT_MAX
    window_seconds: float = DEFAULT_RATE_LIMIT_WINDOW_SECONDS
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    _starts: deque[float] = field(default_factory=deque[float], init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        if self.max_starts < 1:
            msg = f"max_starts must be at least 1, got {self.max_starts}"
            raise ValueError(msg)
        if self.window_seconds <= 0:
            msg = f"window_seconds must be positive, got {self.window_seconds}"
            raise ValueError(msg)

    async def acquire(self) -> None:
        """Wait until a start slot is free, then take it."""
        async with self._lock:
            while True:
                now = self.clock()
                self._expire(now)
                if len(self._starts) < self.max_starts:
                    self._starts.append(now)
                    return

                wait = self.window_seconds - (now - self._starts[0])
                logger.debug("Rate limit reached, waiting %.1fs", wait)
                await self.sleep(wait)

    @property
    def in_window(self) -> int:
        """Starts counted against the current window."""
        self._expire(self.clock())
        return len(self._starts)

    def _expire(self, now: float) -> None:
        while self._starts and now - self._starts[0] >= self.window_seconds:
            self._starts.popleft()
