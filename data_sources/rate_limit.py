"""Request rate limiting for upstream APIs."""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from core.clock import ClockProtocol, SystemClock


logger = logging.getLogger(__name__)


SleepFn = Callable[[float], Awaitable[None]]


class WindowRateLimiter:
    """
    Fixed-window request limiter with minimum spacing.

    At most ``capacity`` requests start per ``window_seconds``, and two
    consecutive requests start at least ``min_interval`` apart. Callers
    over capacity wait; they are never rejected.
    """

    __slots__ = (
        "_capacity", "_window", "_min_interval", "_clock", "_sleep",
        "_lock", "_window_start", "_count", "_last_request", "_total_wait", "_name",
    )

    def __init__(
        self,
        *,
        capacity: int = 10,
        window_seconds: float = 60.0,
        min_interval: float = 2.0,
        clock: Optional[ClockProtocol] = None,
        sleep: Optional[SleepFn] = None,
        name: str = "limiter",
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self._capacity = capacity
        self._window = window_seconds
        self._min_interval = min_interval
        self._clock = clock or SystemClock()
        self._sleep = sleep or asyncio.sleep
        self._lock = asyncio.Lock()
        self._window_start = self._clock.monotonic()
        self._count = 0
        self._last_request: Optional[float] = None
        self._total_wait = 0.0
        self._name = name

    @property
    def capacity(self) -> int:
        return self._capacity

    async def acquire(self) -> float:
        """Wait for a request slot. Returns the seconds spent waiting."""
        waited = 0.0
        async with self._lock:
            now = self._clock.monotonic()
            if now - self._window_start >= self._window:
                self._window_start = now
                self._count = 0

            if self._count >= self._capacity:
                wait = self._window_start + self._window - now
                if wait > 0:
                    logger.debug(f"[{self._name}] Window full, waiting {wait:.2f}s")
                    await self._sleep(wait)
                    waited += wait
                now = self._clock.monotonic()
                self._window_start = now
                self._count = 0

            if self._last_request is not None:
                gap = self._last_request + self._min_interval - now
                if gap > 0:
                    logger.debug(f"[{self._name}] Spacing requests, waiting {gap:.2f}s")
                    await self._sleep(gap)
                    waited += gap
                    now = self._clock.monotonic()

            self._count += 1
            self._last_request = now
            self._total_wait += waited
        return waited

    async def snapshot(self) -> Dict[str, float]:
        async with self._lock:
            return {
                "capacity": float(self._capacity),
                "used": float(self._count),
                "window_seconds": self._window,
                "total_wait_seconds": round(self._total_wait, 3),
            }
