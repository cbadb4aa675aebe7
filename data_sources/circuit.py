"""Circuit breaker guarding the discovery path of a market data source."""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional

from core.clock import ClockProtocol, SystemClock


logger = logging.getLogger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Consecutive failure threshold with a cooldown.

    After ``threshold`` consecutive failures the circuit opens for
    ``cooldown`` seconds. Once the cooldown passes a single trial call
    is let through; its outcome closes or re-opens the circuit.
    """

    def __init__(
        self,
        *,
        threshold: int = 3,
        cooldown: float = 60.0,
        clock: Optional[ClockProtocol] = None,
        name: str = "circuit",
    ) -> None:
        if threshold <= 0:
            raise ValueError("threshold must be positive")
        if cooldown <= 0:
            raise ValueError("cooldown must be positive")
        self._threshold = threshold
        self._cooldown = cooldown
        self._clock = clock or SystemClock()
        self._name = name
        self._lock = asyncio.Lock()
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_until = 0.0
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        return self._state

    async def is_open(self) -> bool:
        """True when a call must fail fast. Claims the half-open trial slot."""
        async with self._lock:
            if self._state == CircuitState.CLOSED:
                return False
            if self._state == CircuitState.OPEN:
                if self._clock.monotonic() < self._opened_until:
                    return True
                self._state = CircuitState.HALF_OPEN
                self._trial_in_flight = False
                logger.info(f"[{self._name}] Cooldown over, allowing trial call")
            if self._trial_in_flight:
                return True
            self._trial_in_flight = True
            return False

    async def retry_in(self) -> float:
        async with self._lock:
            return max(0.0, self._opened_until - self._clock.monotonic())

    async def record_success(self) -> None:
        async with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info(f"[{self._name}] Circuit closed")
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._trial_in_flight = False

    async def record_failure(self) -> None:
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._open()
                return
            if self._state == CircuitState.OPEN:
                return
            self._failures += 1
            if self._failures >= self._threshold:
                self._open()

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_until = self._clock.monotonic() + self._cooldown
        self._failures = 0
        self._trial_in_flight = False
        logger.warning(f"[{self._name}] Circuit opened for {self._cooldown:.0f}s")

    async def snapshot(self) -> Dict[str, Any]:
        async with self._lock:
            return {
                "state": self._state.value,
                "failures": float(self._failures),
                "cooldown_remaining": max(0.0, self._opened_until - self._clock.monotonic()),
            }
