"""
Core Module - Result Cache.

============================================================
RESPONSIBILITY
============================================================
Key/value store with per-entry time-to-live.

- Memoizes upstream API responses keyed by endpoint + params
- Stores each job's final ranked result set keyed by job id
- Expired entries are absent on the next read
- A periodic sweep purges expired entries

============================================================
CONCURRENCY
============================================================
All operations are synchronous and never await, so within one
event loop every call is atomic with respect to other coroutines.

============================================================
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .clock import ClockProtocol, SystemClock


logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value with its absolute expiry (clock monotonic seconds)."""
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ResultCache:
    """
    TTL cache shared by the fetch client and the job manager.

    Plain ``get``/``set``/``delete``/``flush`` API, one TTL per entry.
    """

    DEFAULT_TTL = 300.0  # 5 minutes
    DEFAULT_CHECK_PERIOD = 30.0

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        check_period: float = DEFAULT_CHECK_PERIOD,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        if check_period <= 0:
            raise ValueError("check_period must be positive")

        self.default_ttl = default_ttl
        self.check_period = check_period
        self._clock = clock or SystemClock()
        self._entries: Dict[str, CacheEntry] = {}
        self._sweeper: Optional[asyncio.Task] = None

        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "expired": 0,
        }

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self._stats["misses"] += 1
            return None

        if entry.is_expired(self._clock.monotonic()):
            del self._entries[key]
            self._stats["expired"] += 1
            self._stats["misses"] += 1
            return None

        self._stats["hits"] += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """Store a value. ``ttl`` overrides the default TTL (seconds)."""
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        self._entries[key] = CacheEntry(
            value=value,
            expires_at=self._clock.monotonic() + ttl,
        )
        self._stats["sets"] += 1
        return True

    def delete(self, key: str) -> int:
        """Evict a key. Returns the number of entries removed (0 or 1)."""
        if self._entries.pop(key, None) is None:
            return 0
        return 1

    def flush(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def keys(self) -> List[str]:
        """Keys of live (unexpired) entries."""
        now = self._clock.monotonic()
        return [k for k, e in self._entries.items() if not e.is_expired(now)]

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock.monotonic()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]

        if expired:
            self._stats["expired"] += len(expired)
            logger.debug(f"[cache] Purged {len(expired)} expired entries")
        return len(expired)

    def get_stats(self) -> Dict[str, Any]:
        lookups = self._stats["hits"] + self._stats["misses"]
        return {
            **self._stats,
            "size": len(self._entries),
            "hit_rate_pct": round(self._stats["hits"] / lookups * 100, 2) if lookups else 0.0,
        }

    def __len__(self) -> int:
        return len(self.keys())

    # ─────────────────────────────────────────────────────────────
    # Periodic sweep
    # ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Start the background sweep task on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop(), name="cache-sweeper")

    async def close(self) -> None:
        """Stop the background sweep task."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.check_period)
            self.purge_expired()
