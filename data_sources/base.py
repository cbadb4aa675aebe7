"""
Base Market Data Source - Rate-limited fetch client.

============================================================
RESPONSIBILITY
============================================================
Owns the request discipline for one upstream market API.

- Response memoization (cache hits skip everything below)
- Circuit breaker on guarded calls
- Window limiter with minimum spacing
- Per-attempt timeout
- Retry with exponential backoff and jitter

Subclasses only implement ``_request``; payload parsing into
scanner models lives here so every source yields the same shapes.

============================================================
"""

import asyncio
import json
import logging
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from core.cache import ResultCache
from core.clock import ClockProtocol, SystemClock

from data_sources.circuit import CircuitBreaker
from data_sources.config import FetchConfig
from data_sources.exceptions import (
    CircuitOpenError,
    DataSourceError,
    RateLimitError,
    UpstreamError,
)
from data_sources.models import Endpoint, MarketOverview, MarketSeries, TokenMetrics
from data_sources.rate_limit import SleepFn, WindowRateLimiter


logger = logging.getLogger(__name__)


class BaseMarketDataSource(ABC):
    """
    Abstract base class for all market data sources.

    Each data source implementation must:
    1. Implement name - Unique identifier used in logs
    2. Implement _request() - One raw attempt against the upstream

    Features:
    - Automatic retry with exponential backoff
    - Rate limiting protection
    - Circuit breaker for the discovery path
    - Response memoization in the shared ResultCache
    """

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        cache: Optional[ResultCache] = None,
        clock: Optional[ClockProtocol] = None,
        sleep: Optional[SleepFn] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._config = config or FetchConfig()
        self._cache = cache
        self._clock = clock or SystemClock()
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()

        self._limiter = WindowRateLimiter(
            capacity=self._config.max_requests,
            window_seconds=self._config.window_seconds,
            min_interval=self._config.min_interval,
            clock=self._clock,
            sleep=self._sleep,
            name=self.name,
        )
        self._breaker = CircuitBreaker(
            threshold=self._config.circuit_threshold,
            cooldown=self._config.circuit_cooldown,
            clock=self._clock,
            name=self.name,
        )

        self._stats = {
            "calls": 0,
            "cache_hits": 0,
            "attempts": 0,
            "retries": 0,
            "failures": 0,
            "circuit_rejections": 0,
        }

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this data source."""
        pass

    @abstractmethod
    async def _request(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """
        Perform one attempt against the upstream.

        Returns:
            Decoded JSON payload

        Raises:
            UpstreamError: non-2xx status or network failure
        """
        pass

    @property
    def config(self) -> FetchConfig:
        return self._config

    @property
    def limiter(self) -> WindowRateLimiter:
        return self._limiter

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    # ─────────────────────────────────────────────────────────────
    # Fetch discipline
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def cache_key(endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
        return f"{endpoint}:{json.dumps(params or {}, sort_keys=True, default=str)}"

    async def fetch(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        guarded: bool = False,
    ) -> Any:
        """
        Fetch a payload under the full request discipline.

        Args:
            endpoint: Path relative to the base URL
            params: Query parameters
            guarded: Route through the circuit breaker

        Raises:
            UpstreamError: retries exhausted or non-retryable status
            CircuitOpenError: guarded call while the circuit is open
        """
        params = dict(params or {})
        self._stats["calls"] += 1

        key = self.cache_key(endpoint, params)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                self._stats["cache_hits"] += 1
                logger.debug(f"[{self.name}] Cache hit {endpoint}")
                return cached

        if guarded and await self._breaker.is_open():
            self._stats["circuit_rejections"] += 1
            raise CircuitOpenError(
                f"Circuit open for {endpoint}",
                source_name=self.name,
                retry_in=await self._breaker.retry_in(),
            )

        succeeded = False
        try:
            payload = await self._fetch_with_retry(endpoint, params)
            succeeded = True
        finally:
            if guarded:
                if succeeded:
                    await self._breaker.record_success()
                else:
                    await self._breaker.record_failure()

        if self._cache is not None and payload is not None:
            self._cache.set(key, payload, ttl=self._config.response_ttl)
        return payload

    async def _fetch_with_retry(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """Fetch with exponential backoff retry."""
        attempts = self._config.max_retries + 1
        last_error: Optional[UpstreamError] = None

        for attempt in range(attempts):
            await self._limiter.acquire()
            self._stats["attempts"] += 1

            try:
                return await asyncio.wait_for(
                    self._request(endpoint, params),
                    timeout=self._config.timeout,
                )
            except asyncio.TimeoutError as e:
                last_error = UpstreamError(
                    f"Timed out after {self._config.timeout}s",
                    source_name=self.name,
                    url=endpoint,
                    original_error=e,
                )
            except UpstreamError as e:
                if not e.is_retryable:
                    self._stats["failures"] += 1
                    raise
                last_error = e

            if attempt + 1 >= attempts:
                break

            delay = self._backoff_delay(attempt, last_error)
            self._stats["retries"] += 1
            logger.warning(
                f"[{self.name}] {endpoint} failed ({last_error.message}), "
                f"retrying in {delay:.2f}s (attempt {attempt + 1}/{attempts})"
            )
            await self._sleep(delay)

        self._stats["failures"] += 1
        raise UpstreamError(
            f"{endpoint} failed after {attempts} attempts",
            source_name=self.name,
            status_code=last_error.status_code if last_error else None,
            url=endpoint,
            original_error=last_error,
        )

    def _backoff_delay(self, attempt: int, error: Optional[UpstreamError]) -> float:
        cfg = self._config
        delay = min(cfg.backoff_max, cfg.backoff_base * cfg.backoff_factor ** attempt)
        delay += self._rng.uniform(0, cfg.jitter)
        if isinstance(error, RateLimitError) and error.retry_after:
            delay = max(delay, error.retry_after)
        return delay

    # ─────────────────────────────────────────────────────────────
    # Market operations
    # ─────────────────────────────────────────────────────────────

    async def get_markets(self, guarded: bool = False, **params: Any) -> List[Dict[str, Any]]:
        """Rows of ``/coins/markets``; ``vs_currency`` defaults from config."""
        params.setdefault("vs_currency", self._config.vs_currency)
        payload = await self.fetch(Endpoint.MARKETS, params, guarded=guarded)
        return list(payload or [])

    async def get_trending(self, guarded: bool = False) -> List[str]:
        """Ids of currently trending coins."""
        payload = await self.fetch(Endpoint.TRENDING, guarded=guarded) or {}
        ids = []
        for coin in payload.get("coins") or []:
            item = coin.get("item") or {}
            if item.get("id"):
                ids.append(item["id"])
        return ids

    async def get_global(self) -> MarketOverview:
        """Whole-market totals from ``/global``."""
        payload = await self.fetch(Endpoint.GLOBAL) or {}
        return MarketOverview.from_global(payload.get("data") or {}, self._config.vs_currency)

    async def get_market_chart(self, token_id: str, days: Optional[int] = None) -> MarketSeries:
        """Price/volume history for one token."""
        params = {
            "vs_currency": self._config.vs_currency,
            "days": days or self._config.chart_days,
        }
        payload = await self.fetch(Endpoint.market_chart(token_id), params) or {}
        return MarketSeries.from_market_chart(payload)

    async def get_token_metrics(self, token_id: str) -> TokenMetrics:
        """
        Market row plus history for one token.

        Raises:
            DataSourceError: the token is not listed
        """
        rows = await self.get_markets(ids=token_id, price_change_percentage="1h,24h")
        row = next((r for r in rows if r.get("id") == token_id), None)
        if row is None:
            raise DataSourceError(f"Token {token_id} not found", source_name=self.name)

        metrics = TokenMetrics.from_market_row(row)
        metrics.history = await self.get_market_chart(token_id)
        return metrics

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None

    async def __aenter__(self) -> "BaseMarketDataSource":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def get_stats(self) -> Dict[str, Any]:
        return {
            "source": self.name,
            **self._stats,
            "circuit_state": self._breaker.state.value,
        }
