"""
Data Sources Package - Rate-limited market data layer.

Provides the upstream fetch discipline and token discovery for the scanner.

Features:
- Window rate limiting with minimum request spacing
- Retry with exponential backoff and jitter
- Circuit breaker on the discovery path
- Response memoization in the shared ResultCache
- Live (CoinGecko) and synthetic sources behind one interface

Quick Start:
    from core.cache import ResultCache
    from data_sources import TokenDiscovery, create_data_source

    async def scan():
        cache = ResultCache()
        async with create_data_source("live", cache=cache) as source:
            token_ids = await TokenDiscovery(source).discover()
            metrics = await source.get_token_metrics(next(iter(token_ids)))

Adding New Providers:
    1. Create class extending BaseMarketDataSource
    2. Implement: name, _request()
    3. Register the kind in data_sources.factory
"""

from data_sources.base import BaseMarketDataSource
from data_sources.circuit import CircuitBreaker, CircuitState
from data_sources.config import DiscoveryConfig, FetchConfig
from data_sources.discovery import TokenDiscovery
from data_sources.exceptions import (
    CircuitOpenError,
    DataSourceError,
    RateLimitError,
    UpstreamError,
)
from data_sources.factory import create_data_source
from data_sources.models import Endpoint, MarketSeries, TokenMetrics
from data_sources.providers import CoinGeckoSource, SyntheticMarketSource
from data_sources.rate_limit import WindowRateLimiter


__all__ = [
    # Base
    "BaseMarketDataSource",
    # Providers
    "CoinGeckoSource",
    "SyntheticMarketSource",
    "create_data_source",
    # Discipline
    "CircuitBreaker",
    "CircuitState",
    "WindowRateLimiter",
    # Discovery
    "TokenDiscovery",
    # Config
    "DiscoveryConfig",
    "FetchConfig",
    # Models
    "Endpoint",
    "MarketSeries",
    "TokenMetrics",
    # Exceptions
    "CircuitOpenError",
    "DataSourceError",
    "RateLimitError",
    "UpstreamError",
]
