"""
Data Source Factory - Selects the market data source by name.
"""

import logging
from dataclasses import replace
from typing import Optional

from core.cache import ResultCache
from core.clock import ClockProtocol
from core.exceptions import ConfigurationError

from data_sources.base import BaseMarketDataSource
from data_sources.config import FetchConfig
from data_sources.providers.coingecko import CoinGeckoSource
from data_sources.providers.synthetic import SyntheticMarketSource


logger = logging.getLogger(__name__)


LIVE = "live"
SYNTHETIC = "synthetic"
SOURCE_KINDS = (LIVE, SYNTHETIC)


def create_data_source(
    kind: str = LIVE,
    config: Optional[FetchConfig] = None,
    cache: Optional[ResultCache] = None,
    clock: Optional[ClockProtocol] = None,
    seed: int = 42,
) -> BaseMarketDataSource:
    """
    Build the configured market data source.

    The synthetic source has no upstream quota, so its request
    spacing is dropped; retry and memoization still apply.

    Raises:
        ConfigurationError: unknown ``kind``
    """
    config = config or FetchConfig()

    if kind == LIVE:
        logger.info(f"[factory] Using live CoinGecko source at {config.base_url}")
        return CoinGeckoSource(config=config, cache=cache, clock=clock)

    if kind == SYNTHETIC:
        logger.info(f"[factory] Using synthetic source (seed={seed})")
        unthrottled = replace(config, min_interval=0.0, max_requests=1_000_000)
        return SyntheticMarketSource(config=unthrottled, cache=cache, clock=clock, seed=seed)

    raise ConfigurationError(
        f"Unknown data source '{kind}', expected one of {SOURCE_KINDS}",
        config_key="job.data_source",
        actual_value=kind,
    )
