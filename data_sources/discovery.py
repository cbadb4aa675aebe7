"""
Token Discovery - Candidate token set for one scan.

============================================================
RESPONSIBILITY
============================================================
Queries four upstream views concurrently and unions the ids.

- Trending coins
- New listings within the recency window
- High volume relative to market cap
- General listing, top N by volume

Trending, new and high-volume are best effort: a failure is
logged and contributes nothing. The general listing is the
backbone of a run; its failure is fatal.

============================================================
"""

import asyncio
import logging
from typing import Dict, Optional, Set

from core.clock import ClockProtocol, SystemClock, parse_iso8601
from core.exceptions import DiscoveryFatalError

from data_sources.base import BaseMarketDataSource
from data_sources.config import DiscoveryConfig


logger = logging.getLogger(__name__)


class TokenDiscovery:
    """
    Discovers candidate token ids.

    Usage:
        discovery = TokenDiscovery(source)
        token_ids = await discovery.discover()
    """

    def __init__(
        self,
        source: BaseMarketDataSource,
        config: Optional[DiscoveryConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._source = source
        self._config = config or DiscoveryConfig()
        self._clock = clock or SystemClock()
        self._last_counts: Dict[str, int] = {}

    @property
    def last_counts(self) -> Dict[str, int]:
        """Per-source counts of the most recent discover() call."""
        return dict(self._last_counts)

    async def discover(self) -> Set[str]:
        """
        Union of all discovery sources.

        Raises:
            DiscoveryFatalError: the general listing failed
        """
        trending, new, high_volume, general = await asyncio.gather(
            self.trending(),
            self.new_listings(),
            self.high_volume(),
            self.general_listing(),
            return_exceptions=True,
        )

        if isinstance(general, BaseException):
            logger.error(f"[discovery] General listing failed: {general}")
            raise DiscoveryFatalError(
                f"General token listing failed: {general}",
                cause=general,
            )

        trending = self._tolerate("trending", trending)
        new = self._tolerate("new_listings", new)
        high_volume = self._tolerate("high_volume", high_volume)

        tokens = trending | new | high_volume | general
        if self._config.max_tokens is not None and len(tokens) > self._config.max_tokens:
            tokens = set(sorted(tokens)[:self._config.max_tokens])

        self._last_counts = {
            "trending": len(trending),
            "new_listings": len(new),
            "high_volume": len(high_volume),
            "general": len(general),
            "total_unique": len(tokens),
        }
        logger.info(
            f"[discovery] Completed: trending={len(trending)} new={len(new)} "
            f"high_volume={len(high_volume)} general={len(general)} "
            f"unique={len(tokens)}"
        )
        return tokens

    @staticmethod
    def _tolerate(label: str, result: object) -> Set[str]:
        if isinstance(result, BaseException):
            logger.warning(f"[discovery] {label} unavailable: {result}")
            return set()
        return result

    # ─────────────────────────────────────────────────────────────
    # Sources
    # ─────────────────────────────────────────────────────────────

    async def trending(self) -> Set[str]:
        return set(await self._source.get_trending(guarded=True))

    async def new_listings(self) -> Set[str]:
        """Category listing filtered to tokens first seen within the window."""
        rows = await self._source.get_markets(
            guarded=True,
            order="id_asc",
            per_page=self._config.per_page,
            category=self._config.new_listings_category,
            sparkline="false",
        )
        now = self._clock.now()
        max_age = self._config.recency_hours * 3600

        ids = set()
        for row in rows:
            listed = row.get("atl_date")
            if not listed:
                continue
            try:
                age = (now - parse_iso8601(listed)).total_seconds()
            except ValueError:
                logger.debug(f"[discovery] Unparseable atl_date for {row.get('id')}: {listed}")
                continue
            if age <= max_age:
                ids.add(row["id"])
        return ids

    async def high_volume(self) -> Set[str]:
        """Tokens trading a large share of their market cap."""
        rows = await self._source.get_markets(
            guarded=True,
            order="volume_desc",
            per_page=self._config.high_volume_per_page,
            sparkline="false",
            price_change_percentage="24h",
        )
        ids = set()
        for row in rows:
            market_cap = row.get("market_cap") or 0
            if market_cap <= 0:
                continue
            if (row.get("total_volume") or 0) / market_cap > self._config.volume_ratio_threshold:
                ids.add(row["id"])
        return ids

    async def general_listing(self) -> Set[str]:
        rows = await self._source.get_markets(
            guarded=True,
            order="volume_desc",
            per_page=self._config.per_page,
            page=1,
            sparkline="false",
        )
        return {row["id"] for row in rows}
