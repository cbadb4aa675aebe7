"""
Synthetic Market Data Source - Offline CoinGecko-shaped payloads.

Generates a seeded token universe and answers the same endpoints as
the live adapter. The same seed always produces the same universe and
the same per-token history, so runs are reproducible without network.
"""

import logging
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List

from data_sources.base import BaseMarketDataSource
from data_sources.exceptions import UpstreamError
from data_sources.models import Endpoint


logger = logging.getLogger(__name__)


_SYLLABLES = [
    "moon", "pepe", "doge", "floki", "shib", "bonk", "wojak", "frog",
    "rocket", "inu", "cat", "ape", "based", "giga", "turbo", "meme",
]


@dataclass(frozen=True)
class _SyntheticToken:
    id: str
    symbol: str
    name: str
    price: float
    market_cap: float
    total_volume: float
    change_24h: float
    change_1h: float
    listed_hours_ago: float
    new_listing: bool


class SyntheticMarketSource(BaseMarketDataSource):
    """
    Deterministic in-process market data source.

    Usage:
        source = SyntheticMarketSource(seed=7)
        rows = await source.get_markets(order="volume_desc", per_page=50)
    """

    DEFAULT_UNIVERSE_SIZE = 60
    TRENDING_COUNT = 7

    def __init__(
        self,
        *args: Any,
        seed: int = 42,
        universe_size: int = DEFAULT_UNIVERSE_SIZE,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        if universe_size <= 0:
            raise ValueError("universe_size must be positive")
        self._seed = seed
        self._universe = self._build_universe(seed, universe_size)
        self._by_id = {t.id: t for t in self._universe}

    @property
    def name(self) -> str:
        return "synthetic"

    @property
    def token_ids(self) -> List[str]:
        return [t.id for t in self._universe]

    # ─────────────────────────────────────────────────────────────
    # Universe
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def _build_universe(seed: int, size: int) -> List[_SyntheticToken]:
        rng = random.Random(seed)
        tokens = []
        for i in range(size):
            stem = rng.choice(_SYLLABLES) + rng.choice(_SYLLABLES)
            market_cap = 10 ** rng.uniform(5.5, 10.0)
            new_listing = rng.random() < 0.2
            tokens.append(_SyntheticToken(
                id=f"{stem}-{i}",
                symbol=stem[:5].upper(),
                name=stem.capitalize(),
                price=10 ** rng.uniform(-6, 2),
                market_cap=market_cap,
                total_volume=market_cap * rng.uniform(0.01, 0.8),
                change_24h=rng.uniform(-30.0, 60.0),
                change_1h=rng.uniform(-8.0, 12.0),
                listed_hours_ago=rng.uniform(1, 96) if new_listing else rng.uniform(500, 20000),
                new_listing=new_listing,
            ))
        return tokens

    def _row(self, token: _SyntheticToken) -> Dict[str, Any]:
        atl_date = self._clock.now() - timedelta(hours=token.listed_hours_ago)
        return {
            "id": token.id,
            "symbol": token.symbol.lower(),
            "name": token.name,
            "current_price": token.price,
            "market_cap": token.market_cap,
            "total_volume": token.total_volume,
            "price_change_percentage_24h": token.change_24h,
            "price_change_percentage_1h_in_currency": token.change_1h,
            "atl_date": atl_date.isoformat().replace("+00:00", "Z"),
        }

    # ─────────────────────────────────────────────────────────────
    # Endpoint emulation
    # ─────────────────────────────────────────────────────────────

    async def _request(self, endpoint: str, params: Dict[str, Any]) -> Any:
        if endpoint == Endpoint.MARKETS:
            return self._markets(params)
        if endpoint == Endpoint.TRENDING:
            return self._trending()
        if endpoint == Endpoint.GLOBAL:
            return self._global()
        if endpoint.startswith("/coins/") and endpoint.endswith("/market_chart"):
            token_id = endpoint[len("/coins/"):-len("/market_chart")]
            return self._market_chart(token_id, int(params.get("days", self._config.chart_days)))
        raise UpstreamError(
            f"Unknown endpoint {endpoint}",
            source_name=self.name,
            status_code=404,
            url=endpoint,
        )

    def _markets(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        tokens = list(self._universe)

        ids = params.get("ids")
        if ids:
            wanted = set(str(ids).split(","))
            tokens = [t for t in tokens if t.id in wanted]
        if params.get("category") == "new-tokens":
            tokens = [t for t in tokens if t.new_listing]

        order = params.get("order", "market_cap_desc")
        if order == "volume_desc":
            tokens.sort(key=lambda t: t.total_volume, reverse=True)
        elif order == "id_asc":
            tokens.sort(key=lambda t: t.id)
        else:
            tokens.sort(key=lambda t: t.market_cap, reverse=True)

        per_page = int(params.get("per_page", 100))
        page = max(1, int(params.get("page", 1)))
        start = (page - 1) * per_page
        return [self._row(t) for t in tokens[start:start + per_page]]

    def _trending(self) -> Dict[str, Any]:
        rng = random.Random(f"{self._seed}:trending")
        picks = rng.sample(self._universe, min(self.TRENDING_COUNT, len(self._universe)))
        return {
            "coins": [
                {"item": {"id": t.id, "symbol": t.symbol, "name": t.name, "score": rank}}
                for rank, t in enumerate(picks)
            ]
        }

    def _global(self) -> Dict[str, Any]:
        currency = self._config.vs_currency
        total_cap = sum(t.market_cap for t in self._universe)
        total_volume = sum(t.total_volume for t in self._universe)
        weighted_change = sum(t.change_24h * t.market_cap for t in self._universe) / total_cap
        return {
            "data": {
                "active_cryptocurrencies": len(self._universe),
                "total_market_cap": {currency: total_cap},
                "total_volume": {currency: total_volume},
                f"market_cap_change_percentage_24h_{currency}": weighted_change,
            }
        }

    def _market_chart(self, token_id: str, days: int) -> Dict[str, Any]:
        token = self._by_id.get(token_id)
        if token is None:
            raise UpstreamError(
                f"Unknown coin {token_id}",
                source_name=self.name,
                status_code=404,
                url=Endpoint.market_chart(token_id),
            )

        rng = random.Random(f"{self._seed}:{token_id}")
        points = max(2, days * 24)
        hour_ms = 3_600_000
        end_ms = (self._clock.timestamp_ms() // hour_ms) * hour_ms
        base_volume = token.total_volume / 24

        prices: List[List[float]] = []
        volumes: List[List[float]] = []
        price = token.price
        for i in range(points):
            ts = end_ms - (points - 1 - i) * hour_ms
            price = max(price * (1 + rng.gauss(0, 0.03)), 1e-12)
            spike = rng.uniform(2.5, 6.0) if rng.random() < 0.05 else 1.0
            volume = base_volume * rng.uniform(0.5, 1.5) * spike
            prices.append([ts, price])
            volumes.append([ts, volume])

        return {"prices": prices, "total_volumes": volumes}

