"""
Data Source Models - Token market data structures.

TokenMetrics is the record carried through a scan: created from
market data, then enriched with social, pattern and score fields.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from data_processing.models import TechnicalIndicators, VolumePattern
from sentiment.models import SocialMetrics


class Endpoint:
    """Upstream endpoints (CoinGecko v3 shape)."""
    MARKETS = "/coins/markets"
    TRENDING = "/search/trending"
    GLOBAL = "/global"
    MARKET_CHART = "/coins/{id}/market_chart"

    @classmethod
    def market_chart(cls, token_id: str) -> str:
        return cls.MARKET_CHART.format(id=token_id)


@dataclass
class MarketSeries:
    """Hourly history; the three lists are index-aligned."""
    timestamps: List[int] = field(default_factory=list)
    volumes: List[float] = field(default_factory=list)
    prices: List[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not (len(self.timestamps) == len(self.volumes) == len(self.prices)):
            raise ValueError(
                f"MarketSeries length mismatch: timestamps={len(self.timestamps)} "
                f"volumes={len(self.volumes)} prices={len(self.prices)}"
            )

    def __len__(self) -> int:
        return len(self.timestamps)

    @classmethod
    def from_market_chart(cls, payload: dict[str, Any]) -> "MarketSeries":
        """
        Build from a market_chart payload.

        ``prices`` and ``total_volumes`` are ``[[ts_ms, value], ...]``
        lists; points are paired by position and truncated to the
        shorter list.
        """
        prices = payload.get("prices") or []
        volumes = payload.get("total_volumes") or []
        size = min(len(prices), len(volumes))
        return cls(
            timestamps=[int(prices[i][0]) for i in range(size)],
            volumes=[float(volumes[i][1] or 0.0) for i in range(size)],
            prices=[float(prices[i][1] or 0.0) for i in range(size)],
        )


@dataclass
class TokenMetrics:
    """Market, social and score data for one token."""
    id: str
    symbol: str
    name: str
    price: float = 0.0
    market_cap: float = 0.0
    volume_24h: float = 0.0
    price_change_24h: float = 0.0
    price_change_1h: float = 0.0
    holders: int = 0
    top_holders_percentage: Optional[float] = None

    social_metrics: SocialMetrics = field(default_factory=SocialMetrics)
    volume_patterns: List[VolumePattern] = field(default_factory=list)
    technical_indicators: TechnicalIndicators = field(default_factory=TechnicalIndicators)
    history: MarketSeries = field(default_factory=MarketSeries)

    explosion_score: Optional[float] = None
    surge_score: Optional[float] = None
    risk_level: Optional[str] = None

    def __post_init__(self) -> None:
        if self.holders < 0:
            raise ValueError(f"holders must be >= 0, got {self.holders}")

    @classmethod
    def from_market_row(cls, row: dict[str, Any]) -> "TokenMetrics":
        """Build from one ``/coins/markets`` row; missing numbers read as 0."""
        return cls(
            id=row["id"],
            symbol=(row.get("symbol") or "").upper(),
            name=row.get("name") or row["id"],
            price=float(row.get("current_price") or 0.0),
            market_cap=float(row.get("market_cap") or 0.0),
            volume_24h=float(row.get("total_volume") or 0.0),
            price_change_24h=float(row.get("price_change_percentage_24h") or 0.0),
            price_change_1h=float(row.get("price_change_percentage_1h_in_currency") or 0.0),
        )

    def to_dict(self, include_history: bool = False) -> dict[str, Any]:
        data = {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "market_cap": self.market_cap,
            "volume_24h": self.volume_24h,
            "price_change_24h": self.price_change_24h,
            "price_change_1h": self.price_change_1h,
            "holders": self.holders,
            "top_holders_percentage": self.top_holders_percentage,
            "social_metrics": self.social_metrics.to_dict(),
            "volume_patterns": [p.to_dict() for p in self.volume_patterns],
            "technical_indicators": self.technical_indicators.to_dict(),
            "explosion_score": self.explosion_score,
            "surge_score": self.surge_score,
            "risk_level": self.risk_level,
        }
        if include_history:
            data["history"] = {
                "timestamps": list(self.history.timestamps),
                "volumes": list(self.history.volumes),
                "prices": list(self.history.prices),
            }
        return data


@dataclass
class MarketOverview:
    """Whole-market summary from ``/global``, in ``vs_currency``."""
    active_tokens: int = 0
    total_market_cap: float = 0.0
    total_volume: float = 0.0
    market_cap_change_24h: float = 0.0

    @classmethod
    def from_global(cls, data: dict[str, Any], vs_currency: str = "usd") -> "MarketOverview":
        """Build from the ``data`` object of ``/global``; missing numbers read as 0."""
        return cls(
            active_tokens=int(data.get("active_cryptocurrencies") or 0),
            total_market_cap=float((data.get("total_market_cap") or {}).get(vs_currency) or 0.0),
            total_volume=float((data.get("total_volume") or {}).get(vs_currency) or 0.0),
            market_cap_change_24h=float(
                data.get(f"market_cap_change_percentage_24h_{vs_currency}") or 0.0
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "active_tokens": self.active_tokens,
            "total_market_cap": self.total_market_cap,
            "total_volume": self.total_volume,
            "market_cap_change_24h": self.market_cap_change_24h,
        }
