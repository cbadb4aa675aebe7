"""
Data Processing Models - Volume pattern and indicator structures.

Produced only by the volume pattern analyzer; consumed by the scoring engine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class PatternType(Enum):
    """Behavioural classification of one time step."""
    ACCUMULATION = "accumulation"
    DISTRIBUTION = "distribution"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class PatternMetrics:
    """Per-step measurements behind a pattern classification."""
    volume_ratio: float
    price_change: float
    volume_rsi: float
    price_rsi: float
    volume_spike: bool
    price_momentum: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "volume_ratio": self.volume_ratio,
            "price_change": self.price_change,
            "volume_rsi": self.volume_rsi,
            "price_rsi": self.price_rsi,
            "volume_spike": self.volume_spike,
            "price_momentum": self.price_momentum,
        }


@dataclass(frozen=True)
class VolumePattern:
    """
    Classified volume/price observation.

    timestamp is epoch milliseconds, copied from the analyzer input.
    """
    timestamp: int
    volume: float
    price: float
    pattern: PatternType
    metrics: PatternMetrics

    @property
    def is_accumulation(self) -> bool:
        return self.pattern == PatternType.ACCUMULATION

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "volume": self.volume,
            "price": self.price,
            "pattern": self.pattern.value,
            "metrics": self.metrics.to_dict(),
        }


@dataclass(frozen=True)
class TechnicalIndicators:
    """Numeric summaries of a price/volume history."""
    rsi: float = 50.0
    macd_signal: float = 0.0
    macd_histogram: float = 0.0
    volume_profile: float = 0.0
    price_volatility: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "rsi": self.rsi,
            "macd_signal": self.macd_signal,
            "macd_histogram": self.macd_histogram,
            "volume_profile": self.volume_profile,
            "price_volatility": self.price_volatility,
        }
