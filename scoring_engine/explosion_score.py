"""
Scoring Engine - Explosion Score.

============================================================
RESPONSIBILITY
============================================================
Estimates a token's potential for an outsized price move.

- Viral potential: small cap, volume intensity, engagement
- Price action: 24h momentum and technical confirmation
- Volume profile: recent accumulation spikes and volume ratios
- Market structure: holder distribution and cap headroom
- Social momentum: mentions, sentiment and trending flags

============================================================
DESIGN PRINCIPLES
============================================================
- Pure function of TokenMetrics
- Every component lands in [0, 100]
- Zero or non-finite denominators fall back to 0
- A scoring failure yields 0, never an exception

============================================================
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from data_processing.indicators import safe_div
from data_sources.models import TokenMetrics

from .config import ExplosionScoreConfig


logger = logging.getLogger(__name__)


def bounded(value: float, upper: float = 100.0) -> float:
    """Clamp into [0, upper]; NaN and infinities read as 0."""
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(upper, value))


def clamp_score(value: float) -> float:
    """Clamp into [0, 100] and round to 2 decimals."""
    return round(bounded(value), 2)


@dataclass(frozen=True)
class ExplosionComponents:
    viral: float
    price_action: float
    volume_profile: float
    market_structure: float
    social_momentum: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "viral": self.viral,
            "price_action": self.price_action,
            "volume_profile": self.volume_profile,
            "market_structure": self.market_structure,
            "social_momentum": self.social_momentum,
        }


class ExplosionScorer:
    """
    Weighted explosion potential score.

    Usage:
        scorer = ExplosionScorer()
        metrics.explosion_score = scorer.score(metrics)
    """

    def __init__(self, config: Optional[ExplosionScoreConfig] = None) -> None:
        self._config = config or ExplosionScoreConfig()

    def score(self, metrics: TokenMetrics) -> float:
        try:
            parts = self.components(metrics)
            w = self._config.weights
            total = (
                parts.viral * w.viral +
                parts.price_action * w.price_action +
                parts.volume_profile * w.volume_profile +
                parts.market_structure * w.market_structure +
                parts.social_momentum * w.social_momentum
            )
            return clamp_score(total)
        except Exception as e:
            logger.error(f"[explosion] Scoring failed token={metrics.id}: {e}", exc_info=True)
            return 0.0

    def components(self, metrics: TokenMetrics) -> ExplosionComponents:
        return ExplosionComponents(
            viral=self.viral_potential(metrics),
            price_action=self.price_action(metrics),
            volume_profile=self.volume_profile(metrics),
            market_structure=self.market_structure(metrics),
            social_momentum=self.social_momentum(metrics),
        )

    # ─────────────────────────────────────────────────────────────
    # Components
    # ─────────────────────────────────────────────────────────────

    def viral_potential(self, m: TokenMetrics) -> float:
        cfg = self._config
        bonus = cfg.small_cap_bonus if m.market_cap < cfg.small_cap_threshold else 0.0
        intensity = bounded(safe_div(m.volume_24h, m.market_cap) * 100)

        platforms = m.social_metrics.values()
        engagement = sum(
            bounded(p.engagement / cfg.engagement_reference * 100) for p in platforms
        ) / len(platforms)

        return bounded(bonus + intensity * 0.4 + engagement * 0.3)

    def price_action(self, m: TokenMetrics) -> float:
        cfg = self._config
        change = m.price_change_24h
        if change > cfg.momentum_reference:
            momentum = 100.0
        elif change > 0:
            momentum = change / cfg.momentum_reference * 100
        else:
            momentum = 0.0

        ti = m.technical_indicators
        rsi_score = 100.0 if ti.rsi > cfg.rsi_overbought else ti.rsi / 0.7
        technical = (
            rsi_score * 0.4 +
            (100.0 if ti.macd_histogram > 0 else 0.0) * 0.3 +
            (100.0 if ti.price_volatility > 0 else 0.0) * 0.3
        )
        return bounded(momentum * 0.6 + technical * 0.4)

    def volume_profile(self, m: TokenMetrics) -> float:
        recent = m.volume_patterns[-self._config.pattern_window:]
        if not recent:
            return 0.0

        accumulation = sum(1 for p in recent if p.is_accumulation and p.metrics.volume_spike)

        trend = 0.0
        for p in recent:
            if p.metrics.volume_ratio > self._config.volume_multiplier:
                trend += 100.0
            elif p.metrics.volume_ratio > 1:
                trend += 50.0
        trend /= len(recent)

        return bounded(accumulation / len(recent) * 100 * 0.6 + trend * 0.4)

    def market_structure(self, m: TokenMetrics) -> float:
        cfg = self._config
        distribution = max(0.0, 100.0 - (m.top_holders_percentage or 0.0))
        holders = bounded(m.holders / cfg.holders_reference * 10)
        if m.market_cap < cfg.small_cap_threshold:
            headroom = 100.0
        else:
            headroom = max(0.0, 100.0 - m.market_cap / cfg.small_cap_threshold * 100)

        return bounded(distribution * 0.4 + holders * 0.3 + headroom * 0.3)

    def social_momentum(self, m: TokenMetrics) -> float:
        cfg = self._config
        platforms = m.social_metrics.values()
        total = 0.0
        for p in platforms:
            mentions = bounded(p.mentions / cfg.mention_reference * 100)
            sentiment = (p.sentiment + 1) / 2 * 100
            trending = 100.0 if p.trending else 0.0
            total += mentions * 0.4 + sentiment * 0.3 + trending * 0.3
        return bounded(total / len(platforms))
