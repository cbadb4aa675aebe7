"""
Scoring Engine - Surge Score.

Short-term surge potential out of 100:
- Volume spike (up to 45): daily volume against a normal 10% of cap
- Momentum (up to 35): absolute 1h and 24h moves
- Market cap band (up to 20): smaller caps move harder
"""

import logging
from typing import Optional

from data_processing.indicators import safe_div
from data_sources.models import TokenMetrics

from .config import SurgeScoreConfig
from .explosion_score import bounded, clamp_score


logger = logging.getLogger(__name__)


class SurgeScorer:
    """Immediate surge potential score."""

    def __init__(self, config: Optional[SurgeScoreConfig] = None) -> None:
        self._config = config or SurgeScoreConfig()

    def score(self, metrics: TokenMetrics) -> float:
        try:
            total = (
                self.volume_component(metrics) +
                self.momentum_component(metrics) +
                self.market_cap_component(metrics)
            )
            return clamp_score(total)
        except Exception as e:
            logger.error(f"[surge] Scoring failed token={metrics.id}: {e}", exc_info=True)
            return 0.0

    def volume_component(self, m: TokenMetrics) -> float:
        cfg = self._config
        spike = safe_div(m.volume_24h, m.market_cap) / cfg.normal_volume_ratio
        return bounded(spike * cfg.volume_points_per_ratio, cfg.volume_cap)

    def momentum_component(self, m: TokenMetrics) -> float:
        cfg = self._config
        move = (
            abs(m.price_change_1h) * cfg.hour_change_weight +
            abs(m.price_change_24h) * cfg.day_change_weight
        )
        return bounded(move, cfg.momentum_cap)

    def market_cap_component(self, m: TokenMetrics) -> float:
        for bound, points in self._config.market_cap_bands:
            if m.market_cap < bound:
                return points
        return 0.0
