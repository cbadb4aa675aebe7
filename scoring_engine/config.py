"""
Scoring Engine - Configuration.

============================================================
CONFIGURABLE SCORING
============================================================

- Component weights (normalized to 1.0)
- Reference levels that map raw inputs onto 0-100
- Market cap bands for the surge score

============================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Tuple

from core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


# =============================================================
# EXPLOSION SCORE
# =============================================================


@dataclass
class ExplosionWeights:
    """
    Weights for each explosion component.

    All weights must sum to 1.0 for proper scoring.
    """
    viral: float = 0.30
    price_action: float = 0.25
    volume_profile: float = 0.20
    market_structure: float = 0.15
    social_momentum: float = 0.10

    def __post_init__(self) -> None:
        total = self.total()
        if total <= 0:
            raise ConfigurationError(
                "explosion weights must sum to a positive value",
                config_key="explosion.weights",
                actual_value=total,
            )
        if abs(total - 1.0) > 0.001:
            logger.warning(f"Explosion weights sum to {total}, normalizing to 1.0")
            self._normalize()

    def total(self) -> float:
        return (
            self.viral +
            self.price_action +
            self.volume_profile +
            self.market_structure +
            self.social_momentum
        )

    def _normalize(self) -> None:
        total = self.total()
        self.viral /= total
        self.price_action /= total
        self.volume_profile /= total
        self.market_structure /= total
        self.social_momentum /= total

    def to_dict(self) -> Dict[str, float]:
        return {
            "viral": self.viral,
            "price_action": self.price_action,
            "volume_profile": self.volume_profile,
            "market_structure": self.market_structure,
            "social_momentum": self.social_momentum,
        }


@dataclass
class ExplosionScoreConfig:
    """Reference levels for the explosion score components."""
    weights: ExplosionWeights = field(default_factory=ExplosionWeights)

    small_cap_threshold: float = 50_000_000.0   # $50M
    small_cap_bonus: float = 30.0
    engagement_reference: float = 10_000.0
    mention_reference: float = 5_000.0
    momentum_reference: float = 20.0            # percent 24h change
    rsi_overbought: float = 70.0
    volume_multiplier: float = 3.0
    pattern_window: int = 24
    holders_reference: float = 1_000.0

    def __post_init__(self) -> None:
        for key in (
            "small_cap_threshold",
            "engagement_reference",
            "mention_reference",
            "momentum_reference",
            "volume_multiplier",
            "pattern_window",
            "holders_reference",
        ):
            value = getattr(self, key)
            if value <= 0:
                raise ConfigurationError(
                    f"{key} must be positive",
                    config_key=f"explosion.{key}",
                    actual_value=value,
                )

    def to_dict(self) -> Dict:
        return {
            "weights": self.weights.to_dict(),
            "small_cap_threshold": self.small_cap_threshold,
            "small_cap_bonus": self.small_cap_bonus,
            "engagement_reference": self.engagement_reference,
            "mention_reference": self.mention_reference,
            "momentum_reference": self.momentum_reference,
            "volume_multiplier": self.volume_multiplier,
            "pattern_window": self.pattern_window,
            "rsi_overbought": self.rsi_overbought,
            "holders_reference": self.holders_reference,
        }


# =============================================================
# SURGE SCORE
# =============================================================


@dataclass
class SurgeScoreConfig:
    """Caps and bands for the short-term surge score."""
    volume_cap: float = 45.0
    normal_volume_ratio: float = 0.1    # daily volume / market cap
    volume_points_per_ratio: float = 15.0

    momentum_cap: float = 35.0
    hour_change_weight: float = 2.0
    day_change_weight: float = 0.5

    # (upper market cap bound, points), checked in order
    market_cap_bands: Tuple[Tuple[float, float], ...] = (
        (10_000_000.0, 20.0),
        (50_000_000.0, 15.0),
        (100_000_000.0, 10.0),
        (500_000_000.0, 5.0),
    )

    def __post_init__(self) -> None:
        if self.normal_volume_ratio <= 0:
            raise ConfigurationError(
                "normal_volume_ratio must be positive",
                config_key="surge.normal_volume_ratio",
                actual_value=self.normal_volume_ratio,
            )
        self.market_cap_bands = tuple(
            (float(bound), float(points)) for bound, points in self.market_cap_bands
        )
        bounds = [b for b, _ in self.market_cap_bands]
        if bounds != sorted(bounds):
            raise ConfigurationError(
                "market_cap_bands must be ordered by bound",
                config_key="surge.market_cap_bands",
                actual_value=bounds,
            )

    def to_dict(self) -> Dict:
        return {
            "volume_cap": self.volume_cap,
            "normal_volume_ratio": self.normal_volume_ratio,
            "momentum_cap": self.momentum_cap,
            "market_cap_bands": [list(b) for b in self.market_cap_bands],
        }
