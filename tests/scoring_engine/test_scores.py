"""
Tests for the Scoring Engine.

============================================================
PURPOSE
============================================================
- Scores and every component stay within [0, 100]
- Smaller caps and heavier volume score higher
- Scoring failures yield 0
- Risk classification bands

============================================================
"""

import math

import pytest

from core.exceptions import ConfigurationError
from data_processing.models import PatternMetrics, PatternType, TechnicalIndicators, VolumePattern
from data_sources.models import TokenMetrics
from scoring_engine.config import ExplosionScoreConfig, ExplosionWeights, SurgeScoreConfig
from scoring_engine.explosion_score import ExplosionScorer, bounded, clamp_score
from scoring_engine.risk_level import RiskLevel, classify_risk
from scoring_engine.surge_score import SurgeScorer
from sentiment.models import Platform, PlatformMetrics, SocialMetrics


# ============================================================
# HELPERS
# ============================================================

def token(**overrides):
    fields = {
        "id": "pepe",
        "symbol": "PEPE",
        "name": "Pepe",
        "price": 0.001,
        "market_cap": 20_000_000.0,
        "volume_24h": 4_000_000.0,
        "price_change_24h": 8.0,
        "price_change_1h": 1.0,
    }
    fields.update(overrides)
    return TokenMetrics(**fields)


def spike(ratio, pattern=PatternType.ACCUMULATION):
    return VolumePattern(
        timestamp=0,
        volume=ratio * 100,
        price=1.0,
        pattern=pattern,
        metrics=PatternMetrics(
            volume_ratio=ratio,
            price_change=0.06,
            volume_rsi=80.0,
            price_rsi=25.0,
            volume_spike=ratio > 2,
            price_momentum=True,
        ),
    )


def hot_social():
    return SocialMetrics(platforms={
        p: PlatformMetrics(mentions=50_000, sentiment=1.0, engagement=1e6, trending=True)
        for p in Platform
    })


# ============================================================
# EXPLOSION SCORE
# ============================================================

class TestExplosionScorer:

    def test_empty_token_hand_computed(self):
        # viral 30, price action 11.43, volume 0, structure 70, social 15
        score = ExplosionScorer().score(token(
            market_cap=0.0, volume_24h=0.0, price_change_24h=0.0, price_change_1h=0.0,
        ))
        assert score == pytest.approx(23.86, abs=0.01)

    def test_score_bounded_for_extreme_inputs(self):
        scorer = ExplosionScorer()
        metrics = token(
            market_cap=1.0,
            volume_24h=1e12,
            price_change_24h=5000.0,
            holders=10**9,
            top_holders_percentage=0.0,
            social_metrics=hot_social(),
            volume_patterns=[spike(50.0) for _ in range(30)],
            technical_indicators=TechnicalIndicators(
                rsi=99, macd_histogram=5, price_volatility=80,
            ),
        )

        parts = scorer.components(metrics)
        for value in parts.to_dict().values():
            assert 0.0 <= value <= 100.0
        assert scorer.score(metrics) == 100.0

    def test_score_bounded_below(self):
        metrics = token(
            market_cap=1e13,
            volume_24h=0.0,
            price_change_24h=-90.0,
            top_holders_percentage=100.0,
            technical_indicators=TechnicalIndicators(rsi=0.0),
            social_metrics=SocialMetrics(platforms={
                p: PlatformMetrics(sentiment=-1.0) for p in Platform
            }),
        )
        assert 0.0 <= ExplosionScorer().score(metrics) <= 100.0

    def test_small_cap_beats_large_cap(self):
        scorer = ExplosionScorer()
        small = token(market_cap=10_000_000.0, volume_24h=2_000_000.0)
        large = token(market_cap=10_000_000_000.0, volume_24h=2_000_000_000.0)
        assert scorer.score(small) > scorer.score(large)

    def test_active_small_cap_beats_flat_large_cap(self):
        scorer = ExplosionScorer()
        active = token(
            market_cap=10_000_000.0, volume_24h=5_000_000.0,
            price_change_24h=15.0, price_change_1h=3.0,
        )
        flat = token(
            market_cap=2_000_000_000.0, volume_24h=1_000_000.0,
            price_change_24h=0.0, price_change_1h=0.0,
        )
        assert scorer.score(active) > scorer.score(flat)
        assert SurgeScorer().score(active) > SurgeScorer().score(flat)

    def test_more_volume_scores_higher(self):
        scorer = ExplosionScorer()
        quiet = token(volume_24h=100_000.0)
        busy = token(volume_24h=10_000_000.0)
        assert scorer.score(busy) > scorer.score(quiet)

    def test_accumulation_spikes_raise_volume_profile(self):
        scorer = ExplosionScorer()
        neutral = [spike(1.5, PatternType.NEUTRAL) for _ in range(10)]
        accumulating = [spike(4.0) for _ in range(10)]
        assert scorer.volume_profile(token(volume_patterns=neutral)) == pytest.approx(20.0)
        assert scorer.volume_profile(token(volume_patterns=accumulating)) == pytest.approx(100.0)

    def test_volume_profile_uses_recent_window(self):
        config = ExplosionScoreConfig(pattern_window=5)
        patterns = [spike(4.0) for _ in range(20)] + [spike(0.5, PatternType.NEUTRAL) for _ in range(5)]
        assert ExplosionScorer(config).volume_profile(token(volume_patterns=patterns)) == 0.0

    def test_missing_top_holders_treated_as_fully_distributed(self):
        scorer = ExplosionScorer()
        assert scorer.market_structure(token(top_holders_percentage=None)) == \
            scorer.market_structure(token(top_holders_percentage=0.0))

    def test_failure_scores_zero(self):
        metrics = token(volume_patterns=[object()])
        assert ExplosionScorer().score(metrics) == 0.0

    def test_deterministic(self):
        metrics = token(social_metrics=hot_social(), volume_patterns=[spike(3.5)])
        assert ExplosionScorer().score(metrics) == ExplosionScorer().score(metrics)

    def test_clamp_score(self):
        assert clamp_score(-5) == 0.0
        assert clamp_score(150) == 100.0
        assert clamp_score(42.4567) == 42.46

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_scores_zero(self, value):
        assert clamp_score(value) == 0.0
        assert bounded(value) == 0.0

    def test_nan_rsi_does_not_inflate_price_action(self):
        scorer = ExplosionScorer()
        metrics = token(
            market_cap=2_000_000_000.0,
            technical_indicators=TechnicalIndicators(rsi=float("nan")),
        )

        assert scorer.price_action(metrics) == 0.0
        score = scorer.score(metrics)
        assert math.isfinite(score)
        assert score < scorer.score(token(market_cap=2_000_000_000.0))

    def test_infinite_engagement_stays_finite(self):
        social = SocialMetrics(platforms={
            p: PlatformMetrics(mentions=10, engagement=float("inf")) for p in Platform
        })
        metrics = token(social_metrics=social, holders=0)
        parts = ExplosionScorer().components(metrics)
        assert all(math.isfinite(v) for v in parts.to_dict().values())


class TestExplosionConfig:

    def test_weights_normalized(self):
        weights = ExplosionWeights(viral=3, price_action=2.5, volume_profile=2, market_structure=1.5, social_momentum=1)
        assert weights.total() == pytest.approx(1.0)
        assert weights.viral == pytest.approx(0.3)

    def test_zero_weights_rejected(self):
        with pytest.raises(ConfigurationError):
            ExplosionWeights(0, 0, 0, 0, 0)

    def test_non_positive_reference_rejected(self):
        with pytest.raises(ConfigurationError):
            ExplosionScoreConfig(mention_reference=0)


# ============================================================
# SURGE SCORE
# ============================================================

class TestSurgeScorer:

    def test_hand_computed_small_cap(self):
        # volume 45 (capped), momentum 3*2 + 10*0.5 = 11, band 20
        metrics = token(
            market_cap=5_000_000.0, volume_24h=2_000_000.0,
            price_change_1h=3.0, price_change_24h=10.0,
        )
        assert SurgeScorer().score(metrics) == pytest.approx(76.0)

    def test_hand_computed_large_cap(self):
        # volume 0.5 * 15 = 7.5, momentum 4 * 0.5 = 2, band 0
        metrics = token(
            market_cap=1_000_000_000.0, volume_24h=50_000_000.0,
            price_change_1h=0.0, price_change_24h=-4.0,
        )
        assert SurgeScorer().score(metrics) == pytest.approx(9.5)

    def test_momentum_capped(self):
        metrics = token(price_change_1h=-40.0, price_change_24h=90.0)
        assert SurgeScorer().momentum_component(metrics) == 35.0

    def test_non_finite_change_scores_zero_momentum(self):
        metrics = token(price_change_1h=float("nan"), price_change_24h=float("inf"))
        scorer = SurgeScorer()
        assert scorer.momentum_component(metrics) == 0.0
        assert math.isfinite(scorer.score(metrics))

    @pytest.mark.parametrize("market_cap,points", [
        (1_000_000.0, 20.0),
        (10_000_000.0, 15.0),
        (75_000_000.0, 10.0),
        (499_999_999.0, 5.0),
        (500_000_000.0, 0.0),
    ])
    def test_market_cap_bands(self, market_cap, points):
        assert SurgeScorer().market_cap_component(token(market_cap=market_cap)) == points

    def test_zero_market_cap_does_not_raise(self):
        score = SurgeScorer().score(token(market_cap=0.0))
        assert 0.0 <= score <= 100.0

    def test_unordered_bands_rejected(self):
        with pytest.raises(ConfigurationError):
            SurgeScoreConfig(market_cap_bands=((100.0, 1.0), (10.0, 2.0)))


# ============================================================
# RISK LEVEL
# ============================================================

class TestRiskLevel:

    @pytest.mark.parametrize("score,level", [
        (0.0, RiskLevel.LOW),
        (39.99, RiskLevel.LOW),
        (40.0, RiskLevel.MEDIUM),
        (60.0, RiskLevel.HIGH),
        (80.0, RiskLevel.EXTREME),
        (100.0, RiskLevel.EXTREME),
    ])
    def test_bands(self, score, level):
        assert classify_risk(score) == level
