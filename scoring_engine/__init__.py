"""
Scoring Engine Package.

This package computes token scores from enriched metrics.
Scores rank candidates; they are not trade signals.

Modules:
- explosion_score: Weighted explosion potential
- surge_score: Short-term surge potential
- risk_level: Score to risk label
"""

from .config import ExplosionScoreConfig, ExplosionWeights, SurgeScoreConfig
from .explosion_score import ExplosionComponents, ExplosionScorer, clamp_score
from .risk_level import RiskLevel, classify_risk
from .surge_score import SurgeScorer

__all__ = [
    # Config
    "ExplosionScoreConfig",
    "ExplosionWeights",
    "SurgeScoreConfig",
    # Scorers
    "ExplosionComponents",
    "ExplosionScorer",
    "SurgeScorer",
    "clamp_score",
    # Risk
    "RiskLevel",
    "classify_risk",
]
