"""
Scoring Engine - Risk Level.

Maps a 0-100 score onto a coarse risk label.
"""

from enum import Enum


class RiskLevel(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


# Lower bounds, highest first
RISK_THRESHOLDS = (
    (80.0, RiskLevel.EXTREME),
    (60.0, RiskLevel.HIGH),
    (40.0, RiskLevel.MEDIUM),
)


def classify_risk(score: float) -> RiskLevel:
    for threshold, level in RISK_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.LOW
