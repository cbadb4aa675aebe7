"""
Data Processing Package.

This package turns raw market history into the inputs the
scoring engine consumes.

Main modules:
- indicators: Moving average, RSI, EMA/MACD, volatility
- volume_patterns: Accumulation/distribution classification
- models: VolumePattern and TechnicalIndicators contracts
"""

from .config import VolumeAnalyzerConfig
from .models import (
    PatternMetrics,
    PatternType,
    TechnicalIndicators,
    VolumePattern,
)
from .volume_patterns import VolumePatternAnalyzer

__all__ = [
    # Config
    "VolumeAnalyzerConfig",
    # Models
    "PatternMetrics",
    "PatternType",
    "TechnicalIndicators",
    "VolumePattern",
    # Analyzer
    "VolumePatternAnalyzer",
]
