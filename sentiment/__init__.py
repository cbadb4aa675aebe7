"""
Sentiment Package - Social metrics for scanned tokens.

Components:
- models: Platform, PlatformActivity, PlatformMetrics, SocialMetrics
- analyzers: Pluggable text sentiment scoring
- providers: Platform activity sources
- aggregator: Per-token, rate-limited, cached aggregation

Usage:
    from sentiment import SocialMetricsAggregator

    aggregator = SocialMetricsAggregator()
    metrics = await aggregator.get_social_metrics("pepe")
"""

from .aggregator import SocialMetricsAggregator, create_analyzer, virality_score
from .analyzers import (
    HttpSentimentAnalyzer,
    KeywordSentimentAnalyzer,
    SentimentAnalyzer,
)
from .base import BasePlatformSource
from .config import SocialConfig
from .exceptions import SentimentAnalysisError, SocialMetricsError
from .models import Platform, PlatformActivity, PlatformMetrics, SocialMetrics
from .providers import SimulatedPlatformSource


__all__ = [
    # Aggregation
    "SocialMetricsAggregator",
    "create_analyzer",
    "virality_score",
    # Analyzers
    "SentimentAnalyzer",
    "KeywordSentimentAnalyzer",
    "HttpSentimentAnalyzer",
    # Sources
    "BasePlatformSource",
    "SimulatedPlatformSource",
    # Config
    "SocialConfig",
    # Models
    "Platform",
    "PlatformActivity",
    "PlatformMetrics",
    "SocialMetrics",
    # Exceptions
    "SentimentAnalysisError",
    "SocialMetricsError",
]
