"""
Sentiment - Configuration.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.exceptions import ConfigurationError


KEYWORD_ANALYZER = "keyword"
HTTP_ANALYZER = "http"


@dataclass
class SocialConfig:
    """Per-platform rate limits, caching and sentiment strategy."""
    # Per-platform window limiter
    max_requests: int = 10
    window_seconds: float = 60.0
    min_interval: float = 0.0

    cache_ttl: float = 300.0    # per token
    viral_rate: float = 0.1     # engagement per mention considered viral

    # Sentiment strategy
    analyzer: str = KEYWORD_ANALYZER
    sentiment_url: Optional[str] = None
    sentiment_api_key: Optional[str] = None
    sentiment_timeout: float = 10.0

    seed: int = 42              # simulated platform sources

    def __post_init__(self) -> None:
        if self.max_requests <= 0 or self.window_seconds <= 0:
            raise ConfigurationError(
                "social limiter capacity and window must be positive",
                config_key="social.max_requests",
                actual_value=self.max_requests,
            )
        if self.cache_ttl <= 0:
            raise ConfigurationError(
                "cache_ttl must be positive",
                config_key="social.cache_ttl",
                actual_value=self.cache_ttl,
            )
        if self.viral_rate <= 0:
            raise ConfigurationError(
                "viral_rate must be positive",
                config_key="social.viral_rate",
                actual_value=self.viral_rate,
            )
        if self.analyzer not in (KEYWORD_ANALYZER, HTTP_ANALYZER):
            raise ConfigurationError(
                f"Unknown sentiment analyzer '{self.analyzer}'",
                config_key="social.analyzer",
                actual_value=self.analyzer,
            )
        if self.analyzer == HTTP_ANALYZER and not self.sentiment_url:
            raise ConfigurationError(
                "sentiment_url is required for the http analyzer",
                config_key="social.sentiment_url",
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_requests": self.max_requests,
            "window_seconds": self.window_seconds,
            "min_interval": self.min_interval,
            "cache_ttl": self.cache_ttl,
            "viral_rate": self.viral_rate,
            "analyzer": self.analyzer,
            "sentiment_url": self.sentiment_url,
        }
