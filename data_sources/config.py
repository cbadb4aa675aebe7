"""
Data Sources - Configuration.

============================================================
CONFIGURABLE FETCH DISCIPLINE
============================================================

- Upstream location and credentials
- Request window and spacing
- Retry, backoff and timeout
- Circuit breaker threshold and cooldown
- Discovery query shapes

Values are composed and overridden by orchestrator.config.

============================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.exceptions import ConfigurationError


# =============================================================
# FETCH CLIENT
# =============================================================


@dataclass
class FetchConfig:
    """Rate limit, retry and memoization settings for the fetch client."""
    base_url: str = "https://api.coingecko.com/api/v3"
    api_key: Optional[str] = None
    vs_currency: str = "usd"

    # Window limiter
    max_requests: int = 10
    window_seconds: float = 60.0
    min_interval: float = 2.0

    # Retry
    max_retries: int = 3
    backoff_base: float = 1.0
    backoff_factor: float = 2.0
    backoff_max: float = 30.0
    jitter: float = 0.5
    timeout: float = 10.0

    # Circuit breaker (discovery path)
    circuit_threshold: int = 3
    circuit_cooldown: float = 60.0

    # Response memoization
    response_ttl: float = 60.0

    # History
    chart_days: int = 7

    def __post_init__(self) -> None:
        positive = {
            "max_requests": self.max_requests,
            "window_seconds": self.window_seconds,
            "timeout": self.timeout,
            "circuit_threshold": self.circuit_threshold,
            "circuit_cooldown": self.circuit_cooldown,
            "response_ttl": self.response_ttl,
            "chart_days": self.chart_days,
            "backoff_factor": self.backoff_factor,
        }
        for key, value in positive.items():
            if value <= 0:
                raise ConfigurationError(
                    f"{key} must be positive",
                    config_key=f"fetch.{key}",
                    actual_value=value,
                )
        non_negative = {
            "min_interval": self.min_interval,
            "max_retries": self.max_retries,
            "backoff_base": self.backoff_base,
            "backoff_max": self.backoff_max,
            "jitter": self.jitter,
        }
        for key, value in non_negative.items():
            if value < 0:
                raise ConfigurationError(
                    f"{key} must be non-negative",
                    config_key=f"fetch.{key}",
                    actual_value=value,
                )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_url": self.base_url,
            "api_key_set": bool(self.api_key),
            "vs_currency": self.vs_currency,
            "max_requests": self.max_requests,
            "window_seconds": self.window_seconds,
            "min_interval": self.min_interval,
            "max_retries": self.max_retries,
            "timeout": self.timeout,
            "circuit_threshold": self.circuit_threshold,
            "circuit_cooldown": self.circuit_cooldown,
            "response_ttl": self.response_ttl,
        }


# =============================================================
# DISCOVERY
# =============================================================


@dataclass
class DiscoveryConfig:
    """Query shapes for the four discovery sources."""
    per_page: int = 250
    high_volume_per_page: int = 100
    volume_ratio_threshold: float = 0.3
    recency_hours: float = 48.0
    new_listings_category: str = "new-tokens"
    max_tokens: Optional[int] = None

    def __post_init__(self) -> None:
        if self.per_page <= 0 or self.high_volume_per_page <= 0:
            raise ConfigurationError(
                "page sizes must be positive",
                config_key="discovery.per_page",
                actual_value=self.per_page,
            )
        if self.recency_hours <= 0:
            raise ConfigurationError(
                "recency_hours must be positive",
                config_key="discovery.recency_hours",
                actual_value=self.recency_hours,
            )
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ConfigurationError(
                "max_tokens must be positive when set",
                config_key="discovery.max_tokens",
                actual_value=self.max_tokens,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "per_page": self.per_page,
            "high_volume_per_page": self.high_volume_per_page,
            "volume_ratio_threshold": self.volume_ratio_threshold,
            "recency_hours": self.recency_hours,
            "new_listings_category": self.new_listings_category,
            "max_tokens": self.max_tokens,
        }
