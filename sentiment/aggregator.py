"""
Social Metrics Aggregator - Per-token metrics across platforms.

============================================================
RESPONSIBILITY
============================================================
Builds SocialMetrics for one token.

- Queries every platform source concurrently
- Each platform has its own window rate limiter
- Scores post text with the configured SentimentAnalyzer
- Derives virality from engagement per mention
- Caches the assembled metrics per token

All-or-nothing: if any platform fails, the call raises
SocialMetricsError and nothing is cached.

============================================================
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from core.cache import ResultCache
from core.clock import ClockProtocol
from data_sources.rate_limit import SleepFn, WindowRateLimiter

from .analyzers import (
    HttpSentimentAnalyzer,
    KeywordSentimentAnalyzer,
    SentimentAnalyzer,
    clamp_sentiment,
)
from .base import BasePlatformSource
from .config import HTTP_ANALYZER, SocialConfig
from .exceptions import SocialMetricsError
from .models import Platform, PlatformActivity, PlatformMetrics, SocialMetrics
from .providers.simulated import SimulatedPlatformSource


logger = logging.getLogger(__name__)


def virality_score(engagement: float, mentions: int, viral_rate: float = 0.1) -> float:
    """Engagement per mention relative to the viral rate, capped at 100."""
    rate = engagement / max(mentions, 1)
    return min(100.0, rate / viral_rate * 100)


def create_analyzer(config: SocialConfig) -> SentimentAnalyzer:
    if config.analyzer == HTTP_ANALYZER:
        return HttpSentimentAnalyzer(
            url=config.sentiment_url,
            api_key=config.sentiment_api_key,
            timeout=config.sentiment_timeout,
        )
    return KeywordSentimentAnalyzer()


class SocialMetricsAggregator:
    """
    Aggregates social metrics for tokens.

    Usage:
        aggregator = SocialMetricsAggregator(cache=ResultCache())
        metrics = await aggregator.get_social_metrics("pepe")
        print(metrics.twitter.virality_score)
    """

    CACHE_PREFIX = "social_metrics_"

    def __init__(
        self,
        config: Optional[SocialConfig] = None,
        sources: Optional[Dict[Platform, BasePlatformSource]] = None,
        analyzer: Optional[SentimentAnalyzer] = None,
        cache: Optional[ResultCache] = None,
        clock: Optional[ClockProtocol] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self._config = config or SocialConfig()
        self._sources = sources or {
            platform: SimulatedPlatformSource(platform, seed=self._config.seed)
            for platform in Platform
        }
        missing = [p.value for p in Platform if p not in self._sources]
        if missing:
            raise ValueError(f"No source registered for platforms: {missing}")

        self._analyzer = analyzer or create_analyzer(self._config)
        self._cache = cache or ResultCache(default_ttl=self._config.cache_ttl, clock=clock)
        self._limiters = {
            platform: WindowRateLimiter(
                capacity=self._config.max_requests,
                window_seconds=self._config.window_seconds,
                min_interval=self._config.min_interval,
                clock=clock,
                sleep=sleep,
                name=f"social:{platform.value}",
            )
            for platform in Platform
        }

        self._stats = {
            "requests": 0,
            "cache_hits": 0,
            "failures": 0,
        }

    @property
    def analyzer(self) -> SentimentAnalyzer:
        return self._analyzer

    async def get_social_metrics(self, token_id: str) -> SocialMetrics:
        """
        Metrics for every platform.

        Raises:
            SocialMetricsError: any platform failed
        """
        self._stats["requests"] += 1
        key = f"{self.CACHE_PREFIX}{token_id}"

        cached = self._cache.get(key)
        if cached is not None:
            self._stats["cache_hits"] += 1
            logger.debug(f"[social] Cache hit token={token_id}")
            return cached

        platforms = list(Platform)
        results = await asyncio.gather(
            *(self._platform_metrics(p, token_id) for p in platforms),
            return_exceptions=True,
        )

        metrics: Dict[Platform, PlatformMetrics] = {}
        for platform, result in zip(platforms, results):
            if isinstance(result, BaseException):
                self._stats["failures"] += 1
                logger.error(f"[social] {platform.value} failed token={token_id}: {result}")
                raise SocialMetricsError(
                    f"Social metrics unavailable for {token_id} ({platform.value})",
                    token_id=token_id,
                    platform=platform.value,
                    cause=result,
                )
            metrics[platform] = result

        social = SocialMetrics(platforms=metrics)
        self._cache.set(key, social, ttl=self._config.cache_ttl)
        logger.debug(f"[social] Metrics assembled token={token_id}")
        return social

    async def _platform_metrics(self, platform: Platform, token_id: str) -> PlatformMetrics:
        await self._limiters[platform].acquire()
        activity: PlatformActivity = await self._sources[platform].fetch_activity(token_id)
        sentiment = await self._analyzer.analyze(" ".join(activity.posts))

        return PlatformMetrics(
            mentions=activity.mentions,
            sentiment=clamp_sentiment(sentiment),
            engagement=activity.engagement,
            trending=activity.trending,
            sentiment_change_24h=activity.sentiment_change_24h,
            virality_score=virality_score(
                activity.engagement, activity.mentions, self._config.viral_rate,
            ),
        )

    async def close(self) -> None:
        await self._analyzer.close()
        for source in self._sources.values():
            await source.close()

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "analyzer": self._analyzer.name,
        }
