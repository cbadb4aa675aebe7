"""
Tests for sentiment analyzers and the Social Metrics Aggregator.

============================================================
PURPOSE
============================================================
- Keyword scoring stays within [-1, 1]
- HTTP analyzer maps service failures to SentimentAnalysisError
- Aggregation covers every platform and caches per token
- A failing platform fails the whole call

============================================================
"""

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from core.cache import ResultCache
from core.clock import MockClock
from core.exceptions import ConfigurationError
from sentiment.aggregator import SocialMetricsAggregator, create_analyzer, virality_score
from sentiment.analyzers import HttpSentimentAnalyzer, KeywordSentimentAnalyzer
from sentiment.base import BasePlatformSource
from sentiment.config import SocialConfig
from sentiment.exceptions import SentimentAnalysisError, SocialMetricsError
from sentiment.models import Platform, PlatformActivity, PlatformMetrics, SocialMetrics
from sentiment.providers.simulated import SimulatedPlatformSource


# ============================================================
# HELPERS
# ============================================================

class StaticSource(BasePlatformSource):
    """Returns fixed activity and counts calls."""

    def __init__(self, platform, activity=None, error=None):
        self._platform = platform
        self._activity = activity
        self._error = error
        self.calls = 0

    @property
    def platform(self):
        return self._platform

    async def fetch_activity(self, token_id):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._activity


def activity(platform, mentions=100, engagement=5.0, posts=("to the moon",), trending=False):
    return PlatformActivity(
        platform=platform,
        mentions=mentions,
        engagement=engagement,
        trending=trending,
        posts=list(posts),
    )


@pytest.fixture
def sources():
    return {p: StaticSource(p, activity(p)) for p in Platform}


# ============================================================
# KEYWORD ANALYZER
# ============================================================

class TestKeywordSentimentAnalyzer:

    def test_no_keywords_is_neutral(self):
        assert KeywordSentimentAnalyzer().score("nothing to see here") == 0.0

    def test_very_positive(self):
        assert KeywordSentimentAnalyzer().score("Moon! Massive gem") == 1.0

    def test_mixed(self):
        # bullish (+1), dump (-1)
        assert KeywordSentimentAnalyzer().score("bullish but dump") == 0.0

    def test_scam_counts_in_both_negative_tiers(self):
        # scam: -1 and -2 over two matches -> -3 / 4
        assert KeywordSentimentAnalyzer().score("scam") == pytest.approx(-0.75)

    def test_punctuation_stripped_but_dollar_kept(self):
        analyzer = KeywordSentimentAnalyzer()
        assert analyzer.score("bullish!!!") == 0.5
        assert analyzer.score("$moon") == 0.0

    @pytest.mark.asyncio
    async def test_async_analyze_matches_score(self):
        analyzer = KeywordSentimentAnalyzer()
        text = "great potential, avoid the fud"
        assert await analyzer.analyze(text) == analyzer.score(text)
        assert -1.0 <= analyzer.score(text) <= 1.0


# ============================================================
# HTTP ANALYZER
# ============================================================

def mock_post_session(status=200, payload=None):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    session = MagicMock()
    session.closed = False
    session.post.return_value.__aenter__.return_value = response
    return session


class TestHttpSentimentAnalyzer:

    @pytest.mark.asyncio
    async def test_reads_and_clamps_score(self):
        session = mock_post_session(payload={"score": 3.2})
        analyzer = HttpSentimentAnalyzer("https://sentiment.test/score", session=session)

        assert await analyzer.analyze("hello") == 1.0
        session.post.assert_called_once_with("https://sentiment.test/score", json={"text": "hello"})

    @pytest.mark.asyncio
    async def test_accepts_sentiment_key(self):
        session = mock_post_session(payload={"sentiment": -0.4})
        analyzer = HttpSentimentAnalyzer("https://sentiment.test", session=session)
        assert await analyzer.analyze("meh") == -0.4

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        analyzer = HttpSentimentAnalyzer("https://sentiment.test", session=mock_post_session(status=502))
        with pytest.raises(SentimentAnalysisError) as exc_info:
            await analyzer.analyze("x")
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_missing_score(self):
        analyzer = HttpSentimentAnalyzer("https://sentiment.test", session=mock_post_session(payload={}))
        with pytest.raises(SentimentAnalysisError):
            await analyzer.analyze("x")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        session = mock_post_session()
        session.post.side_effect = aiohttp.ClientConnectionError("refused")
        analyzer = HttpSentimentAnalyzer("https://sentiment.test", session=session)
        with pytest.raises(SentimentAnalysisError):
            await analyzer.analyze("x")

    def test_factory_selects_http(self):
        config = SocialConfig(analyzer="http", sentiment_url="https://sentiment.test")
        assert isinstance(create_analyzer(config), HttpSentimentAnalyzer)
        assert isinstance(create_analyzer(SocialConfig()), KeywordSentimentAnalyzer)

    def test_http_requires_url(self):
        with pytest.raises(ConfigurationError):
            SocialConfig(analyzer="http")


# ============================================================
# MODELS
# ============================================================

class TestModels:

    def test_social_metrics_fills_missing_platforms(self):
        metrics = SocialMetrics(platforms={Platform.TWITTER: PlatformMetrics(mentions=3)})
        assert metrics.twitter.mentions == 3
        assert metrics.reddit == PlatformMetrics()
        assert set(metrics.to_dict()) == {"twitter", "telegram", "reddit"}

    def test_platform_metrics_validation(self):
        with pytest.raises(ValueError):
            PlatformMetrics(mentions=-1)
        with pytest.raises(ValueError):
            PlatformMetrics(sentiment=1.5)

    def test_virality_score(self):
        assert virality_score(engagement=5, mentions=100) == pytest.approx(50.0)
        assert virality_score(engagement=1000, mentions=1) == 100.0
        assert virality_score(engagement=5, mentions=0) == 100.0


# ============================================================
# AGGREGATOR
# ============================================================

class TestSocialMetricsAggregator:

    @pytest.mark.asyncio
    async def test_assembles_every_platform(self, sources):
        aggregator = SocialMetricsAggregator(sources=sources, cache=ResultCache())

        metrics = await aggregator.get_social_metrics("pepe")

        for platform in Platform:
            m = metrics[platform]
            assert m.mentions == 100
            assert m.sentiment == 1.0
            assert m.virality_score == pytest.approx(50.0)

    @pytest.mark.asyncio
    async def test_caches_per_token(self, sources):
        clock = MockClock()
        cache = ResultCache(clock=clock)
        aggregator = SocialMetricsAggregator(
            SocialConfig(cache_ttl=300), sources=sources, cache=cache, clock=clock,
        )

        await aggregator.get_social_metrics("pepe")
        await aggregator.get_social_metrics("pepe")
        assert sources[Platform.TWITTER].calls == 1
        assert aggregator.get_stats()["cache_hits"] == 1

        clock.advance(301)
        await aggregator.get_social_metrics("pepe")
        assert sources[Platform.TWITTER].calls == 2

    @pytest.mark.asyncio
    async def test_platform_failure_fails_whole_call(self, sources):
        sources[Platform.REDDIT] = StaticSource(Platform.REDDIT, error=RuntimeError("reddit down"))
        cache = ResultCache()
        aggregator = SocialMetricsAggregator(sources=sources, cache=cache)

        with pytest.raises(SocialMetricsError) as exc_info:
            await aggregator.get_social_metrics("pepe")

        assert exc_info.value.platform == "reddit"
        assert exc_info.value.token_id == "pepe"
        assert cache.get("social_metrics_pepe") is None

    def test_missing_platform_source_rejected(self):
        with pytest.raises(ValueError):
            SocialMetricsAggregator(sources={Platform.TWITTER: StaticSource(Platform.TWITTER)})

    @pytest.mark.asyncio
    async def test_platform_limiter_spaces_requests(self, sources):
        clock = MockClock()
        waits = []

        async def sleep(seconds):
            waits.append(seconds)

        aggregator = SocialMetricsAggregator(
            SocialConfig(max_requests=1, window_seconds=60),
            sources=sources,
            cache=ResultCache(clock=clock),
            clock=clock,
            sleep=sleep,
        )

        await aggregator.get_social_metrics("a")
        await aggregator.get_social_metrics("b")

        # one window wait per platform for the second token
        assert waits == [pytest.approx(60.0)] * 3

    @pytest.mark.asyncio
    async def test_simulated_sources_are_deterministic(self):
        first = SocialMetricsAggregator(cache=ResultCache())
        second = SocialMetricsAggregator(cache=ResultCache())

        a = await first.get_social_metrics("bonk")
        b = await second.get_social_metrics("bonk")

        assert a.to_dict() == b.to_dict()
        for m in a.values():
            assert m.mentions >= 0
            assert -1.0 <= m.sentiment <= 1.0

    @pytest.mark.asyncio
    async def test_simulated_source_platforms_differ(self):
        twitter = await SimulatedPlatformSource(Platform.TWITTER).fetch_activity("bonk")
        reddit = await SimulatedPlatformSource(Platform.REDDIT).fetch_activity("bonk")
        assert twitter.platform == Platform.TWITTER
        assert (twitter.engagement, twitter.mentions) != (reddit.engagement, reddit.mentions)
