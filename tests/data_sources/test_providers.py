"""
Tests for the CoinGecko adapter, the synthetic source and the source factory.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from core.clock import MockClock
from core.exceptions import ConfigurationError
from data_sources.config import FetchConfig
from data_sources.exceptions import RateLimitError, UpstreamError
from data_sources.factory import create_data_source
from data_sources.models import MarketOverview
from data_sources.providers.coingecko import CoinGeckoSource, _parse_retry_after
from data_sources.providers.synthetic import SyntheticMarketSource


# ============================================================
# HELPERS
# ============================================================

def mock_session(status=200, payload=None, headers=None, text=""):
    response = MagicMock()
    response.status = status
    response.headers = headers or {}
    response.json = AsyncMock(return_value=payload)
    response.text = AsyncMock(return_value=text)

    session = MagicMock()
    session.closed = False
    session.get.return_value.__aenter__.return_value = response
    session.close = AsyncMock()
    return session


# ============================================================
# COINGECKO
# ============================================================

class TestCoinGeckoSource:

    def test_api_key_header(self):
        source = CoinGeckoSource(config=FetchConfig(api_key="demo-key"))
        headers = source._get_default_headers()
        assert headers[CoinGeckoSource.API_KEY_HEADER] == "demo-key"

    def test_no_api_key_header_when_unset(self):
        headers = CoinGeckoSource()._get_default_headers()
        assert CoinGeckoSource.API_KEY_HEADER not in headers

    @pytest.mark.asyncio
    async def test_request_joins_base_url(self):
        session = mock_session(payload={"data": {}})
        source = CoinGeckoSource(config=FetchConfig(base_url="https://example.test/api/v3/"), session=session)

        payload = await source._request("/global", {"x": 1})

        assert payload == {"data": {}}
        session.get.assert_called_once_with("https://example.test/api/v3/global", params={"x": 1})

    @pytest.mark.asyncio
    async def test_429_raises_rate_limit_with_retry_after(self):
        session = mock_session(status=429, headers={"Retry-After": "12"})
        source = CoinGeckoSource(session=session)

        with pytest.raises(RateLimitError) as exc_info:
            await source._request("/search/trending", {})

        assert exc_info.value.retry_after == 12.0
        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_4xx_raises_non_retryable_upstream_error(self):
        session = mock_session(status=404, text="coin not found")
        source = CoinGeckoSource(session=session)

        with pytest.raises(UpstreamError) as exc_info:
            await source._request("/coins/ghost/market_chart", {})

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_body == "coin not found"
        assert not exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_connection_error_is_retryable(self):
        session = mock_session()
        session.get.side_effect = aiohttp.ClientConnectionError("refused")
        source = CoinGeckoSource(session=session)

        with pytest.raises(UpstreamError) as exc_info:
            await source._request("/global", {})

        assert exc_info.value.status_code is None
        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_malformed_json_raises_upstream_error(self):
        session = mock_session()
        session.get.return_value.__aenter__.return_value.json = AsyncMock(
            side_effect=json.JSONDecodeError("Expecting property name", "{bad", 1),
        )
        source = CoinGeckoSource(session=session)

        with pytest.raises(UpstreamError) as exc_info:
            await source._request("/global", {})

        assert exc_info.value.context["http_status"] == 200
        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_fetch_retries_malformed_json_then_fails_cleanly(self):
        session = mock_session()
        session.get.return_value.__aenter__.return_value.json = AsyncMock(
            side_effect=json.JSONDecodeError("Expecting property name", "{bad", 1),
        )
        waits = []

        async def sleep(seconds):
            waits.append(seconds)

        source = CoinGeckoSource(
            config=FetchConfig(max_retries=1, min_interval=0),
            session=session,
            sleep=sleep,
        )

        with pytest.raises(UpstreamError):
            await source.fetch("/global", {})

        assert session.get.call_count == 2
        assert len(waits) == 1

    @pytest.mark.asyncio
    async def test_close_leaves_injected_session_open(self):
        session = mock_session()
        source = CoinGeckoSource(session=session)
        await source.close()
        session.close.assert_not_called()

    @pytest.mark.parametrize("value,expected", [
        ("30", 30.0),
        ("1.5", 1.5),
        ("-4", 0.0),
        (None, None),
        ("Wed, 21 Oct 2015 07:28:00 GMT", None),
    ])
    def test_parse_retry_after(self, value, expected):
        assert _parse_retry_after(value) == expected


# ============================================================
# SYNTHETIC
# ============================================================

class TestSyntheticMarketSource:

    @pytest.mark.asyncio
    async def test_same_seed_same_universe_and_history(self):
        clock = MockClock()
        a = SyntheticMarketSource(seed=7, clock=clock)
        b = SyntheticMarketSource(seed=7, clock=clock)
        token_id = a.token_ids[0]

        assert a.token_ids == b.token_ids
        series_a = await a.get_market_chart(token_id)
        series_b = await b.get_market_chart(token_id)
        assert series_a == series_b

    def test_different_seed_different_universe(self):
        assert SyntheticMarketSource(seed=1).token_ids != SyntheticMarketSource(seed=2).token_ids

    @pytest.mark.asyncio
    async def test_volume_desc_ordering_and_paging(self):
        source = SyntheticMarketSource(seed=3, universe_size=30)
        rows = await source.get_markets(order="volume_desc", per_page=10, page=1)
        volumes = [r["total_volume"] for r in rows]

        assert len(rows) == 10
        assert volumes == sorted(volumes, reverse=True)

    @pytest.mark.asyncio
    async def test_market_chart_is_hourly(self):
        source = SyntheticMarketSource(seed=3, config=FetchConfig(chart_days=2))
        series = await source.get_market_chart(source.token_ids[0])

        assert len(series) == 48
        steps = {b - a for a, b in zip(series.timestamps, series.timestamps[1:])}
        assert steps == {3_600_000}

    @pytest.mark.asyncio
    async def test_token_metrics_round_trip(self):
        source = SyntheticMarketSource(seed=3, config=FetchConfig(min_interval=0))
        token_id = source.token_ids[5]

        metrics = await source.get_token_metrics(token_id)

        assert metrics.id == token_id
        assert metrics.market_cap > 0
        assert len(metrics.history) == FetchConfig().chart_days * 24

    @pytest.mark.asyncio
    async def test_unknown_coin_is_404(self):
        source = SyntheticMarketSource(config=FetchConfig(max_retries=0, min_interval=0))
        with pytest.raises(UpstreamError) as exc_info:
            await source.get_market_chart("ghost")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_global_totals_match_universe(self):
        source = SyntheticMarketSource(seed=3, universe_size=30, config=FetchConfig(min_interval=0))
        rows = await source.get_markets(per_page=30, page=1)

        overview = await source.get_global()

        assert overview.active_tokens == 30
        assert overview.total_market_cap == pytest.approx(sum(r["market_cap"] for r in rows))
        assert overview.total_volume == pytest.approx(sum(r["total_volume"] for r in rows))
        assert -30.0 <= overview.market_cap_change_24h <= 60.0

    @pytest.mark.asyncio
    async def test_global_follows_vs_currency(self):
        source = SyntheticMarketSource(seed=3, config=FetchConfig(min_interval=0, vs_currency="eur"))
        overview = await source.get_global()
        assert overview.total_market_cap > 0
        assert overview.total_volume > 0


# ============================================================
# MARKET OVERVIEW
# ============================================================

class TestMarketOverview:

    def test_from_global(self):
        overview = MarketOverview.from_global({
            "active_cryptocurrencies": 12000,
            "total_market_cap": {"usd": 2.5e12, "eur": 2.3e12},
            "total_volume": {"usd": 9e10},
            "market_cap_change_percentage_24h_usd": -1.25,
        })

        assert overview.active_tokens == 12000
        assert overview.total_market_cap == 2.5e12
        assert overview.total_volume == 9e10
        assert overview.market_cap_change_24h == -1.25

    def test_missing_fields_read_as_zero(self):
        overview = MarketOverview.from_global({"total_market_cap": {"usd": None}}, vs_currency="gbp")
        assert overview == MarketOverview()

    @pytest.mark.asyncio
    async def test_coingecko_global_parsed_from_data_object(self):
        session = mock_session(payload={"data": {
            "active_cryptocurrencies": 3,
            "total_market_cap": {"usd": 300.0},
            "total_volume": {"usd": 30.0},
            "market_cap_change_percentage_24h_usd": 2.0,
        }})
        source = CoinGeckoSource(config=FetchConfig(min_interval=0), session=session)

        overview = await source.get_global()

        assert overview == MarketOverview(3, 300.0, 30.0, 2.0)


# ============================================================
# FACTORY)
# ============================================================

class TestFactory:

    def test_live_kind(self):
        assert isinstance(create_data_source("live"), CoinGeckoSource)

    def test_synthetic_kind_drops_spacing(self):
        source = create_data_source("synthetic", config=FetchConfig(min_interval=5))
        assert isinstance(source, SyntheticMarketSource)
        assert source.config.min_interval == 0.0

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError):
            create_data_source("binance")
