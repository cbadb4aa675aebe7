"""
CoinGecko Market Data Source - Public API adapter.

Implements market data fetching from the CoinGecko v3 API.
Works unauthenticated; a demo API key raises the upstream quota.
"""

import logging
from typing import Any, Dict, Optional

import aiohttp

from data_sources.base import BaseMarketDataSource
from data_sources.exceptions import RateLimitError, UpstreamError


logger = logging.getLogger(__name__)


class CoinGeckoSource(BaseMarketDataSource):
    """
    CoinGecko public API data source.

    Endpoints used:
    - /coins/markets - Market rows, sorted and filtered
    - /search/trending - Trending coins
    - /global - Global market summary
    - /coins/{id}/market_chart - Price/volume history

    Rate limits:
    - ~10-30 requests/minute on the free tier
    - IP-based rate limiting
    """

    API_KEY_HEADER = "x-cg-demo-api-key"

    def __init__(
        self,
        *args: Any,
        session: Optional[aiohttp.ClientSession] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._session = session
        self._owns_session = session is None

    @property
    def name(self) -> str:
        """Unique identifier."""
        return "coingecko"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": "MoonshotScanner/1.0",
        }
        if self._config.api_key:
            headers[self.API_KEY_HEADER] = self._config.api_key
        return headers

    async def _request(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """GET ``endpoint`` relative to the configured base URL."""
        session = await self._get_session()
        url = f"{self._config.base_url.rstrip('/')}{endpoint}"

        try:
            async with session.get(url, params=params) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    raise RateLimitError(
                        "Rate limit exceeded",
                        source_name=self.name,
                        retry_after=_parse_retry_after(retry_after),
                        url=url,
                    )

                if response.status >= 400:
                    body = await response.text()
                    raise UpstreamError(
                        f"HTTP {response.status}",
                        source_name=self.name,
                        status_code=response.status,
                        url=url,
                        response_body=body[:1000],
                    )

                try:
                    data = await response.json()
                except ValueError as e:
                    raise UpstreamError(
                        f"Invalid JSON in HTTP {response.status} response: {e}",
                        source_name=self.name,
                        url=url,
                        original_error=e,
                        context={"http_status": response.status},
                    )
                logger.debug(f"[{self.name}] GET {endpoint} -> {response.status}")
                return data

        except aiohttp.ClientError as e:
            raise UpstreamError(
                f"Connection error: {e}",
                source_name=self.name,
                url=url,
                original_error=e,
            )

    async def close(self) -> None:
        """Close the HTTP session if this source created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Retry-After in seconds; HTTP-date values are ignored."""
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None
