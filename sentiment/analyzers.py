"""
Sentiment Analyzers - Text to polarity score.

============================================================
RESPONSIBILITY
============================================================
Scores a text sample in [-1, 1].

- KeywordSentimentAnalyzer: in-process keyword tiers
- HttpSentimentAnalyzer: delegates to an external scoring service

Both expose the same async ``analyze(text)`` so the aggregator
does not care which one is configured.

============================================================
"""

import logging
import string
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Optional

import aiohttp

from .exceptions import SentimentAnalysisError


logger = logging.getLogger(__name__)


def clamp_sentiment(value: float) -> float:
    return max(-1.0, min(1.0, value))


class SentimentAnalyzer(ABC):
    """Strategy interface for sentiment scoring."""

    name: str = "analyzer"

    @abstractmethod
    async def analyze(self, text: str) -> float:
        """Return a polarity score in [-1, 1]."""
        pass

    async def close(self) -> None:
        return None


# =============================================================
# KEYWORD TIERS
# =============================================================

VERY_POSITIVE: FrozenSet[str] = frozenset({
    "moon", "moonshot", "gem", "100x", "1000x", "amazing", "incredible",
    "breakthrough", "revolutionary", "partnership", "massive", "huge",
})

POSITIVE: FrozenSet[str] = frozenset({
    "bullish", "buy", "good", "great", "potential", "promising",
    "growth", "opportunity", "undervalued", "accumulate",
})

NEGATIVE: FrozenSet[str] = frozenset({
    "bearish", "sell", "dump", "bad", "avoid", "scam", "ponzi",
    "rugpull", "suspicious", "overvalued",
})

VERY_NEGATIVE: FrozenSet[str] = frozenset({
    "scam", "fraud", "fake", "rug", "honeypot", "avoid", "warning",
    "manipulation", "pyramid", "sketchy",
})

_PUNCTUATION = string.punctuation.replace("$", "")


class KeywordSentimentAnalyzer(SentimentAnalyzer):
    """
    Keyword tier scoring.

    Each word scores +2 / +1 / -1 / -2 for every tier it belongs to
    (``scam`` and ``avoid`` sit in two tiers). The total is divided by
    twice the number of tier matches; no match scores 0.
    """

    name = "keyword"

    TIERS = (
        (VERY_POSITIVE, 2),
        (POSITIVE, 1),
        (NEGATIVE, -1),
        (VERY_NEGATIVE, -2),
    )

    async def analyze(self, text: str) -> float:
        return self.score(text)

    def score(self, text: str) -> float:
        score = 0
        matches = 0
        for raw in text.lower().split():
            word = raw.strip(_PUNCTUATION)
            if not word:
                continue
            for keywords, weight in self.TIERS:
                if word in keywords:
                    score += weight
                    matches += 1

        if matches == 0:
            return 0.0
        return clamp_sentiment(score / (matches * 2))


class HttpSentimentAnalyzer(SentimentAnalyzer):
    """
    External sentiment service client.

    POSTs ``{"text": ...}`` and reads ``score`` (or ``sentiment``) from
    the JSON response. Returned values are clamped to [-1, 1].
    """

    name = "http"

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=headers,
            )
            self._owns_session = True
        return self._session

    async def analyze(self, text: str) -> float:
        session = await self._get_session()
        try:
            async with session.post(self._url, json={"text": text}) as response:
                if response.status != 200:
                    raise SentimentAnalysisError(
                        f"Sentiment service returned HTTP {response.status}",
                        analyzer=self.name,
                        status_code=response.status,
                    )
                payload: Dict[str, Any] = await response.json()
        except aiohttp.ClientError as e:
            raise SentimentAnalysisError(
                f"Sentiment service unreachable: {e}",
                analyzer=self.name,
                cause=e,
            )

        value = payload.get("score", payload.get("sentiment"))
        try:
            return clamp_sentiment(float(value))
        except (TypeError, ValueError) as e:
            raise SentimentAnalysisError(
                f"Sentiment service returned no numeric score: {payload!r:.200}",
                analyzer=self.name,
                cause=e,
            )

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
