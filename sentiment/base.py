"""
Base Platform Source - Abstract interface for social activity adapters.

A platform source reports raw activity for one token on one social
channel. Scoring (sentiment, virality) happens in the aggregator.
"""

from abc import ABC, abstractmethod

from .models import Platform, PlatformActivity


class BasePlatformSource(ABC):
    """
    Abstract base class for social platform sources.

    All subclasses must implement:
    - platform - The channel this source reports on
    - fetch_activity() - Raw activity for one token
    """

    @property
    @abstractmethod
    def platform(self) -> Platform:
        """The channel this source reports on."""
        pass

    @abstractmethod
    async def fetch_activity(self, token_id: str) -> PlatformActivity:
        """
        Fetch raw activity for a token.

        Should raise on failure; the aggregator turns any error into
        a SocialMetricsError for the whole token.
        """
        pass

    async def close(self) -> None:
        return None
