"""
Sentiment Data Models - Social activity structures.

Raw activity comes from platform sources; the aggregator turns it
into PlatformMetrics, one per enumerated platform.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Platform(Enum):
    """Social channels tracked per token."""
    TWITTER = "twitter"
    TELEGRAM = "telegram"
    REDDIT = "reddit"


@dataclass
class PlatformActivity:
    """
    Raw activity reported by a platform source.

    posts is the text sample the sentiment analyzer reads.
    """
    platform: Platform
    mentions: int
    engagement: float
    trending: bool
    posts: List[str] = field(default_factory=list)
    sentiment_change_24h: Optional[float] = None

    def __post_init__(self) -> None:
        if self.mentions < 0:
            raise ValueError(f"mentions must be >= 0, got {self.mentions}")
        if self.engagement < 0:
            raise ValueError(f"engagement must be >= 0, got {self.engagement}")


@dataclass
class PlatformMetrics:
    """Per-platform social metrics for one token."""
    mentions: int = 0
    sentiment: float = 0.0
    engagement: float = 0.0
    trending: bool = False
    sentiment_change_24h: Optional[float] = None
    virality_score: Optional[float] = None

    def __post_init__(self) -> None:
        if self.mentions < 0:
            raise ValueError(f"mentions must be >= 0, got {self.mentions}")
        if self.engagement < 0:
            raise ValueError(f"engagement must be >= 0, got {self.engagement}")
        if not -1.0 <= self.sentiment <= 1.0:
            raise ValueError(f"sentiment must be in [-1, 1], got {self.sentiment}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mentions": self.mentions,
            "sentiment": self.sentiment,
            "engagement": self.engagement,
            "trending": self.trending,
            "sentiment_change_24h": self.sentiment_change_24h,
            "virality_score": self.virality_score,
        }


def _empty_platforms() -> Dict[Platform, PlatformMetrics]:
    return {platform: PlatformMetrics() for platform in Platform}


@dataclass
class SocialMetrics:
    """Social metrics for every platform; missing platforms read as empty."""
    platforms: Dict[Platform, PlatformMetrics] = field(default_factory=_empty_platforms)

    def __post_init__(self) -> None:
        for platform in Platform:
            self.platforms.setdefault(platform, PlatformMetrics())

    def __getitem__(self, platform: Platform) -> PlatformMetrics:
        return self.platforms[platform]

    @property
    def twitter(self) -> PlatformMetrics:
        return self.platforms[Platform.TWITTER]

    @property
    def telegram(self) -> PlatformMetrics:
        return self.platforms[Platform.TELEGRAM]

    @property
    def reddit(self) -> PlatformMetrics:
        return self.platforms[Platform.REDDIT]

    def values(self) -> List[PlatformMetrics]:
        return [self.platforms[p] for p in Platform]

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {p.value: self.platforms[p].to_dict() for p in Platform}
