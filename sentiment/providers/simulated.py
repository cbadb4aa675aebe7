"""
Simulated Platform Source - Seeded social activity.

No social platform API is wired in; this source produces plausible
activity so the rest of the pipeline runs end to end:
- Engagement 0-9999, mentions 0.5x-1.5x engagement
- Trending roughly one time in five
- One post drawn from trending or non-trending templates
- 24h sentiment change within +/-0.5

Output depends only on (seed, platform, token), so repeated calls
for the same token agree.
"""

import random
from typing import List

from ..base import BasePlatformSource
from ..models import Platform, PlatformActivity


TRENDING_TEMPLATES: List[str] = [
    "{token} is showing amazing potential right now!",
    "Huge partnership announcement coming for {token}",
    "{token} technical analysis looks incredibly bullish",
    "This could be the next moonshot: {token}",
    "{token} fundamentals are stronger than ever",
]

QUIET_TEMPLATES: List[str] = [
    "{token} looks interesting, needs more research",
    "Keeping an eye on {token} development",
    "{token} market activity increasing",
    "New updates from {token} team",
    "{token} community growing steadily",
]


class SimulatedPlatformSource(BasePlatformSource):
    """Deterministic simulated activity for one platform."""

    MAX_ENGAGEMENT = 10_000
    TRENDING_PROBABILITY = 0.2

    def __init__(self, platform: Platform, seed: int = 42) -> None:
        self._platform = platform
        self._seed = seed

    @property
    def platform(self) -> Platform:
        return self._platform

    async def fetch_activity(self, token_id: str) -> PlatformActivity:
        rng = random.Random(f"{self._seed}:{self._platform.value}:{token_id}")

        engagement = rng.randrange(self.MAX_ENGAGEMENT)
        mentions = int(engagement * (0.5 + rng.random()))
        trending = rng.random() > 1 - self.TRENDING_PROBABILITY
        templates = TRENDING_TEMPLATES if trending else QUIET_TEMPLATES

        return PlatformActivity(
            platform=self._platform,
            mentions=mentions,
            engagement=float(engagement),
            trending=trending,
            posts=[rng.choice(templates).format(token=token_id)],
            sentiment_change_24h=(rng.random() * 2 - 1) * 0.5,
        )
