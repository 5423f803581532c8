"""
Fixture Data Generator

Generates believable creators and posts when the statistics API fails or
returns nothing, so discovery and ingestion always have something to show.
The generator takes an optional seed; tests pass one to get repeatable output.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Optional, List

from config import settings
from config.niches import MOCK_CREATOR_NAMES, MOCK_CREATOR_BIOS, MOCK_POST_CAPTIONS
from data.models import CreatorResult, PostResult, Platform, PostType

INSTAGRAM_POST_TYPES = [PostType.REEL, PostType.CAROUSEL, PostType.STATIC, PostType.REEL, PostType.CAROUSEL]

# (base, spread) per metric: value = base + randrange(spread)
POST_METRIC_RANGES = {
    Platform.INSTAGRAM: {
        "likes": (500, 50000),
        "comments": (50, 2000),
        "shares": (10, 1000),
        "views": (5000, 200000),
        "engagement_rate": (1.0, 8.0),
    },
    Platform.TIKTOK: {
        "likes": (1000, 100000),
        "comments": (100, 5000),
        "shares": (50, 3000),
        "views": (10000, 500000),
        "engagement_rate": (2.0, 12.0),
    },
}

FOLLOWER_RANGES = {
    Platform.INSTAGRAM: (10000, 500000),
    Platform.TIKTOK: (50000, 1000000),
}


def mock_handle(name: str, niche: str) -> str:
    """e.g. ('fitness_guru', 'Fitness & Health') -> 'fitness_guru_fitness&heal'"""
    return f"{name}_{''.join(niche.lower().split())}"[:25]


class MockDataGenerator:
    """Seedable source of fixture creators and posts."""

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def creators(self, platform: Platform, niche: str, count: Optional[int] = None) -> List[CreatorResult]:
        platform = Platform.from_value(platform)
        names = MOCK_CREATOR_NAMES[platform.value]
        count = settings.MOCK_CREATOR_COUNT if count is None else count
        base, spread = FOLLOWER_RANGES[platform]

        return [
            CreatorResult(
                handle=mock_handle(name, niche),
                display_name=name.replace("_", " ").title(),
                platform=platform,
                follower_count=base + self.rng.randrange(spread),
                bio=MOCK_CREATOR_BIOS[platform.value].format(niche=niche),
                avatar_url="",
            )
            for name in names[:count]
        ]

    def posts(self, platform: Platform, handle: str, count: Optional[int] = None,
              now: Optional[datetime] = None) -> List[PostResult]:
        platform = Platform.from_value(platform)
        count = settings.MOCK_POST_COUNT if count is None else count
        now = now or datetime.now(timezone.utc)
        captions = MOCK_POST_CAPTIONS[platform.value]
        ranges = POST_METRIC_RANGES[platform]

        posts = []
        for i in range(count):
            if platform is Platform.TIKTOK:
                external_id = f"mock_tt_{handle}_{i}"
                post_type = PostType.VIDEO
            else:
                external_id = f"mock_{handle}_{i}"
                post_type = INSTAGRAM_POST_TYPES[i % len(INSTAGRAM_POST_TYPES)]

            er_base, er_spread = ranges["engagement_rate"]
            posts.append(PostResult(
                external_id=external_id,
                platform=platform,
                post_type=post_type,
                caption=captions[i % len(captions)],
                likes=self._metric(ranges["likes"]),
                comments=self._metric(ranges["comments"]),
                shares=self._metric(ranges["shares"]),
                views=self._metric(ranges["views"]),
                engagement_rate=er_base + self.rng.random() * er_spread,
                posted_at=now - timedelta(days=2 * i),
            ))
        return posts

    def _metric(self, bounds) -> int:
        base, spread = bounds
        return base + self.rng.randrange(spread)
