"""
Creator Service Module

Discovery and tracking of creators: searching a niche across platforms,
tracking a creator (which ingests their recent posts), untracking, and the
tracked-creator listing shown on the dashboard.
"""

import dataclasses
from typing import Dict, List, Optional, Tuple, Iterable

from config import settings
from data.models import CreatorResult, PostResult, TrackedCreator, Post, Platform
from data.protocols import GrowthStorage
from services.protocols import PlatformServiceProtocol
from utils.exceptions import (
    NoNicheError, InvalidInputError, MissingIdentifierError, NotFoundError
)
from utils.helpers import compute_engagement_rate
from utils.logger import get_logger

logger = get_logger(__name__)


def apply_follower_engagement(posts: List[PostResult], follower_count: Optional[int]) -> List[PostResult]:
    """
    Recompute each post's engagement rate against the creator's follower count.

    With a positive follower count the recomputed value replaces the
    provider's own ratio; otherwise the posts are returned unchanged.
    """
    if not follower_count or follower_count <= 0:
        return posts
    return [
        dataclasses.replace(
            post,
            engagement_rate=compute_engagement_rate(post.likes, post.comments, post.shares, follower_count)
        )
        for post in posts
    ]


class CreatorService:
    """Service for creator discovery, tracking and ingestion."""

    def __init__(self, storage: GrowthStorage, platform_services: Dict[Platform, PlatformServiceProtocol]):
        """
        Args:
            storage: A GrowthStorage implementation.
            platform_services: PlatformServiceProtocol implementations keyed by platform.
        """
        self.storage = storage
        self.platform_services = platform_services

    def _service_for(self, platform) -> PlatformServiceProtocol:
        resolved = Platform.from_value(platform)
        if resolved is None or resolved not in self.platform_services:
            raise InvalidInputError(f"Unsupported platform: {platform}")
        return self.platform_services[resolved]

    def search_creators(self, niche: str, platforms: Iterable[str]) -> List[CreatorResult]:
        """
        Search every requested platform for creators in a niche.

        Results are concatenated per platform in request order, without
        de-duplication or sorting.
        """
        if not niche:
            raise NoNicheError("No niche set")

        services = [self._service_for(p) for p in platforms]
        results = []
        for service in services:
            results.extend(service.search_creators(niche))
        return results

    def discover_for_user(self, user_id: str) -> List[CreatorResult]:
        """Search creators for the user's niche across the user's platforms."""
        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        if not user.niche:
            raise NoNicheError("No niche set")

        platforms = user.platforms or settings.DEFAULT_PLATFORMS
        logger.info(f"Discovering creators for user {user_id} in '{user.niche}' on {', '.join(platforms)}")
        return self.search_creators(user.niche, platforms)

    def track_creator(self, user_id: str, creator: CreatorResult) -> Tuple[TrackedCreator, int]:
        """
        Track a creator for a user and ingest their recent posts.

        The creator row is upserted on (user, platform, handle) and each post on
        (platform, external id); re-ingesting a post only refreshes its counts
        and engagement rate.

        Args:
            user_id: The tracking user
            creator: A discovery result (real or fixture)

        Returns:
            Tuple[TrackedCreator, int]: The stored creator and the number of posts ingested.
        """
        if not creator.handle:
            raise InvalidInputError("Creator handle is required")
        service = self._service_for(creator.platform)
        platform = Platform.from_value(creator.platform)

        tracked = self.storage.upsert_tracked_creator(TrackedCreator(
            user_id=user_id,
            platform=platform,
            handle=creator.handle,
            display_name=creator.display_name,
            follower_count=creator.follower_count,
            bio=creator.bio,
            avatar_url=creator.avatar_url,
            cid=creator.cid,
        ))

        posts = service.fetch_posts(creator.handle, cid=creator.cid or tracked.cid)
        posts = apply_follower_engagement(posts, creator.follower_count)

        for result in posts:
            self.storage.upsert_post(Post(
                creator_id=tracked.id,
                platform=result.platform,
                external_id=result.external_id,
                post_type=result.post_type,
                caption=result.caption,
                likes=result.likes,
                comments=result.comments,
                shares=result.shares,
                views=result.views,
                engagement_rate=result.engagement_rate,
                posted_at=result.posted_at,
                media_url=result.media_url,
                thumbnail_url=result.thumbnail_url,
            ))

        self.storage.mark_creator_synced(tracked.id)
        logger.info(f"Tracking {platform}/{creator.handle} for user {user_id}: {len(posts)} posts ingested")
        return tracked, len(posts)

    def untrack_creator(self, creator_id) -> None:
        """
        Stop tracking a creator; its posts and analyses go with it.

        Raises:
            MissingIdentifierError: If no id is given (nothing is deleted).
            NotFoundError: If no tracked creator has that id.
        """
        if creator_id is None or str(creator_id).strip() == "":
            raise MissingIdentifierError()
        try:
            creator_id = int(creator_id)
        except (TypeError, ValueError):
            raise InvalidInputError(f"Invalid creator id: {creator_id!r}") from None

        if not self.storage.delete_tracked_creator(creator_id):
            raise NotFoundError(f"Tracked creator {creator_id} not found")
        logger.info(f"Untracked creator {creator_id}")

    def list_tracked_creators(self, user_id: str) -> List[TrackedCreator]:
        """Return the user's tracked creators, newest first, each with their top posts."""
        return self.storage.get_tracked_creators(user_id, top_posts=settings.CREATOR_TOP_POSTS_LIMIT)
