"""
Social Service Module

This module handles creator discovery and post ingestion for the supported
platforms (Instagram and TikTok), both served by the social statistics API.
Every operation degrades to fixture data instead of surfacing an empty
result or a provider error, so the dashboard always has content to show.
"""

import re
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from config import settings
from config.niches import NICHE_TAG_MAP
from data.models import CreatorResult, PostResult, Platform, PostType
from services.mock_data import MockDataGenerator
from services.statistics_api import StatisticsAPIClient
from utils.exceptions import ContentProviderError
from utils.helpers import get_date_range, parse_timestamp, as_int
from utils.logger import get_logger

logger = get_logger(__name__)


def niche_to_tag(niche: str) -> str:
    """
    Translate a niche name into the statistics API's category tag.

    Niches outside the fixed map are slugified: lowercased, with runs of
    whitespace and ampersands collapsed into single hyphens.
    """
    if niche in NICHE_TAG_MAP:
        return NICHE_TAG_MAP[niche]
    return re.sub(r"[\s&]+", "-", niche.strip().lower())


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _dict_records(records: List[Any], kind: str) -> List[Dict[str, Any]]:
    """Keep only the records that are JSON objects, warning about the rest."""
    kept = [r for r in records if isinstance(r, dict)]
    if len(kept) < len(records):
        logger.warning(f"Skipped {len(records) - len(kept)} malformed {kind} record(s) from statistics API")
    return kept


class PlatformService:
    """Base class for discovery and ingestion on a single platform."""

    platform: Platform = None
    profile_url_template: str = ""

    def __init__(self, api: Optional[StatisticsAPIClient] = None,
                 mock_data: Optional[MockDataGenerator] = None):
        self.api = api or StatisticsAPIClient()
        self.mock_data = mock_data or MockDataGenerator(settings.MOCK_DATA_SEED)

    def profile_url(self, handle: str) -> str:
        return self.profile_url_template.format(handle=handle.lstrip("@"))

    def map_post_type(self, raw_type: Optional[str]) -> PostType:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    def search_creators(self, niche: str) -> List[CreatorResult]:
        """
        Search creators for a niche, best average engagement first.

        Tries the niche's category tag, then the raw niche as a free-text query,
        then falls back to fixture creators.

        Args:
            niche: The user's niche, e.g. 'Fitness & Health'

        Returns:
            List[CreatorResult]: Never empty.
        """
        if not self.api.configured:
            logger.warning(f"No statistics API key; serving fixture {self.platform} creators")
            return self.mock_data.creators(self.platform, niche)

        try:
            tag = niche_to_tag(niche)
            results = self.api.search(self.platform.value, tag=tag)
            if not results:
                logger.warning(f"{self.platform} tag search for '{tag}' returned no results, trying query search...")
                results = self.api.search(self.platform.value, query=niche)
        except ContentProviderError as e:
            logger.error(f"{self.platform} creator search error: {e}")
            return self.mock_data.creators(self.platform, niche)

        records = _dict_records(results, "creator")
        creators = [c for c in (self._map_creator(raw) for raw in records) if c.handle]
        if not creators:
            logger.warning(f"No {self.platform} creators found for '{niche}'; serving fixture creators")
            return self.mock_data.creators(self.platform, niche)

        logger.info(f"Found {len(creators)} {self.platform} creators for '{niche}'")
        return creators

    def _map_creator(self, raw: Dict[str, Any]) -> CreatorResult:
        handle = raw.get("screenName") or ""
        return CreatorResult(
            handle=handle,
            display_name=raw.get("name") or handle,
            platform=self.platform,
            follower_count=as_int(raw.get("usersCount")),
            bio="",
            avatar_url=raw.get("image") or "",
            cid=raw.get("cid") or None,
            avg_er=_as_float(raw.get("avgER")),
            quality_score=_as_float(raw.get("qualityScore")),
        )

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def fetch_posts(self, handle: str, cid: Optional[str] = None) -> List[PostResult]:
        """
        Fetch a creator's posts from the last POST_LOOKBACK_DAYS days.

        Args:
            handle: The creator's handle
            cid: The statistics API creator id, if already known

        Returns:
            List[PostResult]: At most MAX_POSTS_PER_CREATOR posts; fixture posts on any failure.
        """
        if not self.api.configured:
            logger.warning(f"No statistics API key; serving fixture posts for {self.platform}/{handle}")
            return self.mock_data.posts(self.platform, handle)

        try:
            if not cid:
                cid = self.api.resolve_cid(self.profile_url(handle))
                if not cid:
                    logger.error(f"Could not resolve {self.platform} cid for handle: {handle}")
                    return self.mock_data.posts(self.platform, handle)

            date_from, date_to = get_date_range(settings.POST_LOOKBACK_DAYS)
            raw_posts = self.api.get_posts(cid, date_from, date_to)
        except ContentProviderError as e:
            logger.error(f"{self.platform} posts fetch error for {handle}: {e}")
            return self.mock_data.posts(self.platform, handle)

        records = _dict_records(raw_posts, "post")
        posts = [p for p in (self._map_post(raw) for raw in records) if p.external_id]
        if not posts:
            logger.warning(f"No {self.platform} posts returned for {handle}; serving fixture posts")
            return self.mock_data.posts(self.platform, handle)

        posts = posts[:settings.MAX_POSTS_PER_CREATOR]
        logger.info(f"Fetched {len(posts)} {self.platform} posts for {handle}")
        return posts

    def _map_post(self, raw: Dict[str, Any]) -> PostResult:
        er = _as_float(raw.get("er"))
        return PostResult(
            external_id=str(raw.get("socialPostID") or raw.get("postID") or ""),
            platform=self.platform,
            post_type=self.map_post_type(raw.get("type")),
            caption=raw.get("text") or "",
            media_url=raw.get("videoLink") or raw.get("postImage") or "",
            thumbnail_url=raw.get("postImage") or "",
            likes=as_int(raw.get("likes")),
            comments=as_int(raw.get("comments")),
            shares=as_int(raw.get("rePosts")),
            views=as_int(raw.get("videoViews") or raw.get("views")),
            posted_at=parse_timestamp(raw.get("date")) or datetime.now(timezone.utc),
            engagement_rate=er * 100 if er else 0.0,
        )


class InstagramService(PlatformService):
    """Instagram discovery and ingestion."""

    platform = Platform.INSTAGRAM
    profile_url_template = "https://instagram.com/{handle}"

    def map_post_type(self, raw_type: Optional[str]) -> PostType:
        raw_type = (raw_type or "").lower()
        if "reel" in raw_type or "video" in raw_type:
            return PostType.REEL
        if "carousel" in raw_type or "album" in raw_type:
            return PostType.CAROUSEL
        if "story" in raw_type or "stories" in raw_type:
            return PostType.STORY
        return PostType.STATIC


class TikTokService(PlatformService):
    """TikTok discovery and ingestion."""

    platform = Platform.TIKTOK
    profile_url_template = "https://www.tiktok.com/@{handle}"

    def map_post_type(self, raw_type: Optional[str]) -> PostType:
        return PostType.VIDEO


def create_platform_services(api: Optional[StatisticsAPIClient] = None,
                             mock_data: Optional[MockDataGenerator] = None) -> Dict[Platform, PlatformService]:
    """Build one service per supported platform, sharing the API client and fixture generator."""
    api = api or StatisticsAPIClient()
    mock_data = mock_data or MockDataGenerator(settings.MOCK_DATA_SEED)
    return {
        Platform.INSTAGRAM: InstagramService(api, mock_data),
        Platform.TIKTOK: TikTokService(api, mock_data),
    }
