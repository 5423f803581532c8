"""
Data Models for the Niche Growth Dashboard

This module contains the data classes and closed vocabularies used throughout
the application. Values coming back from the reasoning provider are run through
``from_value`` so an unexpected tag becomes the enum's fallback member instead
of an arbitrary string.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List


class _TaggedEnum(str, Enum):
    """String enum with a tolerant parser."""

    @classmethod
    def fallback(cls) -> Optional["_TaggedEnum"]:
        return None

    @classmethod
    def from_value(cls, raw):
        """
        Map a raw string onto a member, case-insensitively.

        Returns the class fallback (which may be None) for unknown values.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            normalized = raw.strip().lower().replace("-", "_").replace(" ", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return cls.fallback()

    def __str__(self) -> str:
        return self.value


class Platform(_TaggedEnum):
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"


class PostType(_TaggedEnum):
    REEL = "reel"
    CAROUSEL = "carousel"
    STATIC = "static"
    STORY = "story"
    VIDEO = "video"


class HookType(_TaggedEnum):
    QUESTION = "question"
    BOLD_STATEMENT = "bold_statement"
    STORY = "story"
    STATISTIC = "statistic"
    CONTROVERSIAL = "controversial"
    HOW_TO = "how_to"
    LISTICLE = "listicle"
    BEHIND_THE_SCENES = "behind_the_scenes"
    OTHER = "other"

    @classmethod
    def fallback(cls):
        return cls.OTHER


class Sentiment(_TaggedEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    INSPIRATIONAL = "inspirational"
    EDUCATIONAL = "educational"
    ENTERTAINING = "entertaining"
    UNKNOWN = "unknown"

    @classmethod
    def fallback(cls):
        return cls.UNKNOWN


class InsightType(_TaggedEnum):
    FORMAT = "format"
    TIMING = "timing"
    HOOK = "hook"
    TOPIC = "topic"
    ENGAGEMENT = "engagement"
    OTHER = "other"

    @classmethod
    def fallback(cls):
        return cls.OTHER


# =============================================================================
# Content Provider Results
# =============================================================================

@dataclass
class CreatorResult:
    """A creator candidate returned by discovery (real or fixture)."""
    handle: str
    display_name: str
    platform: Platform
    follower_count: int
    bio: str = ""
    avatar_url: str = ""
    cid: Optional[str] = None              # Statistics API creator id, e.g. "INST:12345"
    avg_er: Optional[float] = None
    quality_score: Optional[float] = None


@dataclass
class PostResult:
    """A normalized post returned by ingestion, before it is persisted."""
    external_id: str
    platform: Platform
    post_type: PostType
    caption: str
    likes: int
    comments: int
    shares: int
    views: int
    engagement_rate: float                 # Percentage
    posted_at: Optional[datetime] = None
    media_url: str = ""
    thumbnail_url: str = ""


# =============================================================================
# Persisted Entities
# =============================================================================

@dataclass
class User:
    id: str
    niche: Optional[str] = None
    platforms: List[str] = field(default_factory=list)
    onboarded: bool = False
    social_handle: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


@dataclass
class PostAnalysis:
    """The reasoning provider's judgment of a single post (at most one per post)."""
    post_id: int
    hook_type: HookType
    content_format: str
    topic: str
    why_it_worked: str
    sentiment: Sentiment
    key_takeaways: List[str] = field(default_factory=list)
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class Post:
    creator_id: int
    platform: Platform
    external_id: str
    post_type: PostType
    caption: str = ""
    likes: int = 0
    comments: int = 0
    shares: int = 0
    views: int = 0
    engagement_rate: float = 0.0
    posted_at: Optional[datetime] = None
    media_url: str = ""
    thumbnail_url: str = ""
    id: Optional[int] = None
    analysis: Optional[PostAnalysis] = None


@dataclass
class TrackedCreator:
    user_id: str
    platform: Platform
    handle: str
    display_name: str = ""
    follower_count: int = 0
    bio: str = ""
    avatar_url: str = ""
    cid: Optional[str] = None
    id: Optional[int] = None
    last_synced: Optional[datetime] = None
    created_at: Optional[datetime] = None
    posts: List[Post] = field(default_factory=list)


@dataclass
class NicheInsight:
    user_id: str
    insight_type: InsightType
    insight_text: str
    data_points: int = 0
    id: Optional[int] = None
    generated_at: Optional[datetime] = None


@dataclass
class GeneratedPost:
    """An append-only post draft produced for a user."""
    user_id: str
    platform: str
    caption: str
    hashtags: List[str] = field(default_factory=list)
    format_tips: str = ""
    posting_tips: str = ""
    content_format: Optional[str] = None
    topic: Optional[str] = None
    id: Optional[int] = None
    generated_at: Optional[datetime] = None


# =============================================================================
# Reasoning Provider Results
# =============================================================================

@dataclass
class AnalysisResult:
    hook_type: HookType
    content_format: str
    topic: str
    why_it_worked: str
    sentiment: Sentiment
    key_takeaways: List[str] = field(default_factory=list)


@dataclass
class InsightDraft:
    insight_type: InsightType
    insight_text: str
    data_points: int = 0


@dataclass
class GenerationPreferences:
    """Optional steering for post generation."""
    content_format: Optional[str] = None
    topic: Optional[str] = None


@dataclass
class PostDraft:
    caption: str
    hashtags: List[str] = field(default_factory=list)
    format_tips: str = ""
    posting_tips: str = ""
    suggested_format: Optional[PostType] = None
