"""
Data Layer Protocol Definitions

This module defines typing.Protocol interfaces for data layer operations.
These protocols enable dependency injection for database operations,
making services testable without real database connections.

Protocols defined:
- GrowthStorage: Interface for users, tracked creators, posts, analyses,
  niche insights and generated posts
"""

from typing import Protocol, Optional, List

from data.models import (
    User, TrackedCreator, Post, PostAnalysis, NicheInsight, GeneratedPost
)


class GrowthStorage(Protocol):
    """Protocol defining the interface for the dashboard's persisted state.

    Implementations must enforce these uniqueness rules:
    - one TrackedCreator per (user_id, platform, handle)
    - one Post per (platform, external_id)
    - at most one PostAnalysis per Post

    This protocol abstracts database operations, allowing services to work
    with any compatible storage backend (real database, in-memory mock, etc.).
    """

    # -- users ---------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        """Return the user, or None if unknown."""
        ...

    def update_user_onboarding(
        self,
        user_id: str,
        niche: str,
        platforms: List[str],
        social_handle: Optional[str]
    ) -> User:
        """Store the onboarding answers and mark the user onboarded.

        Raises:
            NotFoundError: If the user does not exist.
        """
        ...

    # -- tracked creators ----------------------------------------------------

    def upsert_tracked_creator(self, creator: TrackedCreator) -> TrackedCreator:
        """Insert or update on (user_id, platform, handle); returns the stored row with its id."""
        ...

    def mark_creator_synced(self, creator_id: int) -> None:
        """Stamp last_synced with the current time."""
        ...

    def delete_tracked_creator(self, creator_id: int) -> bool:
        """Delete a tracked creator and its posts. Returns False if no row matched."""
        ...

    def get_tracked_creators(self, user_id: str, top_posts: int = 5) -> List[TrackedCreator]:
        """Return the user's creators, newest first, each with its top posts by engagement."""
        ...

    # -- posts ---------------------------------------------------------------

    def upsert_post(self, post: Post) -> Post:
        """Insert on (platform, external_id), or update counts and engagement only."""
        ...

    def get_unanalyzed_posts(self, user_id: str, limit: int) -> List[Post]:
        """Return up to ``limit`` of the user's posts with no analysis, in a stable order."""
        ...

    def get_analyzed_posts(self, user_id: str, limit: int) -> List[Post]:
        """Return up to ``limit`` analyzed posts (analysis attached), highest engagement first."""
        ...

    def insert_post_analysis(self, analysis: PostAnalysis) -> PostAnalysis:
        """Persist an analysis; returns it with its id."""
        ...

    # -- insights ------------------------------------------------------------

    def replace_niche_insights(self, user_id: str, insights: List[NicheInsight]) -> int:
        """Delete every insight of the user, then insert ``insights``, as one unit.

        Returns:
            The number of inserted insights.
        """
        ...

    def get_niche_insights(self, user_id: str, limit: Optional[int] = None) -> List[NicheInsight]:
        """Return the user's insights, most recently generated first."""
        ...

    # -- generated posts -----------------------------------------------------

    def insert_generated_post(self, post: GeneratedPost) -> GeneratedPost:
        """Append a generated post; returns it with its id."""
        ...

    def get_generated_posts(self, user_id: str, limit: int = 20) -> List[GeneratedPost]:
        """Return the user's generated posts, newest first."""
        ...
