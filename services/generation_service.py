"""
Generation Service Module

Generates ready-to-publish post drafts from a user's niche insights and keeps
an append-only history of what was generated.
"""

from typing import Optional, List

from config import settings
from data.models import GeneratedPost, GenerationPreferences, Platform
from data.protocols import GrowthStorage
from services.protocols import AIServiceProtocol
from utils.exceptions import (
    MissingPlatformError, NoNicheError, MissingInsightsError, InvalidInputError, NotFoundError
)
from utils.logger import get_logger

logger = get_logger(__name__)


class GenerationService:
    """Service for insight-driven post generation."""

    def __init__(self, storage: GrowthStorage, ai_service: AIServiceProtocol):
        self.storage = storage
        self.ai_service = ai_service

    def generate_for_user(self, user_id: str, platform: Optional[str],
                          content_format: Optional[str] = None,
                          topic: Optional[str] = None) -> GeneratedPost:
        """
        Generate and store a post draft for one of the user's platforms.

        The ten most recent insights steer the draft. The stored format is the
        provider's suggestion, or the requested format when the suggestion is
        missing or unrecognized.

        Args:
            user_id: The requesting user
            platform: 'instagram' or 'tiktok' (required)
            content_format: Optional preferred format, e.g. 'carousel'
            topic: Optional topic or angle

        Returns:
            GeneratedPost: The stored draft.

        Raises:
            MissingPlatformError: "Platform is required"
            NoNicheError: "Please set your niche in Settings first"
            MissingInsightsError: If the user has no insights yet
            ResponseParseError: "Failed to parse generation response"
            ReasoningServiceError: If the provider call fails
        """
        if not platform:
            raise MissingPlatformError()
        resolved = Platform.from_value(platform)
        if resolved is None or resolved.value not in settings.SUPPORTED_PLATFORMS:
            raise InvalidInputError(f"Unsupported platform: {platform}")

        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        if not user.niche:
            raise NoNicheError("Please set your niche in Settings first")

        insights = self.storage.get_niche_insights(user_id, limit=settings.GENERATION_INSIGHT_LIMIT)
        if not insights:
            raise MissingInsightsError()

        preferences = GenerationPreferences(content_format=content_format or None, topic=topic or None)
        logger.info(f"Generating {resolved} post for user {user_id} from {len(insights)} insights")
        draft = self.ai_service.generate_post(insights, user.niche, resolved.value, preferences)

        suggested = draft.suggested_format.value if draft.suggested_format else None
        saved = self.storage.insert_generated_post(GeneratedPost(
            user_id=user_id,
            platform=resolved.value,
            caption=draft.caption,
            hashtags=draft.hashtags,
            format_tips=draft.format_tips,
            posting_tips=draft.posting_tips,
            content_format=suggested or preferences.content_format,
            topic=preferences.topic,
        ))
        logger.info(f"Stored generated post {saved.id} for user {user_id}")
        return saved

    def list_generated_posts(self, user_id: str) -> List[GeneratedPost]:
        """Return the user's most recent generated posts, newest first."""
        return self.storage.get_generated_posts(user_id, limit=settings.GENERATED_POST_HISTORY_LIMIT)
