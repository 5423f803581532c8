"""
User Service Module

Onboarding: recording a user's niche, target platforms and own handle.
"""

from typing import Optional, List

from config import settings
from data.models import User, Platform
from data.protocols import GrowthStorage
from utils.exceptions import InvalidInputError, NotFoundError, NoNicheError
from utils.logger import get_logger

logger = get_logger(__name__)


class UserService:
    """Service for user profile and onboarding state."""

    def __init__(self, storage: GrowthStorage):
        self.storage = storage

    def get_user(self, user_id: str) -> User:
        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def complete_onboarding(self, user_id: str, niche: Optional[str], platforms: Optional[List[str]],
                            social_handle: Optional[str] = None) -> User:
        """
        Store the user's onboarding answers and mark them onboarded.

        Args:
            user_id: The user
            niche: One of config.niches.NICHES or any free-text niche
            platforms: Non-empty subset of SUPPORTED_PLATFORMS
            social_handle: The user's own handle (optional, '@' is stripped)

        Returns:
            User: The updated user.
        """
        niche = (niche or "").strip()
        if not niche:
            raise NoNicheError("Niche is required")

        normalized = []
        for name in platforms or []:
            platform = Platform.from_value(name)
            if platform is None or platform.value not in settings.SUPPORTED_PLATFORMS:
                raise InvalidInputError(f"Unsupported platform: {name}")
            if platform.value not in normalized:
                normalized.append(platform.value)
        if not normalized:
            raise InvalidInputError("Select at least one platform")

        handle = (social_handle or "").strip().lstrip("@") or None

        user = self.storage.update_user_onboarding(user_id, niche, normalized, handle)
        logger.info(f"User {user_id} onboarded: niche='{niche}', platforms={normalized}")
        return user
