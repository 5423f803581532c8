"""
Service Protocol Definitions

This module defines typing.Protocol interfaces for services used in the Niche Growth
Dashboard. These protocols enable loose coupling, dependency injection, and easier testing.

Protocols defined:
- ReasoningClient: Interface for a raw LLM completion backend (Gemini, Anthropic)
- AIServiceProtocol: Interface for the structured analysis/insight/generation operations
- PlatformServiceProtocol: Interface for per-platform creator discovery and post ingestion
"""

from typing import Protocol, Optional, List

from data.models import (
    Platform, CreatorResult, PostResult, AnalysisResult, InsightDraft,
    Post, PostDraft, GenerationPreferences, NicheInsight
)


class ReasoningClient(Protocol):
    """Protocol for a single-turn LLM completion backend.

    Implementations must apply a request timeout and wrap provider failures in
    ReasoningServiceError.
    """

    def complete(self, prompt: str, max_tokens: int) -> str:
        """Send one prompt and return the response text.

        Args:
            prompt: The full user prompt.
            max_tokens: Upper bound on the response length.

        Returns:
            The raw response text (may contain markdown fences or prose).
        """
        ...


class AIServiceProtocol(Protocol):
    """Protocol defining the interface for AI-powered operations.

    Implementations should provide methods for:
    - Analyzing a single post's hook, format, topic and sentiment
    - Aggregating analyzed posts into niche insights
    - Generating a new post draft from insights
    """

    def analyze_post(self, caption: str, post_type: str, engagement_rate: float,
                     platform: str) -> AnalysisResult:
        """Analyze one post.

        Raises:
            ResponseParseError: If the response holds no JSON object.
            ReasoningServiceError: If the provider call fails.
        """
        ...

    def generate_niche_insights(self, posts: List[Post], niche: str) -> List[InsightDraft]:
        """Turn analyzed posts into niche-level insights.

        Raises:
            ResponseParseError: If the response holds no JSON array.
            ReasoningServiceError: If the provider call fails.
        """
        ...

    def generate_post(self, insights: List[NicheInsight], niche: str, platform: str,
                      preferences: Optional[GenerationPreferences] = None) -> PostDraft:
        """Generate a post draft for a platform.

        Raises:
            ResponseParseError: If the response holds no JSON object.
            ReasoningServiceError: If the provider call fails.
        """
        ...


class PlatformServiceProtocol(Protocol):
    """Protocol defining the interface for a social platform's content source.

    Both operations always return usable data: on provider failure or an empty
    result they fall back to generated fixture data.
    """

    platform: Platform

    def search_creators(self, niche: str) -> List[CreatorResult]:
        """Return creator candidates for a niche."""
        ...

    def fetch_posts(self, handle: str, cid: Optional[str] = None) -> List[PostResult]:
        """Return a creator's recent posts (at most MAX_POSTS_PER_CREATOR).

        A known provider creator id skips the profile lookup.
        """
        ...
