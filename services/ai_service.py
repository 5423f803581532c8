"""
AI Service Module

This module turns reasoning-provider completions into typed results. It
provides post analysis, niche insight aggregation and post generation on top
of an injected ReasoningClient (Gemini or Anthropic, see services.ai_client).
"""

from typing import Optional, List, Dict, Any

from config import settings
from data.models import (
    Post, NicheInsight, AnalysisResult, InsightDraft, PostDraft, GenerationPreferences,
    HookType, Sentiment, InsightType, PostType
)
from services.protocols import ReasoningClient
from services.prompts import build_analysis_prompt, build_insights_prompt, build_generation_prompt
from services.response_parser import parse_json_response
from utils.exceptions import ResponseParseError
from utils.helpers import as_int
from utils.logger import get_logger

logger = get_logger(__name__)


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def normalize_hashtags(raw: Any, limit: Optional[int] = None) -> List[str]:
    """
    Strip leading '#' characters, drop blanks and cap the list.

    Args:
        raw: Whatever the provider returned for "hashtags".
        limit: Maximum number of tags (defaults to settings.MAX_HASHTAGS).
    """
    limit = settings.MAX_HASHTAGS if limit is None else limit
    tags = []
    for tag in _string_list(raw):
        tag = tag.lstrip("#").strip()
        if tag:
            tags.append(tag)
    return tags[:limit]


class AIService:
    """Service for AI operations through a ReasoningClient."""

    def __init__(self, client: ReasoningClient):
        """
        Initialize the AI service.

        Args:
            client: Any object implementing the ReasoningClient protocol.
        """
        self.client = client

    def analyze_post(self, caption: str, post_type: str, engagement_rate: float,
                     platform: str) -> AnalysisResult:
        """
        Analyze a single post's hook, format, topic and sentiment.

        Args:
            caption: The post caption (may be empty)
            post_type: Normalized post type, e.g. 'reel'
            engagement_rate: Engagement rate as a percentage
            platform: 'instagram' or 'tiktok'

        Returns:
            AnalysisResult: Enum fields fall back to OTHER/UNKNOWN when the provider strays.

        Raises:
            ResponseParseError: "Failed to parse analysis response"
            ReasoningServiceError: If the provider call fails
        """
        prompt = build_analysis_prompt(caption or "", str(post_type), engagement_rate, str(platform))
        response_text = self.client.complete(prompt, settings.ANALYSIS_MAX_TOKENS)
        data = parse_json_response(response_text, "object", "analysis")

        hook_type = HookType.from_value(data.get("hookType"))
        sentiment = Sentiment.from_value(data.get("sentiment"))
        if hook_type is HookType.OTHER and data.get("hookType") not in (None, "other"):
            logger.warning(f"Unrecognized hook type from provider: {data.get('hookType')!r}")
        if sentiment is Sentiment.UNKNOWN and data.get("sentiment") is not None:
            logger.warning(f"Unrecognized sentiment from provider: {data.get('sentiment')!r}")

        return AnalysisResult(
            hook_type=hook_type,
            content_format=_text(data, "contentFormat"),
            topic=_text(data, "topic"),
            why_it_worked=_text(data, "whyItWorked"),
            sentiment=sentiment,
            key_takeaways=_string_list(data.get("keyTakeaways")),
        )

    def generate_niche_insights(self, posts: List[Post], niche: str) -> List[InsightDraft]:
        """
        Aggregate analyzed posts into niche-level insights with one provider call.

        Array elements that are not objects or carry no insight text are dropped.

        Raises:
            ResponseParseError: "Failed to parse insights response"
            ReasoningServiceError: If the provider call fails
        """
        prompt = build_insights_prompt(posts, niche)
        response_text = self.client.complete(prompt, settings.INSIGHTS_MAX_TOKENS)
        items = parse_json_response(response_text, "array", "insights")

        insights = []
        for item in items:
            if not isinstance(item, dict):
                logger.warning(f"Skipping non-object insight element: {item!r}")
                continue
            text = _text(item, "insightText")
            if not text:
                logger.warning("Skipping insight without insightText")
                continue
            insights.append(InsightDraft(
                insight_type=InsightType.from_value(item.get("insightType")),
                insight_text=text,
                data_points=max(as_int(item.get("dataPoints")), 0),
            ))

        logger.info(f"Provider returned {len(insights)} usable insights for niche '{niche}'")
        return insights

    def generate_post(self, insights: List[NicheInsight], niche: str, platform: str,
                      preferences: Optional[GenerationPreferences] = None) -> PostDraft:
        """
        Generate a ready-to-publish post draft from niche insights.

        Raises:
            ResponseParseError: "Failed to parse generation response" (also when the caption is missing)
            ReasoningServiceError: If the provider call fails
        """
        prompt = build_generation_prompt(insights, niche, platform, preferences)
        response_text = self.client.complete(prompt, settings.GENERATION_MAX_TOKENS)
        data = parse_json_response(response_text, "object", "generation")

        caption = _text(data, "caption")
        if not caption:
            logger.warning("Generation response has no caption")
            raise ResponseParseError("generation", "missing caption")

        return PostDraft(
            caption=caption,
            hashtags=normalize_hashtags(data.get("hashtags")),
            format_tips=_text(data, "formatTips"),
            posting_tips=_text(data, "postingTips"),
            suggested_format=PostType.from_value(data.get("suggestedFormat")),
        )
