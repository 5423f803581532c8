"""
Prompt Templates

Builders for the three reasoning prompts: single-post analysis, niche insight
aggregation and post generation. Each asks for bare JSON; response_parser
copes with the fenced or chatty replies that come back anyway.
"""

from typing import List, Optional

from config import settings
from data.models import Post, NicheInsight, GenerationPreferences


def build_analysis_prompt(caption: str, post_type: str, engagement_rate: float, platform: str) -> str:
    return f"""Analyze this {platform} {post_type} post. Return JSON only, no markdown.

Caption: "{caption}"
Engagement Rate: {engagement_rate:.2f}%
Format: {post_type}

Return this exact JSON structure:
{{
  "hookType": "question|bold_statement|story|statistic|controversial|how_to|listicle|behind_the_scenes|other",
  "contentFormat": "description of the content format and style",
  "topic": "main topic/theme",
  "whyItWorked": "2-3 sentence explanation of why this post performed well",
  "sentiment": "positive|negative|neutral|inspirational|educational|entertaining",
  "keyTakeaways": ["takeaway 1", "takeaway 2", "takeaway 3"]
}}"""


def summarize_post(index: int, post: Post) -> str:
    """One numbered summary line per post, e.g. ``1. [instagram/reel] Hook: question | ER: 4.20% | "..."``."""
    hook = post.analysis.hook_type.value if post.analysis and post.analysis.hook_type else "unknown"
    caption = (post.caption or "")[:settings.INSIGHT_CAPTION_PREVIEW_LENGTH]
    return (f'{index}. [{post.platform}/{post.post_type}] Hook: {hook} | '
            f'ER: {post.engagement_rate:.2f}% | "{caption}..."')


def build_insights_prompt(posts: List[Post], niche: str) -> str:
    summary = "\n".join(summarize_post(i, post) for i, post in enumerate(posts, start=1))

    return f"""You are a social media analyst. Analyze these {len(posts)} posts from the "{niche}" niche and generate actionable insights.

Posts:
{summary}

Return a JSON array of insights. Each insight should have:
{{
  "insightType": "format|timing|hook|topic|engagement",
  "insightText": "Clear, actionable insight with specific data (e.g., 'Carousel posts get 2.3x more engagement than static posts in your niche')",
  "dataPoints": number_of_posts_supporting_this
}}

Generate 5-8 insights. Be specific with numbers and percentages. JSON array only, no markdown."""


def build_generation_prompt(insights: List[NicheInsight], niche: str, platform: str,
                            preferences: Optional[GenerationPreferences] = None) -> str:
    insight_lines = "\n".join(
        f"{i}. [{insight.insight_type}] {insight.insight_text}"
        for i, insight in enumerate(insights, start=1)
    )

    preference_lines = []
    if preferences and preferences.content_format:
        preference_lines.append(f"Preferred format: {preferences.content_format}")
    if preferences and preferences.topic:
        preference_lines.append(f"Topic/angle: {preferences.topic}")
    preferences_block = ("\n" + "\n".join(preference_lines) + "\n") if preference_lines else ""

    return f"""You are an expert {platform} content strategist for the "{niche}" niche. Using the insights below about what performs well in this niche, write one ready-to-publish post.

Insights:
{insight_lines}
{preferences_block}
Requirements:
1. Open the caption with a scroll-stopping hook
2. End the caption with a clear call-to-action
3. Include up to {settings.MAX_HASHTAGS} relevant hashtags, without the # symbol
4. Apply the insights above wherever they fit

Return this exact JSON structure:
{{
  "caption": "the full post caption",
  "hashtags": ["hashtag1", "hashtag2"],
  "formatTips": "how to produce the visual/video side of the post",
  "postingTips": "when and how to publish for best reach",
  "suggestedFormat": "reel|carousel|static|story|video"
}}

JSON only, no markdown."""
