"""
Analysis Service Module

This module runs the two analysis stages of the dashboard:

- Post analysis: each of the user's unanalyzed posts (up to ANALYSIS_BATCH_SIZE
  per run) is sent to the reasoning provider one at a time. A failure on one
  post is logged and skipped; the rest of the batch carries on.
- Insight aggregation: the user's best-performing analyzed posts are summarized
  into a single prompt, and the resulting insights replace the user's previous
  set in one storage transaction.

Insight regeneration for a given user is serialized with an in-process lock,
so two overlapping requests cannot interleave their delete and insert.
"""

import threading
from contextlib import contextmanager
from typing import List, Dict

from config import settings
from data.models import PostAnalysis, NicheInsight
from data.protocols import GrowthStorage
from services.protocols import AIServiceProtocol
from utils.exceptions import (
    NoNicheError, InsufficientDataError, ReasoningServiceError
)
from utils.logger import get_logger

logger = get_logger(__name__)


class AnalysisService:
    """Service for per-post analysis and niche insight generation."""

    def __init__(self, storage: GrowthStorage, ai_service: AIServiceProtocol):
        """
        Args:
            storage: A GrowthStorage implementation.
            ai_service: An AIServiceProtocol implementation.
        """
        self.storage = storage
        self.ai_service = ai_service
        self._user_locks: Dict[str, threading.Lock] = {}
        self._user_locks_guard = threading.Lock()

    @contextmanager
    def _user_lock(self, user_id: str):
        with self._user_locks_guard:
            lock = self._user_locks.setdefault(user_id, threading.Lock())
        with lock:
            yield

    def analyze_unanalyzed_posts(self, user_id: str) -> List[PostAnalysis]:
        """
        Analyze the next batch of the user's posts that have no analysis yet.

        Posts are processed sequentially. A provider error, an unparseable
        response or a failed insert skips that post only.

        Returns:
            List[PostAnalysis]: The analyses that were stored (may be shorter than the batch).
        """
        posts = self.storage.get_unanalyzed_posts(user_id, settings.ANALYSIS_BATCH_SIZE)
        if not posts:
            logger.info(f"No unanalyzed posts for user {user_id}")
            return []

        logger.info(f"Analyzing {len(posts)} posts for user {user_id}")
        results = []
        for post in posts:
            try:
                analysis = self.ai_service.analyze_post(
                    post.caption or "",
                    str(post.post_type),
                    post.engagement_rate,
                    str(post.platform),
                )
                saved = self.storage.insert_post_analysis(PostAnalysis(
                    post_id=post.id,
                    hook_type=analysis.hook_type,
                    content_format=analysis.content_format,
                    topic=analysis.topic,
                    why_it_worked=analysis.why_it_worked,
                    sentiment=analysis.sentiment,
                    key_takeaways=analysis.key_takeaways or [],
                ))
                results.append(saved)
            except Exception as e:
                logger.error(f"Failed to analyze post {post.id}: {e}")

        logger.info(f"Analyzed {len(results)} of {len(posts)} posts for user {user_id}")
        return results

    def generate_insights_for_user(self, user_id: str) -> int:
        """
        Regenerate the user's niche insights from their analyzed posts.

        Returns:
            int: The number of insights stored.

        Raises:
            NoNicheError: If the user has no niche (checked before anything else).
            InsufficientDataError: If fewer than MIN_ANALYZED_POSTS_FOR_INSIGHTS posts are analyzed.
            ResponseParseError: If the provider response holds no JSON array.
            ReasoningServiceError: If the provider fails or returns no usable insights.
        """
        with self._user_lock(user_id):
            user = self.storage.get_user(user_id)
            if user is None or not user.niche:
                raise NoNicheError()

            posts = self.storage.get_analyzed_posts(user_id, settings.INSIGHT_SAMPLE_LIMIT)
            if len(posts) < settings.MIN_ANALYZED_POSTS_FOR_INSIGHTS:
                raise InsufficientDataError(
                    f"Need at least {settings.MIN_ANALYZED_POSTS_FOR_INSIGHTS} analyzed posts to generate insights"
                )

            logger.info(f"Generating insights for user {user_id} from {len(posts)} analyzed posts")
            drafts = self.ai_service.generate_niche_insights(posts, user.niche)
            if not drafts:
                # Keep the previous insight set rather than replacing it with nothing
                raise ReasoningServiceError("Reasoning provider returned no insights")

            count = self.storage.replace_niche_insights(user_id, [
                NicheInsight(
                    user_id=user_id,
                    insight_type=draft.insight_type,
                    insight_text=draft.insight_text,
                    data_points=draft.data_points or 0,
                )
                for draft in drafts
            ])

        logger.info(f"Stored {count} insights for user {user_id}")
        return count

    def list_insights(self, user_id: str) -> List[NicheInsight]:
        """Return the user's current insights, most recent first."""
        return self.storage.get_niche_insights(user_id)
