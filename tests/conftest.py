"""
Shared Test Fixtures for the Niche Growth Dashboard

This module provides common fixtures used across all test modules.
Fixtures include an in-memory storage backend, a scripted reasoning client,
mocks for database connections, logging and HTTP responses, and data
factories for test objects.
"""

import pytest
from unittest.mock import MagicMock, patch
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List
import dataclasses
import itertools
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.models import (
    User, TrackedCreator, Post, PostAnalysis, NicheInsight, GeneratedPost,
    Platform, PostType, HookType, Sentiment, InsightType
)
from utils.exceptions import NotFoundError, QueryError


# =============================================================================
# In-Memory Storage
# =============================================================================

class InMemoryStorage:
    """
    GrowthStorage implementation backed by dictionaries.

    Enforces the same uniqueness rules as the SQL schema and records the
    order of insight writes in ``calls`` so tests can check delete-before-insert.
    """

    def __init__(self):
        self.users: Dict[str, User] = {}
        self.creators: Dict[int, TrackedCreator] = {}
        self.posts: Dict[int, Post] = {}
        self.analyses: Dict[int, PostAnalysis] = {}
        self.insights: List[NicheInsight] = []
        self.generated: List[GeneratedPost] = []
        self.calls: List[str] = []
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    # -- helpers for tests ---------------------------------------------------

    def add_user(self, user_id: str = "user-1", niche: Optional[str] = "Fitness & Health",
                 platforms: Optional[List[str]] = None) -> User:
        user = User(id=user_id, niche=niche, platforms=platforms or ["instagram"], onboarded=bool(niche))
        self.users[user_id] = user
        return user

    def add_creator(self, user_id: str = "user-1", handle: str = "fitness_pro",
                    platform: Platform = Platform.INSTAGRAM, follower_count: int = 10000) -> TrackedCreator:
        return self.upsert_tracked_creator(TrackedCreator(
            user_id=user_id, platform=platform, handle=handle, follower_count=follower_count
        ))

    def add_post(self, creator: TrackedCreator, external_id: str, engagement_rate: float = 1.0,
                 caption: str = "A caption", post_type: PostType = PostType.REEL) -> Post:
        return self.upsert_post(Post(
            creator_id=creator.id, platform=creator.platform, external_id=external_id,
            post_type=post_type, caption=caption, engagement_rate=engagement_rate
        ))

    def add_analysis(self, post: Post, hook_type: HookType = HookType.QUESTION) -> PostAnalysis:
        return self.insert_post_analysis(PostAnalysis(
            post_id=post.id, hook_type=hook_type, content_format="Talking head",
            topic="Training", why_it_worked="It asks a question.", sentiment=Sentiment.EDUCATIONAL,
            key_takeaways=["Ask questions"]
        ))

    def seed_analyzed_posts(self, user_id: str, count: int, creator: Optional[TrackedCreator] = None) -> List[Post]:
        creator = creator or self.add_creator(user_id, handle=f"seed_{user_id}")
        posts = []
        for i in range(count):
            post = self.add_post(creator, f"seed_{user_id}_{i}", engagement_rate=float(i + 1))
            self.add_analysis(post)
            posts.append(post)
        return posts

    # -- users ---------------------------------------------------------------

    def get_user(self, user_id):
        user = self.users.get(user_id)
        return dataclasses.replace(user, platforms=list(user.platforms)) if user else None

    def update_user_onboarding(self, user_id, niche, platforms, social_handle):
        if user_id not in self.users:
            raise NotFoundError(f"User {user_id} not found")
        user = self.users[user_id]
        user.niche = niche
        user.platforms = list(platforms)
        user.social_handle = social_handle
        user.onboarded = True
        return self.get_user(user_id)

    # -- tracked creators ----------------------------------------------------

    def upsert_tracked_creator(self, creator):
        for existing in self.creators.values():
            if (existing.user_id, str(existing.platform), existing.handle) == \
                    (creator.user_id, str(creator.platform), creator.handle):
                existing.display_name = creator.display_name
                existing.follower_count = creator.follower_count
                existing.bio = creator.bio
                existing.avatar_url = creator.avatar_url
                existing.cid = creator.cid or existing.cid
                return dataclasses.replace(existing, posts=[])
        stored = dataclasses.replace(creator, id=next(self._ids), created_at=self._tick(), posts=[])
        self.creators[stored.id] = stored
        return dataclasses.replace(stored)

    def mark_creator_synced(self, creator_id):
        self.creators[creator_id].last_synced = self._tick()

    def delete_tracked_creator(self, creator_id):
        if creator_id not in self.creators:
            return False
        del self.creators[creator_id]
        for post_id in [pid for pid, p in self.posts.items() if p.creator_id == creator_id]:
            del self.posts[post_id]
            self.analyses.pop(post_id, None)
        return True

    def get_tracked_creators(self, user_id, top_posts=5):
        creators = sorted(
            (c for c in self.creators.values() if c.user_id == user_id),
            key=lambda c: c.created_at, reverse=True
        )
        result = []
        for creator in creators:
            posts = sorted(
                (self._with_analysis(p) for p in self.posts.values() if p.creator_id == creator.id),
                key=lambda p: (-p.engagement_rate, p.id)
            )
            result.append(dataclasses.replace(creator, posts=posts[:top_posts]))
        return result

    # -- posts ---------------------------------------------------------------

    def _user_posts(self, user_id):
        creator_ids = {c.id for c in self.creators.values() if c.user_id == user_id}
        return [p for p in self.posts.values() if p.creator_id in creator_ids]

    def _with_analysis(self, post):
        return dataclasses.replace(post, analysis=self.analyses.get(post.id))

    def upsert_post(self, post):
        for existing in self.posts.values():
            if (str(existing.platform), existing.external_id) == (str(post.platform), post.external_id):
                existing.likes = post.likes
                existing.comments = post.comments
                existing.shares = post.shares
                existing.views = post.views
                existing.engagement_rate = post.engagement_rate
                return dataclasses.replace(existing)
        stored = dataclasses.replace(post, id=next(self._ids), analysis=None)
        self.posts[stored.id] = stored
        return dataclasses.replace(stored)

    def get_unanalyzed_posts(self, user_id, limit):
        posts = sorted((p for p in self._user_posts(user_id) if p.id not in self.analyses), key=lambda p: p.id)
        return [dataclasses.replace(p) for p in posts[:limit]]

    def get_analyzed_posts(self, user_id, limit):
        posts = sorted(
            (self._with_analysis(p) for p in self._user_posts(user_id) if p.id in self.analyses),
            key=lambda p: (-p.engagement_rate, p.id)
        )
        return posts[:limit]

    def insert_post_analysis(self, analysis):
        if analysis.post_id in self.analyses:
            raise QueryError(f"Post {analysis.post_id} already has an analysis")
        stored = dataclasses.replace(analysis, id=next(self._ids), created_at=self._tick())
        self.analyses[analysis.post_id] = stored
        return stored

    # -- insights ------------------------------------------------------------

    def replace_niche_insights(self, user_id, insights):
        self.calls.append("delete_insights")
        self.insights = [i for i in self.insights if i.user_id != user_id]
        self.calls.append("insert_insights")
        for insight in insights:
            self.insights.append(dataclasses.replace(insight, id=next(self._ids), generated_at=self._tick()))
        return len(insights)

    def get_niche_insights(self, user_id, limit=None):
        insights = sorted(
            (i for i in self.insights if i.user_id == user_id),
            key=lambda i: (i.generated_at, i.id), reverse=True
        )
        return insights[:limit] if limit else insights

    # -- generated posts -----------------------------------------------------

    def insert_generated_post(self, post):
        stored = dataclasses.replace(post, id=next(self._ids), generated_at=self._tick())
        self.generated.append(stored)
        return stored

    def get_generated_posts(self, user_id, limit=20):
        posts = sorted((p for p in self.generated if p.user_id == user_id),
                       key=lambda p: (p.generated_at, p.id), reverse=True)
        return posts[:limit]


@pytest.fixture
def storage():
    """Empty in-memory GrowthStorage."""
    return InMemoryStorage()


# =============================================================================
# Reasoning Client Fixtures
# =============================================================================

class ScriptedReasoningClient:
    """
    ReasoningClient that replays canned responses in order.

    Each scripted item is either a response string or an exception instance
    to raise. Every prompt received is kept in ``prompts``.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.prompts: List[str] = []
        self.max_tokens: List[int] = []

    def complete(self, prompt: str, max_tokens: int) -> str:
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        if not self.responses:
            raise AssertionError("ScriptedReasoningClient received an unexpected call")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def reasoning_client():
    """
    Factory fixture for scripted reasoning clients.

    Usage:
        def test_analysis(reasoning_client):
            client = reasoning_client('{"hookType": "question"}')
    """
    def _create(*responses):
        return ScriptedReasoningClient(responses)
    return _create


@pytest.fixture
def analysis_json():
    """A well-formed analysis response body."""
    return (
        '{"hookType": "question", "contentFormat": "Talking head reel", "topic": "Home workouts", '
        '"whyItWorked": "It opens with a question. Viewers answer in comments.", '
        '"sentiment": "educational", "keyTakeaways": ["Open with a question", "Keep it short"]}'
    )


@pytest.fixture
def insights_json():
    """A well-formed insights response body."""
    return (
        '[{"insightType": "format", "insightText": "Reels get 2.1x the engagement of static posts", "dataPoints": 12},'
        ' {"insightType": "hook", "insightText": "Question hooks lead the top 10 posts", "dataPoints": 7},'
        ' {"insightType": "timing", "insightText": "Morning posts outperform evening posts", "dataPoints": 5}]'
    )


@pytest.fixture
def generation_json():
    """A well-formed post generation response body."""
    return (
        '{"caption": "Stop scrolling! Here is the 10-minute routine that changed everything. Save this.", '
        '"hashtags": ["#fitness", "homeworkout", "", "#fitfam"], '
        '"formatTips": "Film in portrait with captions", "postingTips": "Post at 7am", '
        '"suggestedFormat": "reel"}'
    )


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def mock_db_connection():
    """
    Mock pyodbc database connection and cursor.

    This fixture provides a mock database connection that simulates
    pyodbc behavior without requiring an actual database connection.

    Usage:
        def test_database(mock_db_connection):
            conn, cursor = mock_db_connection
            cursor.description = [('User_ID',), ('Niche',)]
            cursor.fetchall.return_value = [('user-1', 'Travel')]

    Returns:
        tuple: A tuple of (mock_connection, mock_cursor).
    """
    mock_cursor = MagicMock()
    mock_cursor.description = None
    mock_cursor.fetchall.return_value = []
    mock_cursor.fetchone.return_value = None
    mock_cursor.rowcount = 0

    mock_conn = MagicMock()
    mock_conn.cursor.return_value = mock_cursor
    mock_conn.commit.return_value = None
    mock_conn.rollback.return_value = None
    mock_conn.close.return_value = None

    with patch('pyodbc.connect', return_value=mock_conn):
        yield mock_conn, mock_cursor


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def capture_logs():
    """
    Capture log messages for assertion in tests.

    Returns:
        list: A list that will contain captured log records.
    """
    import logging

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(handler)

    yield handler.records

    root_logger.removeHandler(handler)
    root_logger.setLevel(original_level)


# =============================================================================
# HTTP Response Fixtures
# =============================================================================

@pytest.fixture
def mock_http_response():
    """
    Factory fixture for creating mock HTTP responses.

    Usage:
        def test_http_request(mock_http_response):
            response = mock_http_response(json_data={'meta': {'code': 200}, 'data': []})

    Returns:
        callable: A factory function for creating mock responses.
    """
    def _create_response(
        status_code: int = 200,
        json_data: Optional[Any] = None,
        text: str = '',
        url: str = 'https://instagram-statistics-api.p.rapidapi.com',
    ) -> MagicMock:
        import json
        from requests.exceptions import HTTPError

        mock_response = MagicMock()
        mock_response.status_code = status_code
        mock_response.url = url
        mock_response.ok = 200 <= status_code < 300
        mock_response.text = text or (json.dumps(json_data) if json_data is not None else '')

        if json_data is not None:
            mock_response.json.return_value = json_data
        else:
            mock_response.json.side_effect = ValueError("No JSON data")

        if status_code >= 400:
            mock_response.raise_for_status.side_effect = HTTPError(
                f"{status_code} Error",
                response=mock_response
            )
        else:
            mock_response.raise_for_status.return_value = None

        return mock_response

    return _create_response


@pytest.fixture
def mock_session(mock_http_response):
    """
    A requests.Session stand-in whose get() returns scripted responses.

    Usage:
        def test_api(mock_session):
            mock_session.queue({'meta': {'code': 200}, 'data': []})
    """
    session = MagicMock()
    responses = []

    def _get(url, params=None, headers=None, timeout=None):
        if not responses:
            raise AssertionError(f"Unexpected GET {url}")
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def _queue(*items, status_code=200):
        for item in items:
            if isinstance(item, Exception) or isinstance(item, MagicMock):
                responses.append(item)
            else:
                responses.append(mock_http_response(status_code=status_code, json_data=item))

    session.get.side_effect = _get
    session.queue = _queue
    return session


# =============================================================================
# Data Model Factories
# =============================================================================

@pytest.fixture
def post_factory():
    """
    Factory fixture for creating Post test objects.

    Usage:
        def test_post(post_factory):
            post = post_factory(post_id=3, engagement_rate=4.2)
    """
    def _create_post(
        post_id: int = 1,
        platform: Platform = Platform.INSTAGRAM,
        post_type: PostType = PostType.REEL,
        caption: str = "Test caption for unit testing.",
        engagement_rate: float = 3.5,
        hook_type: Optional[HookType] = None,
    ) -> Post:
        analysis = None
        if hook_type is not None:
            analysis = PostAnalysis(
                post_id=post_id, hook_type=hook_type, content_format="", topic="",
                why_it_worked="", sentiment=Sentiment.NEUTRAL
            )
        return Post(
            id=post_id, creator_id=1, platform=platform, external_id=f"ext-{post_id}",
            post_type=post_type, caption=caption, engagement_rate=engagement_rate,
            analysis=analysis
        )

    return _create_post


@pytest.fixture
def insight_factory():
    """Factory fixture for NicheInsight test objects."""
    def _create_insight(
        text: str = "Carousels outperform static posts",
        insight_type: InsightType = InsightType.FORMAT,
        user_id: str = "user-1",
    ) -> NicheInsight:
        return NicheInsight(user_id=user_id, insight_type=insight_type, insight_text=text, data_points=4)

    return _create_insight


# =============================================================================
# External API Fixtures
# =============================================================================

@pytest.fixture
def mock_genai():
    """
    Mock the Google GenAI client used by GeminiClient.

    Returns:
        MagicMock: The patched genai module.
    """
    with patch('services.ai_client.genai') as mock_genai_module:
        mock_client = MagicMock()
        mock_genai_module.Client.return_value = mock_client

        mock_model = MagicMock()
        mock_model.name = 'models/gemini-2.0-flash'
        mock_client.models.list.return_value = [mock_model]

        mock_response = MagicMock()
        mock_response.text = "Generated test content"
        mock_client.models.generate_content.return_value = mock_response

        yield mock_genai_module
