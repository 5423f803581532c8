"""
Tests for the Generation Service.

Covers precondition ordering and messages, preference handling, the stored
format fallback and generated-post history.
"""

import pytest
from unittest.mock import MagicMock
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.models import InsightType, NicheInsight, GeneratedPost
from services.ai_service import AIService
from services.generation_service import GenerationService
from utils.exceptions import (
    MissingPlatformError, NoNicheError, MissingInsightsError, InvalidInputError, ResponseParseError
)


def make_service(storage, client):
    return GenerationService(storage, AIService(client))


def seed_insights(storage, user_id="user-1", count=3):
    storage.replace_niche_insights(user_id, [
        NicheInsight(user_id=user_id, insight_type=InsightType.FORMAT, insight_text=f"Insight {i}", data_points=i)
        for i in range(count)
    ])


class TestPreconditions:
    """Checks run before the reasoning provider is called."""

    def test_missing_platform(self, storage, reasoning_client):
        """No platform: 'Platform is required'."""
        client = reasoning_client()
        with pytest.raises(MissingPlatformError) as exc_info:
            make_service(storage, client).generate_for_user("user-1", None)
        assert str(exc_info.value) == "Platform is required"
        assert client.prompts == []

    def test_unsupported_platform(self, storage, reasoning_client):
        """Unknown platforms are rejected."""
        storage.add_user("user-1")
        with pytest.raises(InvalidInputError):
            make_service(storage, reasoning_client()).generate_for_user("user-1", "myspace")

    def test_no_niche(self, storage, reasoning_client):
        """No niche: 'Please set your niche in Settings first'."""
        storage.add_user("user-1", niche=None)
        seed_insights(storage)
        with pytest.raises(NoNicheError) as exc_info:
            make_service(storage, reasoning_client()).generate_for_user("user-1", "instagram")
        assert str(exc_info.value) == "Please set your niche in Settings first"

    def test_no_insights(self, storage, reasoning_client):
        """No insights: the generate-insights-first message."""
        storage.add_user("user-1")
        client = reasoning_client()
        with pytest.raises(MissingInsightsError) as exc_info:
            make_service(storage, client).generate_for_user("user-1", "instagram")
        assert str(exc_info.value) == "No insights available. Generate insights first by analyzing posts."
        assert client.prompts == []

    def test_platform_checked_before_niche(self, storage, reasoning_client):
        """A missing platform is reported even when the niche is also missing."""
        storage.add_user("user-1", niche=None)
        with pytest.raises(MissingPlatformError):
            make_service(storage, reasoning_client()).generate_for_user("user-1", "")


class TestGenerateForUser:
    """Tests for a successful generation."""

    def test_stores_draft(self, storage, reasoning_client, generation_json):
        """The draft is normalized and appended to history."""
        storage.add_user("user-1")
        seed_insights(storage)

        post = make_service(storage, reasoning_client(generation_json)).generate_for_user("user-1", "instagram")

        assert post.id is not None
        assert post.platform == "instagram"
        assert post.caption.startswith("Stop scrolling!")
        assert post.hashtags == ["fitness", "homeworkout", "fitfam"]
        assert post.content_format == "reel"
        assert post.topic is None
        assert storage.generated == [post]

    def test_unknown_suggestion_falls_back_to_preference(self, storage, reasoning_client):
        """An unrecognized suggested format stores the requested format instead."""
        storage.add_user("user-1")
        seed_insights(storage)
        response = '{"caption": "Hi", "hashtags": [], "suggestedFormat": "hologram"}'

        post = make_service(storage, reasoning_client(response)).generate_for_user(
            "user-1", "tiktok", content_format="carousel", topic="Budget travel"
        )

        assert post.content_format == "carousel"
        assert post.topic == "Budget travel"

    def test_preferences_reach_prompt(self, storage, reasoning_client, generation_json):
        """Format and topic preferences are included in the prompt."""
        storage.add_user("user-1", niche="Travel")
        seed_insights(storage)
        client = reasoning_client(generation_json)

        make_service(storage, client).generate_for_user("user-1", "tiktok", "video", "Hidden beaches")

        prompt = client.prompts[0]
        assert "expert tiktok content strategist" in prompt
        assert 'for the "Travel" niche' in prompt
        assert "Preferred format: video" in prompt
        assert "Topic/angle: Hidden beaches" in prompt

    def test_uses_ten_most_recent_insights(self, storage, reasoning_client, generation_json):
        """Only the ten newest insights are sent."""
        storage.add_user("user-1")
        seed_insights(storage, count=12)
        client = reasoning_client(generation_json)

        make_service(storage, client).generate_for_user("user-1", "instagram")

        prompt = client.prompts[0]
        assert "Insight 11" in prompt
        assert "Insight 2" in prompt
        assert "Insight 1\n" not in prompt
        assert "Insight 0" not in prompt

    def test_parse_failure_stores_nothing(self, storage, reasoning_client):
        """A non-JSON reply fails with the generation parse error."""
        storage.add_user("user-1")
        seed_insights(storage)

        with pytest.raises(ResponseParseError, match="Failed to parse generation response"):
            make_service(storage, reasoning_client("Here you go!")).generate_for_user("user-1", "instagram")

        assert storage.generated == []


class TestHistory:
    """Tests for list_generated_posts."""

    def test_history_newest_first_and_limited(self, storage, reasoning_client):
        """At most twenty posts, newest first."""
        for i in range(25):
            storage.insert_generated_post(GeneratedPost(user_id="user-1", platform="instagram", caption=f"c{i}"))

        history = make_service(storage, reasoning_client()).list_generated_posts("user-1")

        assert len(history) == 20
        assert history[0].caption == "c24"

    def test_history_passes_limit(self):
        """The configured limit is passed through to storage."""
        storage = MagicMock()
        storage.get_generated_posts.return_value = []

        GenerationService(storage, MagicMock()).list_generated_posts("user-1")

        storage.get_generated_posts.assert_called_once_with("user-1", limit=20)
