"""
Tests for the LLM response parser.

Covers direct JSON, markdown-fenced JSON, JSON surrounded by prose, and the
failure cases that must surface as ResponseParseError.
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.response_parser import extract_json, parse_json_response
from utils.exceptions import ResponseParseError, ReasoningServiceError


class TestExtractJson:
    """Tests for extract_json's two-step strategy."""

    def test_bare_object(self):
        """A bare JSON object parses directly."""
        result = extract_json('{"hookType": "question"}', "object")
        assert result.ok
        assert result.value == {"hookType": "question"}

    def test_bare_array(self):
        """A bare JSON array parses directly."""
        result = extract_json('[{"insightType": "hook"}]', "array")
        assert result.ok
        assert result.value == [{"insightType": "hook"}]

    def test_fenced_object_matches_bare(self):
        """A markdown-fenced object yields the same value as the bare text."""
        bare = '{"caption": "Hello", "hashtags": ["a"]}'
        fenced = f"```json\n{bare}\n```"
        assert extract_json(fenced, "object").value == extract_json(bare, "object").value

    def test_fenced_array_matches_bare(self):
        """A markdown-fenced array yields the same value as the bare text."""
        bare = '[{"insightType": "format", "insightText": "x", "dataPoints": 2}]'
        fenced = f"```json\n{bare}\n```"
        assert extract_json(fenced, "array").value == extract_json(bare, "array").value

    def test_object_with_surrounding_prose(self):
        """Prose before and after the object is ignored."""
        text = 'Sure! Here is the analysis:\n{"topic": "travel"}\nLet me know if you need more.'
        result = extract_json(text, "object")
        assert result.ok
        assert result.value == {"topic": "travel"}

    def test_wrong_shape_falls_back_to_search(self):
        """An array answer for an object request is searched for an object."""
        result = extract_json('[{"topic": "travel"}]', "object")
        assert result.ok
        assert result.value == {"topic": "travel"}

    def test_plain_text_fails(self):
        """Text without any JSON is a failed parse, not an exception."""
        result = extract_json("I cannot help with that.", "object")
        assert not result.ok
        assert result.value is None
        assert result.error

    def test_empty_text_fails(self):
        """None and whitespace are failed parses."""
        assert not extract_json(None, "array").ok
        assert not extract_json("   ", "array").ok

    def test_broken_json_in_braces_fails(self):
        """A brace span that is not valid JSON fails."""
        result = extract_json("{not: valid, json}", "object")
        assert not result.ok

    def test_unknown_expectation_raises(self):
        """Only 'object' and 'array' are accepted."""
        with pytest.raises(ValueError):
            extract_json("{}", "string")


class TestParseJsonResponse:
    """Tests for the raising wrapper."""

    @pytest.mark.parametrize("operation", ["analysis", "insights", "generation"])
    def test_error_names_operation(self, operation):
        """The error message names the failing operation."""
        with pytest.raises(ResponseParseError) as exc_info:
            parse_json_response("no json here", "object", operation)
        assert str(exc_info.value) == f"Failed to parse {operation} response"
        assert exc_info.value.operation == operation

    def test_parse_error_is_reasoning_error(self):
        """Parse failures belong to the reasoning-service error family."""
        with pytest.raises(ReasoningServiceError):
            parse_json_response("", "array", "insights")

    def test_returns_value(self):
        """A parseable response returns the decoded value."""
        assert parse_json_response('```\n[1, 2]\n```', "array", "insights") == [1, 2]
