"""
Response Parser Module

LLM responses are supposed to be bare JSON, but providers regularly wrap them
in markdown fences or add a sentence before or after. This module pulls the
JSON value out of such text.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

from utils.exceptions import ResponseParseError
from utils.logger import get_logger

logger = get_logger(__name__)

# Greedy: first opening bracket to last closing bracket
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")

_EXPECTED_TYPES = {
    "object": (dict, _OBJECT_PATTERN),
    "array": (list, _ARRAY_PATTERN),
}


@dataclass
class ParseResult:
    ok: bool
    value: Any = None
    error: Optional[str] = None


def extract_json(text: Optional[str], expect: str = "object") -> ParseResult:
    """
    Extract a JSON object or array from free-form model output.

    The whole text is tried first; failing that, the widest bracketed span of
    the expected kind is parsed.

    Args:
        text: Raw response text.
        expect: 'object' or 'array'.

    Returns:
        ParseResult: ok=True with the decoded value, or ok=False with an error message.
    """
    if expect not in _EXPECTED_TYPES:
        raise ValueError(f"expect must be 'object' or 'array', got {expect!r}")
    expected_type, pattern = _EXPECTED_TYPES[expect]

    if not text or not text.strip():
        return ParseResult(ok=False, error="empty response")

    try:
        value = json.loads(text)
        if isinstance(value, expected_type):
            return ParseResult(ok=True, value=value)
    except ValueError:
        pass

    match = pattern.search(text)
    if not match:
        return ParseResult(ok=False, error=f"no JSON {expect} found")

    try:
        value = json.loads(match.group(0))
    except ValueError as e:
        return ParseResult(ok=False, error=f"invalid JSON {expect}: {e}")

    if not isinstance(value, expected_type):
        return ParseResult(ok=False, error=f"expected JSON {expect}")
    return ParseResult(ok=True, value=value)


def parse_json_response(text: Optional[str], expect: str, operation: str) -> Any:
    """
    Like extract_json, but raise on failure.

    Raises:
        ResponseParseError: With the message "Failed to parse {operation} response".
    """
    result = extract_json(text, expect)
    if not result.ok:
        preview = (text or "")[:200]
        logger.warning(f"Could not parse {operation} response ({result.error}): {preview!r}")
        raise ResponseParseError(operation, result.error or "")
    return result.value
