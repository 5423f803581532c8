"""
Helper Utility Module

This module provides various helper functions used throughout the dashboard.
"""

from typing import Optional, Dict, Any, Tuple
from datetime import datetime, timedelta, timezone


def safe_get(data: Dict[str, Any], *keys, default: Any = None) -> Any:
    """
    Safely get a value from a nested dictionary.

    Args:
        data: The dictionary to search
        *keys: The keys to follow
        default: Default value if key doesn't exist

    Returns:
        The value at the specified keys or the default value
    """
    for key in keys:
        try:
            data = data[key]
        except (KeyError, TypeError, IndexError):
            return default
    return data


def get_date_range(days_back: int = 7, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Get a date range from now to X days back.

    Args:
        days_back: Number of days to go back
        now: Reference point (defaults to the current UTC time)

    Returns:
        Tuple: (start_date, end_date)
    """
    end_date = now or datetime.now(timezone.utc)
    start_date = end_date - timedelta(days=days_back)
    return start_date, end_date


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as returned by the statistics API.

    Args:
        value: The raw value (usually a string ending in 'Z')

    Returns:
        Optional[datetime]: The parsed timestamp, or None if missing or invalid
    """
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None


def compute_engagement_rate(likes: int, comments: int, shares: int, follower_count: int) -> float:
    """
    Compute engagement rate as a percentage of followers.

    Args:
        likes: Like count
        comments: Comment count
        shares: Share/repost count
        follower_count: Followers of the creator (must be positive)

    Returns:
        float: (likes + comments + shares) / followers * 100
    """
    if follower_count <= 0:
        raise ValueError("follower_count must be positive")
    return (likes + comments + shares) / follower_count * 100


def as_int(value: Any, default: int = 0) -> int:
    """Coerce an API number (possibly None or a float) to int."""
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default
