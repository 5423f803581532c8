"""
Statistics API Client

Thin HTTP client for the RapidAPI-hosted social statistics API, which covers
both Instagram and TikTok. It exposes the three calls ingestion needs:
creator search, creator id (cid) lookup by profile URL, and a creator's posts
within a date range.

Transport failures (network errors, HTTP error statuses, non-JSON bodies) are
raised as ContentProviderError. A well-formed reply whose meta code is not 200
is treated as "no results".
"""

from datetime import datetime
from typing import Optional, List, Dict, Any

import requests

from config import settings
from utils.exceptions import ContentProviderError
from utils.helpers import safe_get
from utils.logger import get_logger

logger = get_logger(__name__)

# Statistics API network codes
SOCIAL_TYPES = {
    "instagram": "INST",
    "tiktok": "TT",
}


def format_api_date(value: datetime) -> str:
    """Format a date the way the posts endpoint expects (dd.mm.YYYY)."""
    return value.strftime("%d.%m.%Y")


class StatisticsAPIClient:
    """Client for the social statistics API."""

    def __init__(self, api_key: Optional[str] = None, host: Optional[str] = None,
                 timeout: Optional[int] = None, session: Optional[requests.Session] = None):
        self.api_key = api_key if api_key is not None else settings.RAPIDAPI_KEY
        self.host = host or settings.STATISTICS_API_HOST
        self.timeout = timeout or settings.CONTENT_API_TIMEOUT
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "x-rapidapi-key": self.api_key or "",
            "x-rapidapi-host": self.host,
        }

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Perform a GET request and decode the JSON body.

        Raises:
            ContentProviderError: On network errors, HTTP errors or invalid JSON.
        """
        url = f"https://{self.host}{path}"
        try:
            response = self.session.get(url, params=params, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise ContentProviderError(f"Statistics API request to {path} failed: {e}") from e
        except ValueError as e:
            raise ContentProviderError(f"Statistics API returned invalid JSON for {path}: {e}") from e

        if not isinstance(payload, dict):
            raise ContentProviderError(f"Statistics API returned an unexpected body for {path}")
        return payload

    @staticmethod
    def _succeeded(payload: Dict[str, Any]) -> bool:
        return safe_get(payload, "meta", "code") == 200

    def search(self, platform: str, tag: Optional[str] = None, query: Optional[str] = None,
               limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Search creators by category tag or free-text query.

        Args:
            platform: 'instagram' or 'tiktok'
            tag: Category tag slug (used when given)
            query: Free-text search, used when no tag is given
            limit: Results per page (defaults to settings.CREATOR_SEARCH_LIMIT)

        Returns:
            List[Dict]: Raw creator records, sorted by descending average ER.
            Empty when the API reports a non-success code.
        """
        params = {
            "page": 1,
            "perPage": limit or settings.CREATOR_SEARCH_LIMIT,
            "sort": settings.CREATOR_SEARCH_SORT,
            "socialTypes": SOCIAL_TYPES[platform],
            "trackTotal": "true",
        }
        if tag:
            params["tags"] = tag
        else:
            params["q"] = query or ""

        payload = self._get("/search", params)
        if not self._succeeded(payload):
            logger.warning(f"Statistics API search returned code {safe_get(payload, 'meta', 'code')} "
                           f"for {platform} ({'tag' if tag else 'query'}={tag or query!r})")
            return []

        data = payload.get("data")
        return data if isinstance(data, list) else []

    def resolve_cid(self, profile_url: str) -> Optional[str]:
        """
        Look up a creator's cid from their canonical profile URL.

        Returns:
            Optional[str]: The cid, or None if the API does not know the profile.
        """
        payload = self._get("/community", {"url": profile_url})
        if not self._succeeded(payload):
            return None
        cid = safe_get(payload, "data", "cid") or payload.get("cid")
        return str(cid) if cid else None

    def get_posts(self, cid: str, date_from: datetime, date_to: datetime) -> List[Dict[str, Any]]:
        """
        Fetch a creator's posts published between two dates, newest first.

        Returns:
            List[Dict]: Raw post records (empty on a non-success code).
        """
        params = {
            "cid": cid,
            "from": format_api_date(date_from),
            "to": format_api_date(date_to),
            "type": "posts",
            "sort": "date",
        }
        payload = self._get("/posts", params)
        if not self._succeeded(payload):
            logger.warning(f"Statistics API posts returned code {safe_get(payload, 'meta', 'code')} for cid {cid}")
            return []

        posts = safe_get(payload, "data", "posts")
        return posts if isinstance(posts, list) else []
