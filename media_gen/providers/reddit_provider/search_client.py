"""
Read-only Reddit search, authenticated through the shared CredentialCache.
"""

from typing import Any, Dict, List, Optional

import requests

from ...credential_cache import CredentialCache
from ...exceptions import GenerationError, RateLimitError, ValidationError
from ...logger import get_library_logger
from .auth import RedditTokenExchange
from .config import RedditConfig

SORT_OPTIONS = ("relevance", "hot", "top", "new", "comments")
TIME_FILTERS = ("hour", "day", "week", "month", "year", "all")


class RedditSearchClient:
    """Searches posts by keyword, optionally within one subreddit."""

    def __init__(self, config: RedditConfig, credential_cache: Optional[CredentialCache] = None):
        """
        Args:
            config: Reddit configuration
            credential_cache: Token cache to share; one is created around a
                RedditTokenExchange when omitted
        """
        config.validate()
        self.config = config
        self.logger = get_library_logger()
        self.credentials = credential_cache or CredentialCache(RedditTokenExchange(config))

    def search(
        self,
        keywords: str,
        subreddit: Optional[str] = None,
        limit: int = 10,
        sort: str = "relevance",
        time_filter: str = "year",
        timeout: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """
        Search posts.

        Returns:
            Post records as returned by the API (the ``data`` of each listing child)

        Raises:
            ValidationError: For empty keywords or unknown sort/time filter
            AuthenticationError: If a token cannot be obtained
            GenerationError: If the search request fails
        """
        if not keywords or not keywords.strip():
            raise ValidationError("Keywords are required")
        if sort not in SORT_OPTIONS:
            raise ValidationError(f"Unsupported sort '{sort}'. Use one of: {', '.join(SORT_OPTIONS)}")
        if time_filter not in TIME_FILTERS:
            raise ValidationError(f"Unsupported time filter '{time_filter}'. Use one of: {', '.join(TIME_FILTERS)}")

        path = f"r/{subreddit}/search" if subreddit else "search"
        params = {
            "q": keywords,
            "restrict_sr": "1" if subreddit else "0",
            "sort": sort,
            "limit": max(1, min(limit, 100)),
            "t": time_filter,
        }

        self.logger.info(f"Searching Reddit: '{keywords[:60]}' in {subreddit or 'all'}")
        response = self._get(path, params, timeout)
        if response.status_code == 401:
            # Token revoked or expired early; retry once with a fresh one
            self.logger.warning("Reddit rejected the cached token, refreshing")
            self.credentials.invalidate()
            response = self._get(path, params, timeout)

        if response.status_code == 429:
            raise RateLimitError("Reddit search rate limited (429)", provider="reddit")
        if response.status_code != 200:
            raise GenerationError(f"Reddit search failed: {response.status_code} {response.reason}", provider="reddit")

        try:
            listing = response.json()
        except ValueError as e:
            raise GenerationError(f"Reddit search returned invalid JSON: {e}", provider="reddit") from e

        children = (listing.get("data") or {}).get("children") or []
        posts = [child.get("data", {}) for child in children if isinstance(child, dict)]
        self.logger.debug(f"Reddit search returned {len(posts)} post(s)")
        return posts

    def _get(self, path: str, params: Dict[str, Any], timeout: Optional[float]):
        token = self.credentials.get_token()
        try:
            return requests.get(
                f"{self.config.api_base}/{path}",
                headers={
                    "Authorization": f"Bearer {token}",
                    "User-Agent": self.config.user_agent,
                },
                params=params,
                timeout=timeout or self.config.request_timeout
            )
        except requests.exceptions.RequestException as e:
            raise GenerationError(f"Reddit search request failed: {e}", provider="reddit") from e
