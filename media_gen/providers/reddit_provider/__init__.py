"""Reddit provider for read-only discussion search."""

from .config import RedditConfig
from .auth import RedditTokenExchange
from .search_client import RedditSearchClient

__all__ = ["RedditConfig", "RedditTokenExchange", "RedditSearchClient"]
