"""
Short-lived bearer token cache.

One CredentialCache instance owns one token. Concurrent callers that find the
token missing or about to expire are serialized behind a single lock, so only
one exchange with the identity provider is ever in flight; the callers queued
behind it reuse the token it stored.
"""

import threading
import time
from typing import Callable, Optional, Tuple

from .exceptions import AuthenticationError
from .logger import get_library_logger
from .models import CachedToken

# Seconds a returned token is guaranteed to stay valid
TOKEN_SAFETY_MARGIN = 60

# Returns (access_token, expires_in_seconds)
TokenExchange = Callable[[], Tuple[str, float]]


class CredentialCache:
    """Memoizes a bearer token until shortly before it expires."""

    def __init__(
        self,
        exchange: TokenExchange,
        safety_margin: float = TOKEN_SAFETY_MARGIN,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            exchange: Performs the credential exchange; raises
                ConfigurationError or AuthenticationError on failure
            safety_margin: Minimum remaining validity of a returned token
            clock: Monotonic time source in seconds
        """
        self._exchange = exchange
        self._safety_margin = safety_margin
        self._clock = clock
        self._lock = threading.Lock()
        self._cached: Optional[CachedToken] = None
        self.logger = get_library_logger()

    def get_token(self) -> str:
        """
        Return a token valid for at least the safety margin.

        Raises:
            ConfigurationError: If the exchange has no credentials to use
            AuthenticationError: If the identity provider rejects the exchange
        """
        with self._lock:
            cached = self._cached
            if cached is not None and cached.valid_for(self._safety_margin, self._clock()):
                return cached.token

            self.logger.info("Refreshing access token")
            started = self._clock()
            token, expires_in = self._exchange()
            if not token:
                raise AuthenticationError("Identity provider returned an empty access token")
            if float(expires_in) <= self._safety_margin:
                raise AuthenticationError(
                    f"Access token lifetime {expires_in}s is shorter than the {self._safety_margin}s safety margin"
                )

            refreshed = CachedToken(token=token, expires_at=started + float(expires_in))
            self._cached = refreshed
            self.logger.debug(f"Access token refreshed, expires in {float(expires_in):.0f}s")
            return refreshed.token

    def invalidate(self) -> None:
        """Drop the cached token so the next call performs a new exchange."""
        with self._lock:
            self._cached = None
