"""
Reddit OAuth2 client-credentials exchange.
"""

from typing import Tuple

import requests

from ...exceptions import AuthenticationError, ConfigurationError
from ...logger import get_library_logger
from .config import RedditConfig


class RedditTokenExchange:
    """Callable that trades the app's client credentials for a bearer token."""

    def __init__(self, config: RedditConfig):
        self.config = config
        self.logger = get_library_logger()

    def __call__(self) -> Tuple[str, float]:
        """
        Perform the exchange.

        Returns:
            (access_token, expires_in seconds)

        Raises:
            ConfigurationError: If client credentials are not configured
            AuthenticationError: If the identity provider rejects the exchange
        """
        if not self.config.client_id or not self.config.client_secret:
            raise ConfigurationError("Reddit API credentials not configured")

        try:
            response = requests.post(
                self.config.token_url,
                auth=(self.config.client_id, self.config.client_secret),
                headers={"User-Agent": self.config.user_agent},
                data={"grant_type": "client_credentials"},
                timeout=self.config.request_timeout
            )
        except requests.exceptions.RequestException as e:
            raise AuthenticationError(f"Reddit token exchange failed: {e}") from e

        if response.status_code != 200:
            self.logger.error(f"Reddit token exchange rejected ({response.status_code})")
            raise AuthenticationError(f"Reddit auth failed: {response.status_code} {response.reason}")

        try:
            data = response.json()
            return data["access_token"], float(data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            raise AuthenticationError(f"Reddit token response malformed: {e}") from e
