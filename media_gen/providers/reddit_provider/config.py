"""Reddit search configuration."""

import os
from dataclasses import dataclass

from ...exceptions import ConfigurationError

DEFAULT_USER_AGENT = "LaunchPad/1.0"
TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
API_BASE = "https://oauth.reddit.com"


@dataclass
class RedditConfig:
    """Configuration class for the read-only Reddit search integration."""

    client_id: str
    client_secret: str
    user_agent: str = DEFAULT_USER_AGENT
    token_url: str = TOKEN_URL
    api_base: str = API_BASE
    request_timeout: float = 20

    @classmethod
    def from_environment(cls) -> "RedditConfig":
        """
        Create configuration from environment variables.

        Raises:
            ConfigurationError: If the client credentials are missing
        """
        client_id = os.getenv("REDDIT_CLIENT_ID")
        client_secret = os.getenv("REDDIT_CLIENT_SECRET")
        if not client_id or not client_secret:
            raise ConfigurationError(
                "Missing Reddit API credentials in environment or .env file\n"
                "Set REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET"
            )

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            user_agent=os.getenv("REDDIT_USER_AGENT", DEFAULT_USER_AGENT),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If any configuration values are invalid
        """
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("Reddit client ID and secret cannot be empty")

        if self.request_timeout <= 0:
            raise ConfigurationError("Request timeout must be positive")
