"""Kling image-to-video configuration."""

import os
from dataclasses import dataclass

from ...exceptions import ConfigurationError

DEFAULT_KLING_API_BASE = "https://api.klingai.com/v1"
SUPPORTED_DURATIONS = (3, 5)
ERROR_API_KEY_EMPTY = "KLING_API_KEY cannot be empty"


@dataclass
class KlingConfig:
    """Configuration class for Kling video generation."""

    # API Configuration
    api_key: str
    base_url: str = DEFAULT_KLING_API_BASE

    # Default video settings
    default_duration: int = 5
    default_aspect_ratio: str = "9:16"
    cfg_scale: float = 5  # 0-10, faithfulness to the prompt

    # Polling configuration
    poll_interval: float = 5        # Seconds between status checks
    job_timeout: float = 300        # Overall wait for a terminal status
    request_timeout: float = 30     # Per HTTP request
    max_poll_failures: int = 3      # Consecutive failed polls before giving up

    @classmethod
    def from_environment(cls) -> "KlingConfig":
        """
        Create configuration from environment variables.

        Returns:
            KlingConfig: Configuration instance

        Raises:
            ConfigurationError: If KLING_API_KEY is missing
        """
        api_key = os.getenv("KLING_API_KEY")
        if not api_key:
            raise ConfigurationError(
                "Missing KLING_API_KEY in environment or .env file\n"
                "Set it with: export KLING_API_KEY=your_key_here"
            )

        return cls(
            api_key=api_key,
            base_url=os.getenv("KLING_API_BASE", DEFAULT_KLING_API_BASE),
            cfg_scale=float(os.getenv("KLING_CFG_SCALE", "5")),
            poll_interval=float(os.getenv("MEDIA_GEN_POLL_INTERVAL", "5")),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If any configuration values are invalid
        """
        if not self.api_key:
            raise ConfigurationError(ERROR_API_KEY_EMPTY)

        if self.default_duration not in SUPPORTED_DURATIONS:
            raise ConfigurationError(f"Default duration must be one of {SUPPORTED_DURATIONS}")

        if not 0 <= self.cfg_scale <= 10:
            raise ConfigurationError("cfg_scale must be between 0 and 10")

        if self.poll_interval <= 0 or self.job_timeout <= 0 or self.request_timeout <= 0:
            raise ConfigurationError("Poll interval and timeouts must be positive")

        if self.max_poll_failures < 1:
            raise ConfigurationError("max_poll_failures must be at least 1")
