"""Configuration for fal.ai image generation."""

import os
from dataclasses import dataclass
from typing import Optional

from ...exceptions import ConfigurationError

DEFAULT_FAL_BASE_URL = "https://fal.run"
DEFAULT_PRIMARY_MODEL = "fal-ai/flux-pro/v1.1"
DEFAULT_FALLBACK_MODEL = "fal-ai/flux/dev"
ERROR_API_KEY_EMPTY = "FAL_KEY cannot be empty"


@dataclass
class FalConfig:
    """Configuration class for the primary and fallback image models on fal.ai."""

    # API Configuration
    api_key: str
    fallback_api_key: Optional[str] = None  # Falls back to api_key
    base_url: str = DEFAULT_FAL_BASE_URL
    primary_model: str = DEFAULT_PRIMARY_MODEL
    fallback_model: str = DEFAULT_FALLBACK_MODEL

    # Request defaults
    safety_tolerance: str = "2"
    num_images: int = 1
    request_timeout: float = 120

    @classmethod
    def from_environment(cls) -> "FalConfig":
        """
        Create configuration from environment variables.

        Returns:
            FalConfig: Configuration instance

        Raises:
            ConfigurationError: If FAL_KEY is missing
        """
        api_key = os.getenv("FAL_KEY")
        if not api_key:
            raise ConfigurationError(
                "Missing FAL_KEY in environment or .env file\n"
                "Set it with: export FAL_KEY=your_key_here\n"
                "Or create a .env file with: FAL_KEY=your_key_here"
            )

        return cls(
            api_key=api_key,
            fallback_api_key=os.getenv("FAL_FALLBACK_KEY") or None,
            base_url=os.getenv("FAL_BASE_URL", DEFAULT_FAL_BASE_URL),
            primary_model=os.getenv("FAL_PRIMARY_MODEL", DEFAULT_PRIMARY_MODEL),
            fallback_model=os.getenv("FAL_FALLBACK_MODEL", DEFAULT_FALLBACK_MODEL),
            safety_tolerance=os.getenv("FAL_SAFETY_TOLERANCE", "2"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If any configuration values are invalid
        """
        if not self.api_key:
            raise ConfigurationError(ERROR_API_KEY_EMPTY)

        if not self.base_url:
            raise ConfigurationError("FAL base URL cannot be empty")

        if self.num_images <= 0:
            raise ConfigurationError("num_images must be positive")

        if self.request_timeout <= 0:
            raise ConfigurationError("Request timeout must be positive")
