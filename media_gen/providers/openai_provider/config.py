"""
Configuration for OpenAI chat refinement and speech synthesis.
"""

import os
from dataclasses import dataclass
from typing import Optional

from ...exceptions import ConfigurationError

DEFAULT_CHAT_MODEL = "gpt-4o"
DEFAULT_TTS_MODEL = "tts-1"
PLACEHOLDER_KEYS = ("your_openai_api_key_here", "your_api_key_here", "sk-...")


@dataclass
class OpenAIConfig:
    """Configuration class for OpenAI text and speech calls."""

    # API Configuration; None leaves prompt refinement in degraded mode
    api_key: Optional[str] = None
    chat_model: str = DEFAULT_CHAT_MODEL
    tts_model: str = DEFAULT_TTS_MODEL
    refine_temperature: float = 0.7
    request_timeout: float = 60

    @classmethod
    def from_environment(cls) -> "OpenAIConfig":
        """
        Create configuration from environment variables.

        OPENAI_API_KEY is optional here; clients that cannot work without it
        call require_api_key().
        """
        return cls(
            api_key=os.getenv("OPENAI_API_KEY") or None,
            chat_model=os.getenv("OPENAI_CHAT_MODEL", DEFAULT_CHAT_MODEL),
            tts_model=os.getenv("OPENAI_TTS_MODEL", DEFAULT_TTS_MODEL),
            refine_temperature=float(os.getenv("OPENAI_REFINE_TEMPERATURE", "0.7")),
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key) and self.api_key not in PLACEHOLDER_KEYS

    def require_api_key(self) -> str:
        """
        Return the API key or fail.

        Raises:
            ConfigurationError: If the key is missing or a placeholder
        """
        if not self.api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY not set. Get your API key from:\n"
                "https://platform.openai.com/api-keys\n"
                "and set it in your .env file: OPENAI_API_KEY=sk-..."
            )
        if self.api_key in PLACEHOLDER_KEYS:
            raise ConfigurationError(f"OPENAI_API_KEY appears to be a placeholder: '{self.api_key}'")
        return self.api_key

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If any configuration values are invalid
        """
        if not 0 <= self.refine_temperature <= 2:
            raise ConfigurationError("Refinement temperature must be between 0 and 2")

        if self.request_timeout <= 0:
            raise ConfigurationError("Request timeout must be positive")
