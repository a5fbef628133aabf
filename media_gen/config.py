"""
Configuration module for media generation.

Handles environment variables, .env loading, per-step timeouts and the
availability report for every provider.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Literal

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .providers.fal_provider import FalConfig
from .providers.openai_provider import OpenAIConfig
from .providers.kling_provider import KlingConfig
from .providers.reddit_provider import RedditConfig

load_dotenv()

Capability = Literal["image", "refine", "video", "voiceover", "search"]
CAPABILITIES: List[str] = ["image", "refine", "video", "voiceover", "search"]


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{value}'")


@dataclass
class OrchestratorConfig:
    """Deadlines, step timeouts and retry settings for orchestrated operations."""

    # Overall per-operation deadline in seconds
    deadline: float = 600

    # Individual step timeouts in seconds
    refine_timeout: float = 30
    image_timeout: float = 120
    video_submit_timeout: float = 30
    video_timeout: float = 300
    voiceover_timeout: float = 60
    search_timeout: float = 20

    # Concurrent image generation
    max_workers: int = 4

    # Caller-side retry configuration
    retry_base_delay: float = 2
    retry_max_delay: float = 60
    retry_jitter_percent: float = 0.2

    @classmethod
    def from_environment(cls) -> "OrchestratorConfig":
        """Create configuration from MEDIA_GEN_* environment variables."""
        return cls(
            deadline=_env_float("MEDIA_GEN_DEADLINE", 600),
            refine_timeout=_env_float("MEDIA_GEN_REFINE_TIMEOUT", 30),
            image_timeout=_env_float("MEDIA_GEN_IMAGE_TIMEOUT", 120),
            video_timeout=_env_float("MEDIA_GEN_VIDEO_TIMEOUT", 300),
            voiceover_timeout=_env_float("MEDIA_GEN_VOICEOVER_TIMEOUT", 60),
            search_timeout=_env_float("MEDIA_GEN_SEARCH_TIMEOUT", 20),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If any configuration values are invalid
        """
        timeouts = (
            self.deadline, self.refine_timeout, self.image_timeout, self.video_submit_timeout,
            self.video_timeout, self.voiceover_timeout, self.search_timeout,
        )
        if any(value <= 0 for value in timeouts):
            raise ConfigurationError("Deadline and step timeouts must be positive")

        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")


def get_available_providers() -> List[str]:
    """
    Get list of capabilities whose credentials are present in the environment.

    Prompt refinement is always available; without OPENAI_API_KEY it runs in
    degraded mode.
    """
    checks = {
        "image": lambda: bool(os.getenv("FAL_KEY")),
        "refine": lambda: True,
        "video": lambda: bool(os.getenv("KLING_API_KEY")),
        "voiceover": lambda: bool(os.getenv("OPENAI_API_KEY")),
        "search": lambda: bool(os.getenv("REDDIT_CLIENT_ID") and os.getenv("REDDIT_CLIENT_SECRET")),
    }
    return [capability for capability, check in checks.items() if check()]


def get_capability_requirements() -> Dict[str, str]:
    """Environment variables each capability needs."""
    return {
        "image": "FAL_KEY",
        "refine": "OPENAI_API_KEY (optional; degraded mode without it)",
        "video": "KLING_API_KEY",
        "voiceover": "OPENAI_API_KEY",
        "search": "REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET",
    }


def print_available_providers() -> None:
    """Print all capabilities with their availability status and requirements."""
    print("=" * 70)
    print("Media Generation Capabilities")
    print("=" * 70)

    available = get_available_providers()
    requirements = get_capability_requirements()

    for capability in CAPABILITIES:
        status = "✅ Available" if capability in available else "❌ Not configured"
        print(f"\n  {capability:<10} {status}")
        print(f"  Requires: {requirements[capability]}")

    print("\n" + "=" * 70)


__all__ = [
    "OrchestratorConfig",
    "FalConfig",
    "OpenAIConfig",
    "KlingConfig",
    "RedditConfig",
    "get_available_providers",
    "get_capability_requirements",
    "print_available_providers",
]
