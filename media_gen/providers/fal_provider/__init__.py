"""fal.ai provider for image generation."""

from .config import FalConfig
from .image_client import FalImageProvider, create_primary_provider, create_fallback_provider

__all__ = ["FalConfig", "FalImageProvider", "create_primary_provider", "create_fallback_provider"]
