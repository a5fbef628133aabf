"""Kling provider for image-to-video generation."""

from .config import KlingConfig, SUPPORTED_DURATIONS
from .video_client import KlingVideoClient

__all__ = ["KlingConfig", "KlingVideoClient", "SUPPORTED_DURATIONS"]
