"""
Provider modules for media generation backends.

Each vendor lives in its own package named with a '_provider' suffix to
prevent shadowing the vendors' own PyPI packages.

Provider Modules:
- fal_provider: Flux image models on fal.ai (primary and fallback strategies)
- openai_provider: chat completions for prompt refinement, text-to-speech
- kling_provider: queue-based image-to-video generation
- reddit_provider: OAuth client-credentials exchange and read-only search

Every provider exports its configuration dataclass and its client classes.
"""

from .base import ImageProvider
from .fal_provider import FalConfig, FalImageProvider
from .openai_provider import OpenAIConfig, OpenAIChatClient, OpenAISpeechClient
from .kling_provider import KlingConfig, KlingVideoClient
from .reddit_provider import RedditConfig, RedditSearchClient

__all__ = [
    'ImageProvider',
    'FalConfig',
    'FalImageProvider',
    'OpenAIConfig',
    'OpenAIChatClient',
    'OpenAISpeechClient',
    'KlingConfig',
    'KlingVideoClient',
    'RedditConfig',
    'RedditSearchClient',
]
