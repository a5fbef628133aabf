"""OpenAI provider for prompt refinement and speech synthesis."""

from .config import OpenAIConfig
from .chat_client import OpenAIChatClient
from .speech_client import OpenAISpeechClient

__all__ = ["OpenAIConfig", "OpenAIChatClient", "OpenAISpeechClient"]
