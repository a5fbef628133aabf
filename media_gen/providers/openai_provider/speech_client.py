"""
OpenAI text-to-speech client.
"""

from typing import Optional

from openai import OpenAI

from ...logger import get_library_logger
from .config import OpenAIConfig


class OpenAISpeechClient:
    """Calls the speech endpoint and returns raw audio bytes."""

    def __init__(self, config: OpenAIConfig, client: Optional[OpenAI] = None):
        """
        Raises:
            ConfigurationError: If no API key is configured
        """
        self.config = config
        self.logger = get_library_logger()
        self.client = client or OpenAI(api_key=config.require_api_key(), max_retries=0)
        self.logger.debug("OpenAISpeechClient initialized")

    def create_speech(self, text: str, voice: str, model: Optional[str] = None, timeout: Optional[float] = None) -> bytes:
        """
        Synthesize ``text`` with ``voice``.

        Raises:
            openai.APIError: If the provider rejects the request
        """
        selected_model = model or self.config.tts_model
        self.logger.info(f"Synthesizing speech: model={selected_model}, voice={voice}, {len(text)} chars")

        response = self.client.audio.speech.create(
            model=selected_model,
            input=text,
            voice=voice,
            timeout=timeout or self.config.request_timeout,
        )
        return response.content
