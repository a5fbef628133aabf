"""Voiceover synthesis. There is no fallback provider for speech."""

from typing import Optional

import openai

from .exceptions import GenerationError, ValidationError
from .logger import get_library_logger
from .models import VoiceoverResult
from .providers.openai_provider import OpenAISpeechClient

VOICES = ("alloy", "echo", "fable", "onyx", "nova", "shimmer")
AUDIO_FORMAT = "mp3"


class VoiceoverSynthesizer:
    """Turns text into speech audio."""

    def __init__(self, speech_client: OpenAISpeechClient, validate_voice: bool = True):
        """
        Args:
            speech_client: Speech provider client
            validate_voice: Reject unknown voices locally; when False they are
                sent as-is and the provider's rejection surfaces as GenerationError
        """
        self.speech_client = speech_client
        self.validate_voice = validate_voice
        self.logger = get_library_logger()

    def synthesize(self, text: str, voice: str = "alloy", timeout: Optional[float] = None) -> VoiceoverResult:
        """
        Raises:
            ValidationError: For empty text or, when validating, an unknown voice
            GenerationError: If the provider fails
        """
        if not text or not text.strip():
            raise ValidationError("Input text is required")
        if self.validate_voice and voice not in VOICES:
            raise ValidationError(f"Unknown voice '{voice}'. Use one of: {', '.join(VOICES)}")

        try:
            audio = self.speech_client.create_speech(text, voice, timeout=timeout)
        except openai.APIError as e:
            self.logger.error(f"Speech synthesis failed: {e}")
            raise GenerationError(f"TTS failed: {getattr(e, 'message', None) or e}", provider="openai") from e

        if not audio:
            raise GenerationError("TTS returned no audio", provider="openai")

        self.logger.info(f"Voiceover synthesized: {len(audio)} bytes")
        return VoiceoverResult(audio=audio, format=AUDIO_FORMAT, text=text, voice=voice)
