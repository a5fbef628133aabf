import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock

import openai

from media_gen.exceptions import ConfigurationError, GenerationError, ValidationError
from media_gen.providers.openai_provider import OpenAIConfig, OpenAISpeechClient
from media_gen.voiceover import VoiceoverSynthesizer


class TestVoiceoverSynthesizer(unittest.TestCase):
    def setUp(self):
        self.speech = MagicMock()
        self.speech.create_speech.return_value = b"ID3audio"
        self.synthesizer = VoiceoverSynthesizer(self.speech)

    def test_synthesize(self):
        result = self.synthesizer.synthesize("Meet the new runner", voice="nova", timeout=10)

        self.assertEqual(result.audio, b"ID3audio")
        self.assertEqual(result.format, "mp3")
        self.assertEqual(result.voice, "nova")
        self.speech.create_speech.assert_called_once_with("Meet the new runner", "nova", timeout=10)

    def test_empty_text(self):
        with self.assertRaises(ValidationError):
            self.synthesizer.synthesize("   ")
        self.speech.create_speech.assert_not_called()

    def test_unknown_voice(self):
        with self.assertRaises(ValidationError):
            self.synthesizer.synthesize("hello", voice="robot")
        self.speech.create_speech.assert_not_called()

    def test_unknown_voice_passed_through_without_validation(self):
        synthesizer = VoiceoverSynthesizer(self.speech, validate_voice=False)
        synthesizer.synthesize("hello", voice="robot")
        self.speech.create_speech.assert_called_once()

    def test_provider_error(self):
        self.speech.create_speech.side_effect = openai.APIError("voice unavailable", request=MagicMock(), body=None)

        with self.assertRaises(GenerationError) as ctx:
            self.synthesizer.synthesize("hello")

        self.assertIn("TTS failed", str(ctx.exception))

    def test_empty_audio(self):
        self.speech.create_speech.return_value = b""
        with self.assertRaises(GenerationError):
            self.synthesizer.synthesize("hello")


class TestOpenAISpeechClient(unittest.TestCase):
    def test_create_speech(self):
        sdk = MagicMock()
        sdk.audio.speech.create.return_value = SimpleNamespace(content=b"audio")
        client = OpenAISpeechClient(OpenAIConfig(api_key="sk-test"), client=sdk)

        self.assertEqual(client.create_speech("hi", "alloy"), b"audio")

        kwargs = sdk.audio.speech.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "tts-1")
        self.assertEqual(kwargs["input"], "hi")
        self.assertEqual(kwargs["voice"], "alloy")

    def test_placeholder_key_rejected(self):
        with self.assertRaises(ConfigurationError):
            OpenAISpeechClient(OpenAIConfig(api_key="your_openai_api_key_here"))


if __name__ == "__main__":
    unittest.main()
