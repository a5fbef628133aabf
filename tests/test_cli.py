import argparse
import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch, MagicMock

from media_gen import cli
from media_gen.cli import create_parser, handle_exceptions, main, run_command
from media_gen.exceptions import ConfigurationError, GenerationError, ValidationError
from media_gen.models import GenerationPrompt, ImageResult, VideoJob, VideoStatus, VoiceoverResult


class TestCreateParser(unittest.TestCase):
    """Test argument parser creation and configuration."""

    def setUp(self):
        self.parser = create_parser()

    def test_parser_creation(self):
        self.assertIsInstance(self.parser, argparse.ArgumentParser)
        self.assertEqual(self.parser.prog, "mediagen")

    def test_command_required(self):
        with self.assertRaises(SystemExit):
            self.parser.parse_args([])

    def test_image_defaults(self):
        args = self.parser.parse_args(["image", "-p", "a shoe"])
        self.assertEqual(args.command, "image")
        self.assertEqual(args.aspect_ratio, "16:9")
        self.assertIsNone(args.reference_image)
        self.assertFalse(args.verbose)

    def test_aspect_ratio_choices(self):
        with self.assertRaises(SystemExit):
            self.parser.parse_args(["image", "-p", "a shoe", "--aspect-ratio", "4:3"])

    def test_duration_choices(self):
        args = self.parser.parse_args(["animate", "--image-url", "u", "--duration", "3"])
        self.assertEqual(args.duration, 3)
        with self.assertRaises(SystemExit):
            self.parser.parse_args(["animate", "--image-url", "u", "--duration", "10"])

    def test_refine_assets_repeatable(self):
        args = self.parser.parse_args(["refine", "-p", "p", "-i", "i", "--asset", "Cap", "--asset", "Mug"])
        self.assertEqual(args.asset, ["Cap", "Mug"])

    def test_verbose_flag(self):
        args = self.parser.parse_args(["-v", "providers"])
        self.assertTrue(args.verbose)


class TestRunCommand(unittest.TestCase):
    def setUp(self):
        self.orchestrator = MagicMock()
        self.parser = create_parser()

    def run_args(self, argv):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            run_command(self.parser.parse_args(argv), self.orchestrator)
        return buffer.getvalue()

    def test_image(self):
        self.orchestrator.generate_image.return_value = ImageResult(
            url="https://x/img1.png", prompt="p", provider="primary", model="fal-ai/flux-pro/v1.1"
        )
        output = self.run_args(["image", "-p", "a red shoe", "--aspect-ratio", "1:1"])

        self.orchestrator.generate_image.assert_called_once_with("a red shoe", "1:1", None)
        self.assertIn("https://x/img1.png", output)

    def test_refine(self):
        self.orchestrator.refine_prompt.return_value = GenerationPrompt(text="refined text")
        output = self.run_args(["refine", "-p", "p", "-i", "night"])
        self.assertIn("refined text", output)

    def test_voiceover_writes_file(self):
        self.orchestrator.synthesize_voiceover.return_value = VoiceoverResult(
            audio=b"audio", format="mp3", text="hi", voice="alloy"
        )
        with tempfile.TemporaryDirectory() as temp_dir:
            target = Path(temp_dir) / "out" / "intro.mp3"
            self.run_args(["voiceover", "-t", "hi", "-o", str(target)])
            self.assertEqual(target.read_bytes(), b"audio")

    def test_animate_prints_url(self):
        self.orchestrator.animate_image.return_value = VideoJob(
            job_id="j", status=VideoStatus.COMPLETED, result_url="https://v/video.mp4"
        )
        output = self.run_args(["animate", "--image-url", "https://x/img.png"])
        self.assertIn("https://v/video.mp4", output)


class TestHandleExceptions(unittest.TestCase):
    def assert_exits(self, error, expected_text):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            with self.assertRaises(SystemExit) as ctx:
                handle_exceptions(error)
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn(expected_text, buffer.getvalue())

    def test_configuration_error(self):
        self.assert_exits(ConfigurationError("Missing FAL_KEY"), "Configuration Error")

    def test_validation_error(self):
        self.assert_exits(ValidationError("bad ratio"), "Input Error")

    def test_generation_error_shows_user_message(self):
        self.assert_exits(GenerationError("All image providers failed"), "Generation failed. Try again.")

    def test_unexpected_error(self):
        self.assert_exits(RuntimeError("boom"), "boom")


class TestMain(unittest.TestCase):
    @patch.object(cli, "print_available_providers")
    def test_providers_command(self, mock_print):
        main(["providers"])
        mock_print.assert_called_once()

    @patch.object(cli, "init_library_logger")
    @patch.object(cli, "GenerationOrchestrator")
    def test_keyboard_interrupt_exits_130(self, mock_orchestrator, mock_logger):
        mock_orchestrator.from_environment.return_value.generate_image.side_effect = KeyboardInterrupt
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["image", "-p", "a shoe"])
        self.assertEqual(ctx.exception.code, 130)

    @patch.object(cli, "init_library_logger")
    @patch.object(cli, "GenerationOrchestrator")
    def test_errors_exit_1(self, mock_orchestrator, mock_logger):
        mock_orchestrator.from_environment.return_value.generate_image.side_effect = GenerationError("down")
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["image", "-p", "a shoe"])
        self.assertEqual(ctx.exception.code, 1)
        mock_logger.assert_called_once_with(verbose=False, log_to_file=True)


if __name__ == "__main__":
    unittest.main()
