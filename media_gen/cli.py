#!/usr/bin/env python3
"""
Media Generation CLI - Produce marketing assets using AI models

A command-line front end for GenerationOrchestrator. Each sub-command runs
one orchestrated operation; `bundle` runs the whole pipeline.

Examples:
    mediagen image -p "a red shoe on a white background" --aspect-ratio 1:1
    mediagen refine -p "A sneaker on a desk" -i "make it night time" --asset "Logo Cap"
    mediagen animate --image-url https://example.com/shoe.png -p "slow orbit" -v
    mediagen voiceover -t "Meet the new runner" --voice nova -o intro.mp3
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config import print_available_providers
from .deadline import Deadline
from .exceptions import (
    ConfigurationError,
    MediaGenerationError,
    OperationCancelledError,
    OperationTimeoutError,
    ValidationError,
    describe_error,
)
from .logger import init_library_logger
from .models import SUPPORTED_ASPECT_RATIOS
from .orchestrator import BundleRequest, GenerationOrchestrator
from .providers.kling_provider import SUPPORTED_DURATIONS
from .providers.reddit_provider.search_client import SORT_OPTIONS, TIME_FILTERS
from .voiceover import VOICES


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mediagen",
        description="Generate marketing images, videos and voiceovers using AI services",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  FAL_KEY               image generation
  OPENAI_API_KEY        prompt refinement and voiceover
  KLING_API_KEY         image-to-video animation
  REDDIT_CLIENT_ID      discussion search (with REDDIT_CLIENT_SECRET)

Run 'mediagen providers' to see which capabilities are configured.
        """
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output for detailed processing information"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    refine = subparsers.add_parser("refine", help="Rewrite a prompt from an edit instruction")
    refine.add_argument("-p", "--prompt", required=True, help="Existing image prompt")
    refine.add_argument("-i", "--instruction", required=True, help="Natural-language edit instruction")
    refine.add_argument("--asset", action="append", default=[], help="Name of a newly added asset (repeatable)")

    image = subparsers.add_parser("image", help="Generate one image")
    image.add_argument("-p", "--prompt", required=True, help="Image prompt")
    _add_aspect_ratio(image)
    image.add_argument("--reference-image", help="URL of a reference image (best effort)")

    animate = subparsers.add_parser("animate", help="Animate an image into a short video")
    animate.add_argument("--image-url", required=True, help="URL of the image to animate")
    animate.add_argument("-p", "--prompt", default="", help="Motion prompt (optional)")
    _add_duration(animate)
    _add_aspect_ratio(animate)

    voiceover = subparsers.add_parser("voiceover", help="Synthesize a voiceover")
    voiceover.add_argument("-t", "--text", required=True, help="Narration text")
    voiceover.add_argument("--voice", default="alloy", choices=VOICES, help="Voice (default: alloy)")
    voiceover.add_argument("-o", "--output", default="voiceover.mp3", help="Output audio path (default: voiceover.mp3)")

    search = subparsers.add_parser("search", help="Search community discussions")
    search.add_argument("-k", "--keywords", required=True, help="Search keywords")
    search.add_argument("--subreddit", help="Restrict the search to one community")
    search.add_argument("--limit", type=int, default=10, help="Maximum results, 1-100 (default: 10)")
    search.add_argument("--sort", default="relevance", choices=SORT_OPTIONS, help="Sort order (default: relevance)")
    search.add_argument("--time", dest="time_filter", default="year", choices=TIME_FILTERS,
                        help="Time window (default: year)")

    bundle = subparsers.add_parser("bundle", help="Run the full pipeline: refine, image, animate, voiceover")
    bundle.add_argument("-p", "--prompt", required=True, help="Image prompt")
    bundle.add_argument("-i", "--instruction", help="Edit instruction applied before generation")
    bundle.add_argument("--asset", action="append", default=[], help="Name of a newly added asset (repeatable)")
    _add_aspect_ratio(bundle)
    bundle.add_argument("--reference-image", help="URL of a reference image (best effort)")
    bundle.add_argument("--animate", action="store_true", help="Animate the generated image")
    bundle.add_argument("--motion-prompt", help="Motion prompt for the animation (default: image prompt)")
    _add_duration(bundle)
    bundle.add_argument("--voiceover-text", help="Narration to synthesize")
    bundle.add_argument("--voice", default="alloy", choices=VOICES, help="Voice (default: alloy)")
    bundle.add_argument("-o", "--output", help="Where to save the voiceover audio")
    bundle.add_argument("--deadline", type=float, help="Overall deadline in seconds (default: MEDIA_GEN_DEADLINE or 600)")

    subparsers.add_parser("providers", help="List configured capabilities")

    return parser


def _add_aspect_ratio(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--aspect-ratio",
        default="16:9",
        choices=SUPPORTED_ASPECT_RATIOS,
        help="Aspect ratio (default: 16:9)"
    )


def _add_duration(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--duration",
        type=int,
        default=5,
        choices=SUPPORTED_DURATIONS,
        help="Video duration in seconds (default: 5)"
    )


def print_progress(message: str, progress: float) -> None:
    print(f"   [{progress:>4.0%}] {message}")


def save_audio(audio: bytes, output: str) -> Path:
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(audio)
    return path


def run_command(args: argparse.Namespace, orchestrator: GenerationOrchestrator) -> None:
    """Dispatch one parsed sub-command to the orchestrator and print its result."""
    if args.command == "refine":
        prompt = orchestrator.refine_prompt(args.prompt, args.instruction, args.asset)
        print("\n✅ Refined prompt:")
        print(f"   {prompt.text}")

    elif args.command == "image":
        result = orchestrator.generate_image(args.prompt, args.aspect_ratio, args.reference_image)
        print(f"\n✅ Image generated by {result.provider} provider ({result.model})")
        print(f"   {result.url}")

    elif args.command == "animate":
        print("\n🚀 Submitting animation job...")
        print("   This may take several minutes.")
        job = orchestrator.animate_image(
            args.image_url,
            args.prompt,
            args.duration,
            args.aspect_ratio,
            on_progress=print_progress,
        )
        print("\n✅ Video ready:")
        print(f"   {job.result_url}")

    elif args.command == "voiceover":
        result = orchestrator.synthesize_voiceover(args.text, args.voice)
        path = save_audio(result.audio, args.output)
        print(f"\n✅ Voiceover saved to: {path}")

    elif args.command == "search":
        posts = orchestrator.search_discussions(
            args.keywords, args.subreddit, args.limit, args.sort, args.time_filter
        )
        print(f"\n🔎 {len(posts)} result(s)")
        for post in posts:
            print(f"   • {post.get('title', '(untitled)')} [r/{post.get('subreddit', '?')}, {post.get('score', 0)} pts]")

    elif args.command == "bundle":
        bundle = orchestrator.produce_asset_bundle(
            BundleRequest(
                prompt=args.prompt,
                aspect_ratio=args.aspect_ratio,
                instruction=args.instruction,
                new_assets=tuple(args.asset),
                reference_image_url=args.reference_image,
                animate=args.animate,
                motion_prompt=args.motion_prompt,
                duration_seconds=args.duration,
                voiceover_text=args.voiceover_text,
                voice=args.voice,
            ),
            deadline=_deadline(args.deadline),
            on_progress=print_progress,
        )
        summary = {
            "prompt": bundle.prompt.text,
            "image_url": bundle.image.url,
            "image_provider": bundle.image.provider,
            "video_url": bundle.video.result_url if bundle.video else None,
        }
        if bundle.voiceover is not None:
            summary["voiceover"] = str(save_audio(bundle.voiceover.audio, args.output or "voiceover.mp3"))
        print("\n🎬 Asset bundle ready:")
        print(json.dumps(summary, indent=2))


def _deadline(seconds: Optional[float]) -> Optional[Deadline]:
    return None if seconds is None else Deadline(seconds)


def handle_exceptions(e: Exception) -> None:
    """Handle and display appropriate error messages for different exception types."""
    if isinstance(e, ConfigurationError):
        print("\n❌ Configuration Error:")
        print(f"   {e}")
        print("   Run 'mediagen providers' to see which credentials are missing.")
    elif isinstance(e, ValidationError):
        print("\n❌ Input Error:")
        print(f"   {e}")
    elif isinstance(e, OperationTimeoutError):
        print("\n⏱️  Timed Out:")
        print(f"   {e}")
    elif isinstance(e, OperationCancelledError):
        print("\n👋 Cancelled:")
        print(f"   {e}")
    elif isinstance(e, MediaGenerationError):
        print(f"\n❌ {describe_error(e)}")
        print(f"   Technical details: {e}")
        if e.retryable:
            print("   This error is usually temporary.")
    else:
        print(f"\n❌ {describe_error(e)}")
        print(f"   Technical details: {e}")
        print("   If the problem persists, please report this issue.")
    sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the media generation CLI."""
    try:
        parser = create_parser()
        args = parser.parse_args(argv)

        if args.command == "providers":
            print_available_providers()
            return

        init_library_logger(verbose=args.verbose, log_to_file=True)
        if args.verbose:
            print("🔧 Verbose mode enabled - showing detailed processing information")

        orchestrator = GenerationOrchestrator.from_environment()
        run_command(args, orchestrator)

    except KeyboardInterrupt:
        print("\n👋 Cancelled by user")
        sys.exit(130)
    except Exception as e:
        handle_exceptions(e)


if __name__ == "__main__":
    main()
