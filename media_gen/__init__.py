"""
Marketing Media Generation Package

Orchestrates third-party AI services to turn product prompts into
marketing assets:
- Prompt refinement (OpenAI chat completions, degraded mode without a key)
- Still images (fal.ai Flux, primary model with automatic fallback)
- Image-to-video animation (Kling queue API with polling)
- Voiceover narration (OpenAI text-to-speech)
- Research search (Reddit, OAuth client credentials)

Architecture:
- Provider-based modular design with clear vendor separation
- All provider code isolated in providers/*_provider/ directories
- One error taxonomy and one overall deadline across every step

Core Modules:
- orchestrator: GenerationOrchestrator, the caller-facing entry point
- prompt_refiner: Instruction-driven prompt rewriting with invariant clauses
- image_generator: Ordered provider fallback chain
- video_animation: Job submission and polling state machine
- voiceover: Speech synthesis
- credential_cache: Thread-safe bearer token cache
- config: Configuration and environment setup for all providers
- logger: Centralized logging infrastructure
"""

__version__ = "1.0.0"

from .orchestrator import GenerationOrchestrator, BundleRequest, BatchImageOutcome
from .config import OrchestratorConfig, get_available_providers, print_available_providers
from .exceptions import MediaGenerationError, describe_error
from .models import GenerationPrompt, ImageResult, VideoJob, VideoStatus, VoiceoverResult, AssetBundle
from .logger import init_library_logger, get_library_logger

__all__ = [
    'GenerationOrchestrator',
    'BundleRequest',
    'BatchImageOutcome',
    'OrchestratorConfig',
    'get_available_providers',
    'print_available_providers',
    'MediaGenerationError',
    'describe_error',
    'GenerationPrompt',
    'ImageResult',
    'VideoJob',
    'VideoStatus',
    'VoiceoverResult',
    'AssetBundle',
    'init_library_logger',
    'get_library_logger',
]
