"""
Main media generation orchestration module.

GenerationOrchestrator composes the refiner, image chain, animator,
voiceover synthesizer and search client behind caller-facing operations.
Every operation runs under an overall Deadline: a step whose own timeout does
not fit in the remaining budget is refused before it starts. Whatever a step
raises is normalized into the media_gen.exceptions taxonomy.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

from .config import OrchestratorConfig
from .deadline import Deadline, check_cancelled
from .exceptions import ConfigurationError, MediaGenerationError, normalize_error
from .image_generator import ImageGenerator
from .logger import get_library_logger
from .models import AssetBundle, GenerationPrompt, ImageResult, VideoJob, VoiceoverResult
from .prompt_refiner import PromptRefiner
from .providers.fal_provider import FalConfig
from .providers.kling_provider import KlingConfig, KlingVideoClient
from .providers.openai_provider import OpenAIChatClient, OpenAIConfig, OpenAISpeechClient
from .providers.reddit_provider import RedditConfig, RedditSearchClient
from .video_animation import ProgressCallback, VideoAnimator
from .voiceover import VoiceoverSynthesizer

T = TypeVar("T")


@dataclass(frozen=True)
class BundleRequest:
    """Input for produce_asset_bundle()."""

    prompt: Union[str, GenerationPrompt]
    aspect_ratio: str = "16:9"
    instruction: Optional[str] = None
    new_assets: Tuple[str, ...] = ()
    reference_image_url: Optional[str] = None
    animate: bool = False
    motion_prompt: Optional[str] = None
    duration_seconds: int = 5
    voiceover_text: Optional[str] = None
    voice: str = "alloy"


@dataclass(frozen=True)
class BatchImageOutcome:
    """Result of one prompt in a concurrent image batch."""

    prompt: str
    result: Optional[ImageResult] = None
    error: Optional[MediaGenerationError] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


@dataclass
class _Components:
    refiner: Optional[PromptRefiner] = None
    image_generator: Optional[ImageGenerator] = None
    animator: Optional[VideoAnimator] = None
    voiceover: Optional[VoiceoverSynthesizer] = None
    search: Optional[RedditSearchClient] = None
    unavailable: Dict[str, ConfigurationError] = field(default_factory=dict)


class GenerationOrchestrator:
    """Caller-facing entry point for every generation operation."""

    def __init__(
        self,
        config: Optional[OrchestratorConfig] = None,
        refiner: Optional[PromptRefiner] = None,
        image_generator: Optional[ImageGenerator] = None,
        animator: Optional[VideoAnimator] = None,
        voiceover: Optional[VoiceoverSynthesizer] = None,
        search_client: Optional[RedditSearchClient] = None,
        unavailable: Optional[Mapping[str, ConfigurationError]] = None
    ):
        """
        Args:
            config: Deadlines and step timeouts; defaults apply when omitted
            refiner: Prompt refiner; a degraded-mode refiner is used when omitted
            image_generator: Image fallback chain
            animator: Video animation service
            voiceover: Speech synthesizer
            search_client: Discussion search client
            unavailable: Configuration errors to report for missing components
        """
        self.config = config or OrchestratorConfig()
        self.config.validate()
        self.logger = get_library_logger()
        self._components = _Components(
            refiner=refiner or PromptRefiner(),
            image_generator=image_generator,
            animator=animator,
            voiceover=voiceover,
            search=search_client,
            unavailable=dict(unavailable or {}),
        )

    @classmethod
    def from_environment(cls) -> "GenerationOrchestrator":
        """
        Build every component whose credentials are configured.

        Missing credentials do not fail construction; the operation that needs
        them raises the recorded ConfigurationError when called.
        """
        unavailable: Dict[str, ConfigurationError] = {}

        def build(name: str, factory: Callable[[], T]) -> Optional[T]:
            try:
                return factory()
            except ConfigurationError as e:
                unavailable[name] = e
                return None

        openai_config = OpenAIConfig.from_environment()
        chat_client = build("refine", lambda: OpenAIChatClient(openai_config)) if openai_config.has_api_key else None

        return cls(
            config=OrchestratorConfig.from_environment(),
            refiner=PromptRefiner(chat_client),
            image_generator=build("image", lambda: ImageGenerator.from_config(FalConfig.from_environment())),
            animator=build("video", lambda: VideoAnimator(KlingVideoClient(KlingConfig.from_environment()))),
            voiceover=build("voiceover", lambda: VoiceoverSynthesizer(OpenAISpeechClient(openai_config))),
            search_client=build("search", lambda: RedditSearchClient(RedditConfig.from_environment())),
            unavailable=unavailable,
        )

    def _require(self, name: str, component: Optional[T]) -> T:
        if component is None:
            raise self._components.unavailable.get(name) or ConfigurationError(f"No {name} provider configured")
        return component

    def _deadline(self, deadline: Optional[Deadline]) -> Deadline:
        return deadline if deadline is not None else Deadline(self.config.deadline)

    def _run(
        self,
        step: str,
        step_timeout: float,
        deadline: Deadline,
        cancel_event: Optional[threading.Event],
        operation: Callable[[float], T]
    ) -> T:
        """Run one step under the deadline, normalizing whatever it raises."""
        try:
            check_cancelled(cancel_event, step)
            timeout = deadline.ensure(step, step_timeout)
            return operation(timeout)
        except Exception as e:
            error = normalize_error(e)
            self.logger.error(f"{step} failed ({error.kind}): {error}")
            if error is e:
                raise
            raise error from e

    def refine_prompt(
        self,
        prompt: Union[str, GenerationPrompt],
        instruction: str,
        new_assets: Iterable[Union[str, Mapping]] = (),
        deadline: Optional[Deadline] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> GenerationPrompt:
        """
        Refine a prompt and re-assert its invariant clauses.

        Returns:
            The successor GenerationPrompt
        """
        current = prompt if isinstance(prompt, GenerationPrompt) else GenerationPrompt.from_text(prompt)
        new_assets = list(new_assets)
        refiner = self._components.refiner

        def operation(timeout: float) -> GenerationPrompt:
            text = refiner.refine(current, instruction, new_assets, timeout=timeout)
            missing = current.missing_invariants(text)
            if missing:
                self.logger.warning(f"Refined prompt dropped {len(missing)} invariant clause(s); restoring them")
            return current.refined(text, new_assets)

        return self._run("Prompt refinement", self.config.refine_timeout, self._deadline(deadline), cancel_event, operation)

    def generate_image(
        self,
        prompt: Union[str, GenerationPrompt],
        aspect_ratio: str = "16:9",
        reference_image_url: Optional[str] = None,
        deadline: Optional[Deadline] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> ImageResult:
        """Generate one image through the provider fallback chain."""
        text = prompt.text if isinstance(prompt, GenerationPrompt) else prompt
        deadline = self._deadline(deadline)

        def operation(timeout: float) -> ImageResult:
            generator = self._require("image", self._components.image_generator)
            return generator.generate(
                text, aspect_ratio, reference_image_url, timeout=timeout, cancel_event=cancel_event, deadline=deadline
            )

        return self._run("Image generation", self.config.image_timeout, deadline, cancel_event, operation)

    def generate_images(
        self,
        prompts: Iterable[Union[str, GenerationPrompt]],
        aspect_ratio: str = "16:9",
        deadline: Optional[Deadline] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> List[BatchImageOutcome]:
        """
        Generate images for several prompts concurrently.

        Each prompt succeeds or fails on its own; outcomes keep input order.
        """
        prompts = list(prompts)
        shared_deadline = self._deadline(deadline)

        def one(prompt: Union[str, GenerationPrompt]) -> BatchImageOutcome:
            text = prompt.text if isinstance(prompt, GenerationPrompt) else prompt
            try:
                result = self.generate_image(text, aspect_ratio, deadline=shared_deadline, cancel_event=cancel_event)
            except MediaGenerationError as e:
                return BatchImageOutcome(prompt=text, error=e)
            return BatchImageOutcome(prompt=text, result=result)

        if not prompts:
            return []

        workers = min(self.config.max_workers, len(prompts))
        self.logger.info(f"Generating {len(prompts)} image(s) with {workers} worker(s)")
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="media-gen-image") as pool:
            return list(pool.map(one, prompts))

    def animate_image(
        self,
        image_url: str,
        prompt: str = "",
        duration_seconds: int = 5,
        aspect_ratio: str = "16:9",
        on_progress: Optional[ProgressCallback] = None,
        deadline: Optional[Deadline] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> VideoJob:
        """Submit an animation job and poll it to completion."""
        deadline = self._deadline(deadline)

        def submit(timeout: float) -> VideoJob:
            animator = self._require("video", self._components.animator)
            return animator.submit(image_url, prompt, duration_seconds, aspect_ratio, timeout=timeout)

        job = self._run("Video submission", self.config.video_submit_timeout, deadline, cancel_event, submit)

        def wait(timeout: float) -> VideoJob:
            return self._components.animator.wait(
                job, timeout=timeout, on_progress=on_progress, cancel_event=cancel_event
            )

        return self._run("Video animation", self.config.video_timeout, deadline, cancel_event, wait)

    def synthesize_voiceover(
        self,
        text: str,
        voice: str = "alloy",
        deadline: Optional[Deadline] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> VoiceoverResult:
        """Synthesize a voiceover."""
        def operation(timeout: float) -> VoiceoverResult:
            synthesizer = self._require("voiceover", self._components.voiceover)
            return synthesizer.synthesize(text, voice, timeout=timeout)

        return self._run("Voiceover", self.config.voiceover_timeout, self._deadline(deadline), cancel_event, operation)

    def search_discussions(
        self,
        keywords: str,
        subreddit: Optional[str] = None,
        limit: int = 10,
        sort: str = "relevance",
        time_filter: str = "year",
        deadline: Optional[Deadline] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> List[Dict[str, Any]]:
        """Search community discussions for research context."""
        def operation(timeout: float) -> List[Dict[str, Any]]:
            client = self._require("search", self._components.search)
            return client.search(keywords, subreddit, limit, sort, time_filter, timeout=timeout)

        return self._run("Discussion search", self.config.search_timeout, self._deadline(deadline), cancel_event, operation)

    def produce_asset_bundle(
        self,
        request: BundleRequest,
        deadline: Optional[Deadline] = None,
        cancel_event: Optional[threading.Event] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> AssetBundle:
        """
        Produce the final assets for one prompt.

        Steps run in order: optional refinement, image, optional animation,
        optional voiceover. All share one deadline.
        """
        deadline = self._deadline(deadline)
        prompt = (
            request.prompt if isinstance(request.prompt, GenerationPrompt)
            else GenerationPrompt.from_text(request.prompt, request.new_assets)
        )
        self.logger.info(f"Producing asset bundle ({deadline.remaining():.0f}s budget)")

        if request.instruction:
            prompt = self.refine_prompt(prompt, request.instruction, request.new_assets, deadline, cancel_event)

        image = self.generate_image(prompt, request.aspect_ratio, request.reference_image_url, deadline, cancel_event)

        video = None
        if request.animate:
            video = self.animate_image(
                image.url,
                request.motion_prompt or prompt.text,
                request.duration_seconds,
                request.aspect_ratio,
                on_progress=on_progress,
                deadline=deadline,
                cancel_event=cancel_event,
            )

        voiceover = None
        if request.voiceover_text:
            voiceover = self.synthesize_voiceover(request.voiceover_text, request.voice, deadline, cancel_event)

        check_cancelled(cancel_event, "Asset bundle")
        self.logger.info("Asset bundle ready")
        return AssetBundle(prompt=prompt, image=image, video=video, voiceover=voiceover)
