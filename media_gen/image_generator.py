"""
Image generation through an ordered fallback chain of providers.

Providers are tried in list order, one call each, until one returns an image.
Adding a provider means appending another ImageProvider to the chain.
"""

import threading
from typing import List, Optional, Sequence, Tuple

from .deadline import Deadline, check_cancelled
from .exceptions import GenerationError, OperationTimeoutError, ValidationError
from .logger import get_library_logger
from .models import ImageResult, SUPPORTED_ASPECT_RATIOS
from .providers.base import ImageProvider
from .providers.fal_provider import FalConfig, create_fallback_provider, create_primary_provider


class ImageGenerator:
    """Generates an image with the first provider in the chain that succeeds."""

    def __init__(self, providers: Sequence[ImageProvider]):
        if not providers:
            raise ValueError("ImageGenerator needs at least one provider")
        self.providers = list(providers)
        self.logger = get_library_logger()

    @classmethod
    def from_config(cls, config: FalConfig) -> "ImageGenerator":
        """Build the default primary → secondary chain."""
        return cls([create_primary_provider(config), create_fallback_provider(config)])

    def generate(
        self,
        prompt: str,
        aspect_ratio: str = "16:9",
        reference_image_url: Optional[str] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[Deadline] = None
    ) -> ImageResult:
        """
        Generate one image.

        Args:
            prompt: Text prompt
            aspect_ratio: One of 16:9, 9:16, 1:1
            reference_image_url: Best-effort conditioning image; providers that
                cannot use it ignore it
            timeout: Per-provider HTTP timeout in seconds
            cancel_event: Checked before each provider attempt
            deadline: Overall budget; each attempt is capped by what remains
                and no attempt starts once it is spent

        Returns:
            The first image returned, tagged with the provider that made it

        Raises:
            ValidationError: For an empty prompt or unsupported aspect ratio
            GenerationError: If every provider fails; ``failures`` lists why
            OperationCancelledError: If cancelled between attempts
            OperationTimeoutError: If the deadline runs out before an attempt
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required for image generation")
        if aspect_ratio not in SUPPORTED_ASPECT_RATIOS:
            raise ValidationError(
                f"Unsupported aspect ratio '{aspect_ratio}'. Use one of: {', '.join(SUPPORTED_ASPECT_RATIOS)}"
            )

        failures: List[Tuple[str, str]] = []
        for index, provider in enumerate(self.providers):
            check_cancelled(cancel_event, "Image generation")
            attempt_timeout = self._attempt_timeout(timeout, deadline, provider.name, failures)
            if index > 0:
                self.logger.warning(f"Falling back to {provider.name} image provider")
            try:
                return provider.attempt(prompt, aspect_ratio, reference_image_url, timeout=attempt_timeout)
            except GenerationError as e:
                self.logger.warning(f"{provider.name} image provider failed: {e}")
                failures.append((provider.name, str(e)))

        summary = "; ".join(f"{name}: {reason}" for name, reason in failures)
        self.logger.error(f"All image providers failed: {summary}")
        raise GenerationError(f"All image providers failed. {summary}", failures=failures)

    def _attempt_timeout(
        self,
        timeout: Optional[float],
        deadline: Optional[Deadline],
        provider_name: str,
        failures: List[Tuple[str, str]]
    ) -> Optional[float]:
        if deadline is None:
            return timeout

        remaining = deadline.remaining()
        if remaining <= 0:
            summary = "; ".join(f"{name}: {reason}" for name, reason in failures)
            self.logger.error(f"Deadline reached before trying {provider_name} image provider")
            raise OperationTimeoutError(
                f"No time left to try {provider_name} image provider" + (f". {summary}" if summary else "")
            )
        return remaining if timeout is None else min(timeout, remaining)
