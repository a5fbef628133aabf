"""Strategy interface shared by image providers in a fallback chain."""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from ..exceptions import ValidationError
from ..models import ImageResult, SUPPORTED_ASPECT_RATIOS


class ImageProvider(ABC):
    """One provider the ImageGenerator can try."""

    name: str
    size_map: Mapping[str, str]
    supports_reference: bool = False

    def size_for(self, aspect_ratio: str) -> str:
        """Map an aspect ratio to this provider's size token."""
        if aspect_ratio not in SUPPORTED_ASPECT_RATIOS or aspect_ratio not in self.size_map:
            raise ValidationError(
                f"Unsupported aspect ratio '{aspect_ratio}'. Use one of: {', '.join(SUPPORTED_ASPECT_RATIOS)}"
            )
        return self.size_map[aspect_ratio]

    @abstractmethod
    def attempt(
        self,
        prompt: str,
        aspect_ratio: str,
        reference_image_url: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> ImageResult:
        """
        Make exactly one generation call.

        Raises:
            GenerationError: If the provider fails or returns no image
        """
