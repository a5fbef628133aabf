"""
fal.ai image generation clients.

Both the primary and the fallback strategy call fal's synchronous run
endpoint; they differ in model, payload and whether a reference image is
forwarded.
"""

from typing import Any, Dict, Mapping, Optional

import requests

from ...exceptions import GenerationError, RateLimitError
from ...logger import get_library_logger
from ...models import ImageResult
from ..base import ImageProvider
from .config import FalConfig

FLUX_SIZE_MAP = {
    "16:9": "landscape_16_9",
    "9:16": "portrait_16_9",
    "1:1": "square_hd",
}


class FalImageProvider(ImageProvider):
    """A single fal.ai text-to-image model used as one link of a fallback chain."""

    def __init__(
        self,
        name: str,
        api_key: str,
        model: str,
        base_url: str,
        size_map: Mapping[str, str] = FLUX_SIZE_MAP,
        extra_payload: Optional[Dict[str, Any]] = None,
        supports_reference: bool = False,
        request_timeout: float = 120
    ):
        self.name = name
        self.model = model
        self.size_map = dict(size_map)
        self.supports_reference = supports_reference
        self._api_key = api_key
        self._endpoint = f"{base_url.rstrip('/')}/{model}"
        self._extra_payload = dict(extra_payload or {})
        self._request_timeout = request_timeout
        self.logger = get_library_logger()

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Key {self._api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, prompt: str, aspect_ratio: str, reference_image_url: Optional[str] = None) -> Dict[str, Any]:
        """Build the request body for this model."""
        payload: Dict[str, Any] = {"prompt": prompt, "image_size": self.size_for(aspect_ratio)}
        payload.update(self._extra_payload)

        if reference_image_url:
            if self.supports_reference:
                payload["image_url"] = reference_image_url
            else:
                self.logger.debug(f"{self.name} image provider ignores reference images; skipping")

        return payload

    def attempt(
        self,
        prompt: str,
        aspect_ratio: str,
        reference_image_url: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> ImageResult:
        payload = self.build_payload(prompt, aspect_ratio, reference_image_url)
        self.logger.info(f"Requesting image from {self.name} provider: model={self.model}, size={payload['image_size']}")
        self.logger.debug(f"Prompt: {prompt[:100]}...")

        try:
            response = requests.post(
                self._endpoint,
                headers=self._get_headers(),
                json=payload,
                timeout=timeout or self._request_timeout
            )
        except requests.exceptions.RequestException as e:
            raise GenerationError(f"{self.name} provider request failed: {e}", provider=self.name) from e

        return self._handle_response(response, prompt)

    def _handle_response(self, response, prompt: str) -> ImageResult:
        """Turn the HTTP response into an ImageResult or a GenerationError."""
        if response.status_code == 429:
            raise RateLimitError(f"{self.name} provider rate limited (429)", provider=self.name)

        if not 200 <= response.status_code < 300:
            raise GenerationError(
                f"{self.name} provider returned {response.status_code}: {self._error_detail(response)}",
                provider=self.name
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError(f"{self.name} provider returned invalid JSON: {e}", provider=self.name) from e

        images = data.get("images") if isinstance(data, dict) else None
        if not isinstance(images, list):
            images = []
        for image in images:
            if isinstance(image, dict) and image.get("url"):
                self.logger.info(f"Image generated by {self.name} provider")
                return ImageResult(url=image["url"], prompt=prompt, provider=self.name, model=self.model)

        raise GenerationError(f"No image returned from {self.name} provider", provider=self.name)

    @staticmethod
    def _error_detail(response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:500]
        if isinstance(body, dict):
            return str(body.get("detail") or body.get("error") or body)
        return str(body)


def create_primary_provider(config: FalConfig) -> FalImageProvider:
    """Flux Pro: accepts safety tolerance, image count and a reference image."""
    config.validate()
    return FalImageProvider(
        name="primary",
        api_key=config.api_key,
        model=config.primary_model,
        base_url=config.base_url,
        extra_payload={
            "safety_tolerance": config.safety_tolerance,
            "num_images": config.num_images,
        },
        supports_reference=True,
        request_timeout=config.request_timeout,
    )


def create_fallback_provider(config: FalConfig) -> FalImageProvider:
    """Plain Flux with only prompt and image size."""
    config.validate()
    return FalImageProvider(
        name="secondary",
        api_key=config.fallback_api_key or config.api_key,
        model=config.fallback_model,
        base_url=config.base_url,
        request_timeout=config.request_timeout,
    )
