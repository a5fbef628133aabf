"""
Kling image-to-video HTTP client.

Handles the two raw calls of the queue protocol: creating a task and reading
its status. Job lifecycle and polling policy live in media_gen.video_animation.
"""

from typing import Any, Dict, Optional

import requests

from ...exceptions import (
    ConfigurationError,
    GenerationError,
    PollError,
    ProtocolError,
    SubmissionError,
)
from ...logger import get_library_logger
from .config import KlingConfig


class KlingVideoClient:
    """Kling API client for task submission and status checks."""

    def __init__(self, config: KlingConfig):
        """
        Initialize the Kling API client.

        Args:
            config: Configuration containing API credentials and settings

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self.logger = get_library_logger()
        self.base_url = config.base_url.rstrip("/")
        self.logger.debug("KlingVideoClient initialized")

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def create_task(self, payload: Dict[str, Any], timeout: Optional[float] = None) -> str:
        """
        Submit an image-to-video task.

        Args:
            payload: Request body ({image_url, prompt, duration, aspect_ratio, cfg_scale})
            timeout: HTTP timeout in seconds

        Returns:
            Provider-assigned job identifier

        Raises:
            SubmissionError: If the provider rejects the task or is unreachable
            ConfigurationError: If the API key is rejected
            ProtocolError: If the response carries no job identifier
        """
        self.logger.debug(f"Submitting Kling task: duration={payload.get('duration')}, aspect_ratio={payload.get('aspect_ratio')}")
        try:
            response = requests.post(
                f"{self.base_url}/video/generate",
                headers=self._get_headers(),
                json=payload,
                timeout=timeout or self.config.request_timeout
            )
        except requests.exceptions.RequestException as e:
            raise SubmissionError(f"Kling submission failed: {e}", provider="kling") from e

        if response.status_code in (401, 403):
            self.logger.error(f"Kling rejected the API key ({response.status_code})")
            raise ConfigurationError("Kling authentication failed. Check KLING_API_KEY.")

        if not 200 <= response.status_code < 300:
            raise SubmissionError(
                f"Kling rejected the task ({response.status_code}): {self._error_detail(response)}",
                provider="kling"
            )

        data = self._parse_json(response, ProtocolError)
        job_id = self._extract_job_id(data)
        if not job_id:
            self.logger.error(f"No task ID in Kling response: {data}")
            raise ProtocolError("Kling submission response contained no task ID")

        self.logger.info(f"Kling task created: {job_id}")
        return job_id

    def get_status(self, job_id: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Read a task's current status.

        Raises:
            PollError: For transport failures, 429 and 5xx responses
            GenerationError: For other non-2xx responses
        """
        try:
            response = requests.get(
                f"{self.base_url}/video/status/{job_id}",
                headers=self._get_headers(),
                timeout=timeout or self.config.request_timeout
            )
        except requests.exceptions.RequestException as e:
            raise PollError(f"Kling status check failed: {e}", provider="kling") from e

        status_code = response.status_code
        if status_code == 429 or 500 <= status_code < 600:
            raise PollError(f"Kling status check returned {status_code}", provider="kling")

        if not 200 <= status_code < 300:
            raise GenerationError(
                f"Kling status check rejected ({status_code}): {self._error_detail(response)}",
                provider="kling"
            )

        data = self._parse_json(response, PollError)
        # Some deployments wrap the payload in a "data" envelope
        if isinstance(data.get("data"), dict) and "status" not in data:
            data = data["data"]
        return data

    @staticmethod
    def _extract_job_id(data: Dict[str, Any]) -> Optional[str]:
        for source in (data, data.get("data") if isinstance(data.get("data"), dict) else {}):
            for key in ("task_id", "id", "request_id"):
                if source.get(key):
                    return str(source[key])
        return None

    def _parse_json(self, response, error_cls) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            self.logger.error(f"Failed to parse JSON response: {response.text[:500]}")
            raise error_cls(f"Invalid JSON response from Kling: {e}") from e

        if not isinstance(data, dict):
            raise error_cls(f"Unexpected response format from Kling: {type(data).__name__}")
        return data

    @staticmethod
    def _error_detail(response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:500]
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)
