"""
OpenAI chat completion client used for prompt refinement.
"""

from typing import Dict, List, Optional

from openai import OpenAI

from ...exceptions import RefinementError
from ...logger import get_library_logger
from .config import OpenAIConfig


class OpenAIChatClient:
    """Thin wrapper over chat completions that returns the first choice's text."""

    def __init__(self, config: OpenAIConfig, client: Optional[OpenAI] = None):
        """
        Args:
            config: OpenAI configuration; must carry an API key
            client: Preconfigured SDK client, mainly for tests

        Raises:
            ConfigurationError: If no API key is configured
        """
        self.config = config
        self.logger = get_library_logger()
        self.client = client or OpenAI(api_key=config.require_api_key(), max_retries=0)
        self.logger.debug("OpenAIChatClient initialized")

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None
    ) -> str:
        """
        Run one chat completion.

        Returns:
            The first choice's message content

        Raises:
            RefinementError: If the response has no usable text
            openai.APIError: If the request itself fails
        """
        selected_model = model or self.config.chat_model
        self.logger.debug(f"Sending chat completion: model={selected_model}, {len(messages)} message(s)")

        response = self.client.chat.completions.create(
            model=selected_model,
            messages=messages,
            temperature=self.config.refine_temperature if temperature is None else temperature,
            timeout=timeout or self.config.request_timeout,
        )

        choices = getattr(response, "choices", None)
        if not choices:
            raise RefinementError("Chat completion response contained no choices", provider="openai")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise RefinementError("Chat completion response had no message content", provider="openai")

        return content
