"""
Prompt refinement from natural-language edit instructions.

The refiner asks a chat model to fold an instruction into an existing image
prompt. When no model is reachable it degrades to appending the instruction,
so editing never blocks on the text provider.
"""

from typing import Iterable, Mapping, Optional, Union

import openai

from .logger import get_library_logger
from .models import GenerationPrompt, asset_names
from .providers.openai_provider import OpenAIChatClient

REFINEMENT_RULES = """\
Rules:
1. Identity lock: if the existing prompt begins with "Using the attached image as a strict reference", keep that sentence word for word at the very start.
2. No text: drop every instruction to render text, captions, or lettering. The image must carry no text overlay.
3. Consistency: keep composition, lighting, pose and background exactly as they are, except for what the instruction changes.
4. Framing: keep a wide or medium shot with the subject centred so a 16:9 crop never cuts the face.
5. Keep the original style and technical specifications.
6. Work the requested change into the description naturally.
7. Mention every newly added asset by name (for example "holding the [asset name]").
8. Reply with the new prompt text only, without explanations."""


def build_refinement_messages(current_prompt: str, instruction: str, new_assets: Iterable[str] = ()):
    """Build the chat messages asking for an updated prompt."""
    assets = "\n".join(f"- {name}" for name in new_assets) or "(none)"
    system_prompt = (
        "You are an expert prompt engineer for image generation models. "
        "Update the existing image generation prompt according to the user's instruction.\n\n"
        f"EXISTING PROMPT:\n\"{current_prompt}\"\n\n"
        f"USER INSTRUCTION:\n\"{instruction}\"\n\n"
        f"NEW ASSETS ADDED:\n{assets}\n\n"
        f"{REFINEMENT_RULES}"
    )
    return [{"role": "system", "content": system_prompt}]


class PromptRefiner:
    """Rewrites a generation prompt according to an edit instruction."""

    def __init__(self, chat_client: Optional[OpenAIChatClient] = None):
        """
        Args:
            chat_client: Text provider client; None runs in degraded mode
        """
        self.chat_client = chat_client
        self.logger = get_library_logger()

    def refine(
        self,
        current_prompt: Union[str, GenerationPrompt],
        instruction: str,
        new_assets: Iterable[Union[str, Mapping]] = (),
        timeout: Optional[float] = None
    ) -> str:
        """
        Produce the refined prompt text.

        The provider's text is returned verbatim. Callers that depend on the
        identity-lock clause should check the result with
        GenerationPrompt.enforce_invariants().

        Raises:
            RefinementError: If the provider answers without usable text
        """
        prompt = (
            current_prompt if isinstance(current_prompt, GenerationPrompt)
            else GenerationPrompt.from_text(current_prompt)
        )
        names = asset_names(new_assets)

        if self.chat_client is None:
            self.logger.warning("No text provider configured for prompt refinement; using degraded mode")
            return self.degraded_refinement(prompt, instruction, names)

        messages = build_refinement_messages(prompt.text, instruction, names)
        try:
            refined = self.chat_client.complete(messages, timeout=timeout)
        except openai.APIError as e:
            self.logger.warning(f"Prompt refinement provider unavailable ({e}); using degraded mode")
            return self.degraded_refinement(prompt, instruction, names)

        self.logger.info("Prompt refined")
        self.logger.debug(f"Refined prompt: {refined[:100]}...")
        return refined

    @staticmethod
    def degraded_refinement(prompt: GenerationPrompt, instruction: str, new_assets: Iterable[str] = ()) -> str:
        """
        Append the instruction (and any new asset names) to the prompt.

        The original text stays first; an identity-lock sentence found
        elsewhere in it is moved to the front.
        """
        parts = [prompt.text.strip(), instruction.strip()]
        names = list(new_assets)
        if names:
            parts.append(f"Include {', '.join(names)}.")
        return prompt.enforce_invariants(" ".join(part for part in parts if part))
