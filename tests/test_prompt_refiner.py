import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock

import openai

from media_gen.exceptions import ConfigurationError, RefinementError
from media_gen.models import GenerationPrompt, IDENTITY_LOCK_CLAUSE
from media_gen.prompt_refiner import PromptRefiner, build_refinement_messages
from media_gen.providers.openai_provider import OpenAIChatClient, OpenAIConfig

LOCK = f"{IDENTITY_LOCK_CLAUSE}, keep the face identical."
LOCKED_PROMPT = f"{LOCK} A man sitting in a sunny cafe, medium shot."


def api_error(message="service unavailable"):
    return openai.APIError(message, request=MagicMock(), body=None)


def chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestGenerationPrompt(unittest.TestCase):
    def test_detects_identity_lock(self):
        prompt = GenerationPrompt.from_text(LOCKED_PROMPT)
        self.assertTrue(prompt.identity_locked)
        self.assertEqual(prompt.invariant_clauses, (LOCK,))

    def test_plain_prompt_has_no_invariants(self):
        prompt = GenerationPrompt.from_text("A red shoe on a white background")
        self.assertFalse(prompt.identity_locked)
        self.assertEqual(prompt.invariant_clauses, ())

    def test_detects_identity_lock_mid_prompt(self):
        lock = "Using the attached image as a strict reference for the shoe."
        prompt = GenerationPrompt.from_text(f"A sneaker on a desk. {lock} Soft light.")
        self.assertTrue(prompt.identity_locked)
        self.assertEqual(prompt.invariant_clauses, (lock,))

    def test_enforce_moves_mid_prompt_lock_to_front(self):
        lock = "Using the attached image as a strict reference for the shoe."
        prompt = GenerationPrompt.from_text(f"A sneaker on a desk. {lock}")
        self.assertEqual(prompt.enforce_invariants("A sneaker on a desk at night."), f"{lock} A sneaker on a desk at night.")

    def test_enforce_restores_dropped_clause(self):
        prompt = GenerationPrompt.from_text(LOCKED_PROMPT)
        restored = prompt.enforce_invariants("A man in a cafe at night.")
        self.assertTrue(restored.startswith(LOCK))
        self.assertIn("at night", restored)

    def test_enforce_moves_misplaced_clause_to_front(self):
        prompt = GenerationPrompt.from_text(LOCKED_PROMPT)
        restored = prompt.enforce_invariants(f"A man in a cafe at night. {LOCK}")
        self.assertTrue(restored.startswith(LOCK))
        self.assertEqual(restored.count(IDENTITY_LOCK_CLAUSE), 1)

    def test_enforce_leaves_valid_text_alone(self):
        prompt = GenerationPrompt.from_text(LOCKED_PROMPT)
        candidate = f"{LOCK} A man in a cafe at night."
        self.assertEqual(prompt.enforce_invariants(candidate), candidate)
        self.assertEqual(prompt.missing_invariants(candidate), [])

    def test_refined_merges_assets(self):
        prompt = GenerationPrompt.from_text(LOCKED_PROMPT, ["Logo Cap"])
        successor = prompt.refined(f"{LOCK} Holding a mug.", [{"name": "Mug"}, "Logo Cap"])
        self.assertEqual(successor.assets, ("Logo Cap", "Mug"))
        self.assertEqual(successor.invariant_clauses, prompt.invariant_clauses)


class TestBuildRefinementMessages(unittest.TestCase):
    def test_single_system_message(self):
        messages = build_refinement_messages("A shoe", "make it blue", ["Logo Cap"])
        self.assertEqual(len(messages), 1)
        self.assertEqual(messages[0]["role"], "system")
        content = messages[0]["content"]
        self.assertIn('"A shoe"', content)
        self.assertIn('"make it blue"', content)
        self.assertIn("- Logo Cap", content)
        self.assertIn(IDENTITY_LOCK_CLAUSE, content)

    def test_no_assets(self):
        content = build_refinement_messages("A shoe", "make it blue")[0]["content"]
        self.assertIn("(none)", content)


class TestPromptRefiner(unittest.TestCase):
    def test_returns_provider_text_verbatim(self):
        client = MagicMock()
        client.complete.return_value = "  A man in a cafe at night.  "
        refiner = PromptRefiner(client)

        result = refiner.refine(LOCKED_PROMPT, "make it night")

        self.assertEqual(result, "  A man in a cafe at night.  ")
        messages = client.complete.call_args.args[0]
        self.assertIn("make it night", messages[0]["content"])

    def test_preserves_lock_when_provider_keeps_it(self):
        client = MagicMock()
        client.complete.return_value = f"{LOCK} A man in a cafe at night."
        result = PromptRefiner(client).refine(LOCKED_PROMPT, "make it night")
        self.assertTrue(result.startswith(LOCK))

    def test_degraded_mode_without_client(self):
        result = PromptRefiner().refine(LOCKED_PROMPT, "Make it night time.", ["Logo Cap"])

        self.assertTrue(result.startswith(LOCKED_PROMPT))
        self.assertIn("Make it night time.", result)
        self.assertTrue(result.endswith("Include Logo Cap."))

    def test_degraded_mode_moves_lock_sentence_to_front(self):
        lock = "Using the attached image as a strict reference for the shoe."

        result = PromptRefiner().refine(f"A sneaker on a desk. {lock}", "Make it night.")

        self.assertEqual(result, f"{lock} A sneaker on a desk. Make it night.")

    def test_degraded_mode_on_provider_error(self):
        client = MagicMock()
        client.complete.side_effect = api_error()

        result = PromptRefiner(client).refine("A red shoe", "Add rain.")

        self.assertEqual(result, "A red shoe Add rain.")

    def test_malformed_response_raises(self):
        client = MagicMock()
        client.complete.side_effect = RefinementError("no choices")
        with self.assertRaises(RefinementError):
            PromptRefiner(client).refine("A red shoe", "Add rain.")


class TestOpenAIChatClient(unittest.TestCase):
    def setUp(self):
        self.sdk = MagicMock()
        self.client = OpenAIChatClient(OpenAIConfig(api_key="sk-test"), client=self.sdk)

    def test_complete_returns_content(self):
        self.sdk.chat.completions.create.return_value = chat_response("refined")
        self.assertEqual(self.client.complete([{"role": "system", "content": "x"}]), "refined")
        kwargs = self.sdk.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-4o")
        self.assertEqual(kwargs["temperature"], 0.7)

    def test_no_choices(self):
        self.sdk.chat.completions.create.return_value = SimpleNamespace(choices=[])
        with self.assertRaises(RefinementError):
            self.client.complete([])

    def test_empty_content(self):
        self.sdk.chat.completions.create.return_value = chat_response("   ")
        with self.assertRaises(RefinementError):
            self.client.complete([])

    def test_requires_api_key(self):
        with self.assertRaises(ConfigurationError):
            OpenAIChatClient(OpenAIConfig(api_key=None))


if __name__ == "__main__":
    unittest.main()
