import asyncio
import unittest

from support import configure_test_env

configure_test_env()

from app.ai.config import JulesConfig, OpenAIConfig, ProviderCredentials  # noqa: E402
from app.ai.types import EnhancementRequest, ProviderError  # noqa: E402
from app.enhance import EnhancementOrchestrator, attempt_provider, enhance_locally, normalize_text  # noqa: E402


class FakeProvider:
    def __init__(self, name, *, reply=None, error=None, delay=0.0):
        self.name = name
        self.reply = reply
        self.error = error
        self.delay = delay
        self.requests = []

    async def enhance(self, request):
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


class EnhancementOrchestratorTests(unittest.IsolatedAsyncioTestCase):
    async def test_no_providers_uses_local_rules(self):
        outcome = await EnhancementOrchestrator().enhance("i worked on a project")
        self.assertEqual(outcome.result.source_provider, "local")
        self.assertEqual(outcome.result.text, "RESUME\n\nI developed on a project")
        self.assertEqual(outcome.attempts, ())

    async def test_empty_input_without_providers(self):
        outcome = await EnhancementOrchestrator().enhance("")
        self.assertEqual(outcome.result.text, "RESUME\n\n")
        self.assertEqual(outcome.result.source_provider, "local")

    async def test_first_success_wins(self):
        first = FakeProvider("jules", reply="  From Jules.  ")
        second = FakeProvider("openai", reply="From OpenAI.")
        outcome = await EnhancementOrchestrator([first, second]).enhance("Resume text")

        self.assertEqual(outcome.result.text, "From Jules.")
        self.assertEqual(outcome.result.source_provider, "jules")
        self.assertEqual(len(second.requests), 0)

    async def test_falls_through_to_next_provider(self):
        first = FakeProvider("jules", error=ProviderError("down", provider="jules", code="network"))
        second = FakeProvider("openai", reply="Enhanced text.")
        outcome = await EnhancementOrchestrator([first, second]).enhance("Resume text")

        self.assertEqual(outcome.result.text, "Enhanced text.")
        self.assertEqual(outcome.result.source_provider, "openai")
        self.assertEqual([a.outcome for a in outcome.attempts], ["error", "success"])
        self.assertEqual(outcome.attempts[0].error_code, "network")

    async def test_all_providers_fail_matches_local_rules(self):
        raw = "  i worked   on teh\fbackend\n\n\n* made things  "
        providers = [
            FakeProvider("jules", error=RuntimeError("unexpected")),
            FakeProvider("openai", reply="   "),
        ]
        outcome = await EnhancementOrchestrator(providers).enhance(raw)

        self.assertEqual(outcome.result.source_provider, "local")
        self.assertEqual(outcome.result.text, enhance_locally(normalize_text(raw)))
        self.assertEqual([a.outcome for a in outcome.attempts], ["error", "empty"])

    async def test_providers_receive_normalized_text_and_prompt(self):
        provider = FakeProvider("openai", reply="ok")
        orchestrator = EnhancementOrchestrator([provider], instruction_prompt="Polish this.")
        await orchestrator.enhance("Line1\f\n\n\nLine2")

        request = provider.requests[0]
        self.assertEqual(request.normalized_text, "Line1\n\nLine2")
        self.assertEqual(request.instruction_prompt, "Polish this.")
        self.assertEqual(request.render_prompt(), "Polish this.\n\nResume:\nLine1\n\nLine2")

    async def test_timeout_moves_on(self):
        slow = FakeProvider("jules", reply="late", delay=0.5)
        fast = FakeProvider("openai", reply="on time")
        outcome = await EnhancementOrchestrator([slow, fast], timeout_s=0.05).enhance("Resume")

        self.assertEqual(outcome.result.source_provider, "openai")
        self.assertEqual(outcome.attempts[0].error_code, "timeout")

    async def test_failing_local_enhancer_returns_normalized_text(self):
        def broken(_text):
            raise RuntimeError("boom")

        orchestrator = EnhancementOrchestrator(local_enhancer=broken)
        with self.assertLogs("app.enhance.orchestrator", level="ERROR"):
            outcome = await orchestrator.enhance("  Some   text ")
        self.assertEqual(outcome.result.text, "Some text")
        self.assertEqual(outcome.result.source_provider, "local")

    async def test_attempt_provider_reports_non_string_reply_as_empty(self):
        request = EnhancementRequest(normalized_text="x", instruction_prompt="p")
        attempt = await attempt_provider(FakeProvider("jules", reply=None), request)
        self.assertEqual(attempt.outcome, "empty")
        self.assertIsNone(attempt.text)

    def test_from_credentials_orders_providers(self):
        creds = ProviderCredentials(
            jules=JulesConfig(api_key="jules-key"),
            openai=OpenAIConfig(api_key="sk-test"),
        )
        orchestrator = EnhancementOrchestrator.from_credentials(creds)
        self.assertEqual(orchestrator.provider_names, ("jules", "openai"))

    def test_from_credentials_skips_missing(self):
        creds = ProviderCredentials(openai=OpenAIConfig(api_key="sk-test"))
        self.assertEqual(EnhancementOrchestrator.from_credentials(creds).provider_names, ("openai",))
        self.assertEqual(EnhancementOrchestrator.from_credentials(ProviderCredentials()).provider_names, ())


if __name__ == "__main__":
    unittest.main()
