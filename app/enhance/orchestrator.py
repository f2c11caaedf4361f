from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import time
from typing import Callable, Literal, Sequence

from app.ai.config import ProviderCredentials
from app.ai.types import EnhancementProvider, EnhancementRequest, EnhancementResult, ProviderError, ProviderName
from app.enhance.local import enhance_locally
from app.enhance.normalize import normalize_text
from app.enhance.prompt import INSTRUCTION_PROMPT, build_enhancement_request

logger = logging.getLogger(__name__)

AttemptOutcome = Literal["success", "empty", "error"]


@dataclass(frozen=True)
class ProviderAttempt:
    provider: ProviderName
    outcome: AttemptOutcome
    text: str | None = None
    error_code: str | None = None
    latency_ms: int = 0


@dataclass(frozen=True)
class EnhancementOutcome:
    result: EnhancementResult
    attempts: tuple[ProviderAttempt, ...] = ()
    normalized_text: str = ""


async def attempt_provider(
    provider: EnhancementProvider,
    request: EnhancementRequest,
    *,
    timeout_s: float | None = None,
) -> ProviderAttempt:
    """Run one provider call; failures and blank replies come back as a non-success attempt."""
    started = time.perf_counter()

    def _elapsed() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        call = provider.enhance(request)
        text = await (asyncio.wait_for(call, timeout=timeout_s) if timeout_s else call)
    except ProviderError as exc:
        logger.warning("enhance_provider_failed provider=%s code=%s: %s", provider.name, exc.code, exc)
        return ProviderAttempt(provider.name, "error", error_code=exc.code, latency_ms=_elapsed())
    except asyncio.TimeoutError:
        logger.warning("enhance_provider_timeout provider=%s timeout_s=%s", provider.name, timeout_s)
        return ProviderAttempt(provider.name, "error", error_code="timeout", latency_ms=_elapsed())
    except Exception as exc:  # noqa: BLE001
        logger.warning("enhance_provider_failed provider=%s code=unexpected: %s", provider.name, exc)
        return ProviderAttempt(provider.name, "error", error_code="unexpected", latency_ms=_elapsed())

    if not isinstance(text, str) or not text.strip():
        logger.warning("enhance_provider_empty provider=%s", provider.name)
        return ProviderAttempt(provider.name, "empty", error_code="empty_response", latency_ms=_elapsed())

    return ProviderAttempt(provider.name, "success", text=text.strip(), latency_ms=_elapsed())


class EnhancementOrchestrator:
    """Try remote providers in order, then fall back to the local rules.

    START goes to LOCAL when no provider is configured, otherwise to the first
    provider. Each provider either finishes (non-empty text) or hands over to
    the next one; after the last one comes LOCAL, which always produces text.
    Nothing is raised to the caller.
    """

    def __init__(
        self,
        providers: Sequence[EnhancementProvider] = (),
        *,
        local_enhancer: Callable[[str], str] = enhance_locally,
        instruction_prompt: str = INSTRUCTION_PROMPT,
        timeout_s: float | None = None,
    ):
        self._providers = tuple(providers)
        self._local_enhancer = local_enhancer
        self._instruction_prompt = instruction_prompt
        self._timeout_s = timeout_s

    @classmethod
    def from_credentials(cls, credentials: ProviderCredentials, **kwargs) -> "EnhancementOrchestrator":
        from app.ai.factory import build_providers

        return cls(build_providers(credentials), **kwargs)

    @property
    def provider_names(self) -> tuple[ProviderName, ...]:
        return tuple(provider.name for provider in self._providers)

    async def enhance(self, raw_text: str | None) -> EnhancementOutcome:
        return await self.enhance_normalized(normalize_text(raw_text))

    async def enhance_normalized(self, normalized_text: str) -> EnhancementOutcome:
        request = build_enhancement_request(normalized_text, instruction_prompt=self._instruction_prompt)
        attempts: list[ProviderAttempt] = []

        if not self._providers:
            logger.info("enhance_no_providers_configured using=local")

        for provider in self._providers:
            attempt = await attempt_provider(provider, request, timeout_s=self._timeout_s)
            attempts.append(attempt)
            if attempt.outcome == "success" and attempt.text:
                logger.info("enhance_done provider=%s latency_ms=%s", provider.name, attempt.latency_ms)
                return EnhancementOutcome(
                    result=EnhancementResult(text=attempt.text, source_provider=provider.name),
                    attempts=tuple(attempts),
                    normalized_text=normalized_text,
                )

        if attempts:
            logger.info("enhance_remote_exhausted attempts=%s using=local", len(attempts))
        return EnhancementOutcome(
            result=EnhancementResult(text=self._run_local(normalized_text), source_provider="local"),
            attempts=tuple(attempts),
            normalized_text=normalized_text,
        )

    def _run_local(self, normalized_text: str) -> str:
        try:
            text = self._local_enhancer(normalized_text)
        except Exception:  # noqa: BLE001
            logger.exception("local_enhance_failed chars=%s", len(normalized_text))
            return normalized_text
        return text if isinstance(text, str) else normalized_text
