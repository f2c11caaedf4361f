from __future__ import annotations

from dataclasses import dataclass

from app.ai.types import REMOTE_PROVIDER_ORDER, ProviderName


@dataclass(frozen=True)
class JulesConfig:
    api_key: str
    base_url: str = "https://jules.googleapis.com/v1alpha"
    timeout_s: float = 30.0


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str
    model: str = "gpt-4o-mini"
    base_url: str | None = None
    timeout_s: float = 30.0
    max_retries: int = 2


@dataclass(frozen=True)
class ProviderCredentials:
    """Which remote providers may be tried, read once per enhancement."""

    jules: JulesConfig | None = None
    openai: OpenAIConfig | None = None

    def present(self) -> dict[ProviderName, bool]:
        return {
            "jules": self.jules is not None,
            "openai": self.openai is not None,
        }

    def configured(self) -> tuple[ProviderName, ...]:
        flags = self.present()
        return tuple(name for name in REMOTE_PROVIDER_ORDER if flags[name])


def load_provider_credentials() -> ProviderCredentials:
    from app.core.config import settings

    jules = None
    if settings.jules_api_key:
        jules = JulesConfig(
            api_key=settings.jules_api_key,
            base_url=settings.jules_base_url,
            timeout_s=settings.jules_timeout_s,
        )
    openai = None
    if settings.openai_api_key:
        openai = OpenAIConfig(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout_s=settings.openai_timeout_s,
            max_retries=settings.openai_max_retries,
        )
    return ProviderCredentials(jules=jules, openai=openai)
