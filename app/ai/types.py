from dataclasses import dataclass
from typing import Literal, Protocol


Role = Literal["system", "user", "assistant"]
ProviderName = Literal["jules", "openai", "local"]

REMOTE_PROVIDER_ORDER: tuple[ProviderName, ...] = ("jules", "openai")


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


@dataclass(frozen=True)
class EnhancementRequest:
    normalized_text: str
    instruction_prompt: str

    def render_prompt(self) -> str:
        return f"{self.instruction_prompt}\n\nResume:\n{self.normalized_text}"


@dataclass(frozen=True)
class EnhancementResult:
    text: str
    source_provider: ProviderName


class ProviderError(RuntimeError):
    def __init__(self, message: str, *, provider: str, code: str = "provider_failed"):
        super().__init__(message)
        self.provider = provider
        self.code = code


class EnhancementProvider(Protocol):
    name: ProviderName

    async def enhance(self, request: EnhancementRequest) -> str: ...
