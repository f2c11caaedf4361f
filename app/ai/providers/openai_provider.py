from __future__ import annotations

from typing import Any

import openai
from openai import AsyncOpenAI

from app.ai.config import OpenAIConfig
from app.ai.types import ChatMessage, EnhancementRequest, ProviderError


def text_from_completion(response: Any) -> str | None:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if isinstance(content, str) and content.strip():
        return content
    return None


class OpenAIProvider:
    name = "openai"

    def __init__(
        self,
        config: OpenAIConfig,
        *,
        client: AsyncOpenAI | None = None,
        temperature: float = 0.3,
    ):
        self._model = config.model
        self._temperature = temperature
        key = (config.api_key or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")

        self._client = client or AsyncOpenAI(
            api_key=key,
            base_url=config.base_url or None,
            timeout=config.timeout_s,
            max_retries=config.max_retries,
        )

    def _messages(self, request: EnhancementRequest) -> list[ChatMessage]:
        return [
            ChatMessage(role="system", content=request.instruction_prompt),
            ChatMessage(role="user", content=request.normalized_text),
        ]

    async def enhance(self, request: EnhancementRequest) -> str:
        payload = [{"role": m.role, "content": m.content} for m in self._messages(request)]
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=payload,
                temperature=self._temperature,
            )
        except openai.APITimeoutError as exc:
            raise ProviderError(f"OpenAI request timed out: {exc}", provider=self.name, code="timeout") from exc
        except openai.AuthenticationError as exc:
            raise ProviderError("OpenAI rejected the API key.", provider=self.name, code="auth_failed") from exc
        except openai.APIStatusError as exc:
            raise ProviderError(
                f"OpenAI returned HTTP {exc.status_code}.", provider=self.name, code=f"http_{exc.status_code}"
            ) from exc
        except openai.APIError as exc:
            raise ProviderError(f"OpenAI request failed: {exc}", provider=self.name, code="network") from exc

        text = text_from_completion(response)
        if text is None:
            raise ProviderError("OpenAI completion had no content.", provider=self.name, code="malformed_response")
        return text.strip()
