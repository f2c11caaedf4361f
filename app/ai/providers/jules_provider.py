from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from app.ai.config import JulesConfig
from app.ai.types import EnhancementRequest, ProviderError


def _first_text(*candidates: Any) -> str | None:
    for value in candidates:
        if isinstance(value, str) and value.strip():
            return value
    return None


def session_id_from_response(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    session_id = data.get("sessionId")
    if isinstance(session_id, str) and session_id.strip():
        return session_id.strip()
    name = data.get("name")
    if isinstance(name, str) and name.strip():
        return name.strip().rstrip("/").split("/")[-1] or None
    return None


def text_from_message_response(data: Any) -> str | None:
    """Read generated text from a sendMessage response; the field name varies by API revision."""
    if not isinstance(data, dict):
        return None
    response = data.get("response")
    nested = response.get("text") if isinstance(response, dict) else None
    content = data.get("content")
    if isinstance(content, dict):
        content = content.get("text")
    return _first_text(nested, content, data.get("output"), data.get("text"))


def text_from_direct_response(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    return _first_text(data.get("output"), data.get("text"))


class JulesProvider:
    """Session-based provider: create a session, then send the prompt to it."""

    name = "jules"

    def __init__(self, config: JulesConfig, *, client: httpx.AsyncClient | None = None):
        self._config = config
        self._client = client

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self._config.api_key,
        }

    def _url(self, path: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def enhance(self, request: EnhancementRequest) -> str:
        if self._client is not None:
            return await self._run(self._client, request)
        async with httpx.AsyncClient(timeout=self._config.timeout_s) as client:
            return await self._run(client, request)

    async def _run(self, client: httpx.AsyncClient, request: EnhancementRequest) -> str:
        prompt = request.render_prompt()
        session = await self._post_json(client, "sessions", {})
        session_id = session_id_from_response(session)

        if session_id:
            reply = await self._post_json(
                client,
                f"sessions/{quote(session_id, safe='')}:sendMessage",
                {"message": {"role": "user", "content": prompt}},
            )
            text = text_from_message_response(reply)
        else:
            reply = await self._post_json(client, "sessions", {"prompt": prompt})
            text = text_from_direct_response(reply)

        if text is None:
            raise ProviderError("Jules response did not contain text.", provider=self.name, code="malformed_response")
        return text.strip()

    async def _post_json(self, client: httpx.AsyncClient, path: str, body: dict[str, Any]) -> Any:
        try:
            response = await client.post(self._url(path), json=body, headers=self._headers)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ProviderError(f"Jules request timed out: {exc}", provider=self.name, code="timeout") from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            code = "auth_failed" if status_code in {401, 403} else f"http_{status_code}"
            raise ProviderError(f"Jules returned HTTP {status_code}.", provider=self.name, code=code) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Jules request failed: {exc}", provider=self.name, code="network") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError("Jules returned a non-JSON body.", provider=self.name, code="malformed_response") from exc
