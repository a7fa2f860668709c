from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaError(RuntimeError):
    """Raised when the Ollama HTTP API cannot be reached or returns an error."""


class OllamaApiError(OllamaError):
    """Ollama answered, but with an error (unknown model, bad request, ...)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class OllamaConnectionError(OllamaError):
    """The Ollama server could not be reached (not running, timeout, ...)."""


def _error_text(body: bytes | str, status_code: int) -> str:
    text = body.decode(errors="ignore") if isinstance(body, bytes) else body
    try:
        data = json.loads(text)
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    text = text.strip()
    return text[:200] if text else f"HTTP {status_code}"


class OllamaApiClient:
    """Async client for the subset of the Ollama HTTP API the chat API needs.

    ``selected_model`` is the default model used by chats that do not name one.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        selected_model: Optional[str] = None,
        timeout: float = 300.0,
    ) -> None:
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.selected_model = selected_model
        self._http = httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def version(self) -> str:
        url = f"{self.base_url}/api/version"
        try:
            resp = await self._http.get(url)
        except httpx.TransportError as exc:
            raise OllamaConnectionError(str(exc) or repr(exc)) from exc
        if resp.status_code >= 400:
            raise OllamaApiError(
                _error_text(resp.text, resp.status_code), resp.status_code
            )
        return str(self._decode_json(resp, "version").get("version") or "")

    async def list_local_models(self) -> list[dict[str, Any]]:
        """Return the models installed on the Ollama server (``/api/tags``)."""

        url = f"{self.base_url}/api/tags"
        try:
            resp = await self._http.get(url)
        except httpx.TransportError as exc:
            raise OllamaConnectionError(str(exc) or repr(exc)) from exc
        if resp.status_code >= 400:
            raise OllamaApiError(
                _error_text(resp.text, resp.status_code), resp.status_code
            )

        payload = self._decode_json(resp, "tags")
        models = payload.get("models")
        if not isinstance(models, list):
            raise OllamaApiError("Malformed /api/tags response: missing 'models' array")
        return [item for item in models if isinstance(item, dict) and item.get("name")]

    async def chat_stream(
        self,
        model: str,
        messages: list[dict[str, Any]],
        options: Optional[dict[str, Any]] = None,
    ) -> AsyncIterator[str]:
        """Stream a chat reply from ``/api/chat``, yielding content fragments.

        Ollama answers with one JSON object per line; the last one carries
        ``"done": true``.
        """

        url = f"{self.base_url}/api/chat"
        payload: dict[str, Any] = {"model": model, "messages": messages, "stream": True}
        if options:
            payload["options"] = options

        logger.debug("[ollama] Streaming POST to %s (model=%s)", url, model)
        try:
            async with self._http.stream("POST", url, json=payload) as resp:
                if resp.status_code >= 400:
                    body = await resp.aread()
                    raise OllamaApiError(
                        _error_text(body, resp.status_code), resp.status_code
                    )
                async for line in resp.aiter_lines():
                    raw = line.strip()
                    if not raw:
                        continue
                    try:
                        obj = json.loads(raw)
                    except ValueError as exc:
                        raise OllamaApiError(
                            f"Undecodable stream line from Ollama: {raw[:200]}"
                        ) from exc
                    fragment, done = self._parse_stream_line(obj, raw)
                    if fragment:
                        yield fragment
                    if done:
                        break
        except httpx.TransportError as exc:
            raise OllamaConnectionError(str(exc) or repr(exc)) from exc
        except httpx.HTTPError as exc:
            raise OllamaApiError(str(exc) or repr(exc)) from exc

    @staticmethod
    def _parse_stream_line(obj: Any, raw: str) -> tuple[str, bool]:
        """Return ``(content fragment, done)`` for one decoded stream object."""
        if not isinstance(obj, dict):
            raise OllamaApiError(f"Unexpected stream line from Ollama: {raw[:200]}")
        if obj.get("error"):
            raise OllamaApiError(str(obj["error"]))
        message = obj.get("message")
        if message is None:
            message = {}
        if not isinstance(message, dict):
            raise OllamaApiError(f"Unexpected stream message from Ollama: {raw[:200]}")
        fragment = message.get("content") or ""
        if not isinstance(fragment, str):
            raise OllamaApiError(f"Unexpected stream content from Ollama: {raw[:200]}")
        return fragment, obj.get("done") is True

    @staticmethod
    def _decode_json(response: httpx.Response, op: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise OllamaApiError(
                f"Failed to decode JSON from Ollama {op} response: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise OllamaApiError(f"Ollama {op} response was not an object")
        return data


__all__ = [
    "OllamaApiClient",
    "OllamaApiError",
    "OllamaConnectionError",
    "OllamaError",
]
