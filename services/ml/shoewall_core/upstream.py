from __future__ import annotations

import base64
from typing import Any, Protocol

import httpx

from .config import PipelineConfig
from .errors import UpstreamError


class ChatCompletionClient(Protocol):
    async def complete(self, messages: list[dict[str, Any]]) -> str:
        ...


def image_data_url(image_bytes: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class OpenAIChatClient:
    """Minimal OpenAI chat-completions client returning the raw message text.

    No retries: a failed call surfaces as ``UpstreamError`` and the caller degrades.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout_sec: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self._transport = transport

    @classmethod
    def from_config(cls, config: PipelineConfig, transport: httpx.AsyncBaseTransport | None = None) -> "OpenAIChatClient":
        if not config.has_credentials:
            raise RuntimeError("openai_api_key is required for OpenAIChatClient")
        return cls(
            api_key=config.openai_api_key or "",
            model=config.openai_model,
            base_url=config.openai_base_url,
            timeout_sec=config.openai_timeout_sec,
            transport=transport,
        )

    async def complete(self, messages: list[dict[str, Any]]) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "response_format": {"type": "json_object"},
            "messages": messages,
            "temperature": 0.0,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self._transport) as client:
                resp = await client.post(f"{self.base_url}/chat/completions", headers=headers, json=body)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise UpstreamError(_error_detail(exc.response) or str(exc), status=status) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(str(exc) or exc.__class__.__name__) from exc

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamError("Malformed chat completion response", status=resp.status_code) from exc
        if not isinstance(content, str):
            raise UpstreamError("Chat completion returned no text content", status=resp.status_code)
        return content


def _error_detail(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:300] or None
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return None
