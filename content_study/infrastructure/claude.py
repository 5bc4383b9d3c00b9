"""Integration with the Anthropic Messages API."""
from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from content_study.core.errors import ProviderError

logger = logging.getLogger(__name__)


class ClaudeError(ProviderError):
    """Raised when the Messages API fails or replies with non-text content."""


class ClaudeClient:
    """Minimal Messages API client used for summaries, titles and chat."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "claude-sonnet-4-20250514",
        api_base: str = "https://api.anthropic.com",
        api_version: str = "2023-06-01",
        timeout: float = 120.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self._model = model
        self._url = f"{api_base.rstrip('/')}/v1/messages"
        self._headers = {
            "x-api-key": api_key,
            "anthropic-version": api_version,
            "content-type": "application/json",
        }
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    @property
    def model(self) -> str:
        return self._model

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _build_payload(
        self,
        messages: Sequence[dict[str, str]],
        *,
        system: str | None,
        max_tokens: int,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": [{"role": item["role"], "content": item["content"]} for item in messages],
        }
        if system:
            payload["system"] = system
        return payload

    @staticmethod
    def _extract_text(body: Any) -> str:
        if not isinstance(body, dict):
            raise ClaudeError("Unexpected response from Claude")
        content = body.get("content")
        if not isinstance(content, list) or not content:
            raise ClaudeError("Claude returned no content")
        first = content[0]
        if not isinstance(first, dict) or first.get("type") != "text":
            raise ClaudeError("Unexpected response type from Claude")
        return str(first.get("text") or "")

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def chat(
        self,
        messages: Sequence[dict[str, str]],
        *,
        system: str | None = None,
        max_tokens: int = 1024,
    ) -> str:
        payload = self._build_payload(messages, system=system, max_tokens=max_tokens)
        logger.debug("Sending %d message(s) to %s", len(payload["messages"]), self._model)
        try:
            response = self._client.post(self._url, headers=self._headers, json=payload)
        except httpx.HTTPError as exc:
            raise ClaudeError(f"Claude request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = None
            error = body.get("error") if isinstance(body, dict) else None
            if isinstance(error, dict):
                message = error.get("message")
            raise ClaudeError(f"Claude returned {response.status_code}: {message or response.text}")
        return self._extract_text(body)

    def complete(self, prompt: str, max_tokens: int = 1024, *, system: str | None = None) -> str:
        return self.chat([{"role": "user", "content": prompt}], system=system, max_tokens=max_tokens)

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


__all__ = ["ClaudeClient", "ClaudeError"]
