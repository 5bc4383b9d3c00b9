"""Integration with the AssemblyAI speech-to-text REST API."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable

import httpx

from content_study.core.errors import ProviderError

logger = logging.getLogger(__name__)


class AssemblyAIError(ProviderError):
    """Raised when AssemblyAI rejects a request or fails a transcript."""


class AssemblyAIClient:
    """Upload a local audio file, request a transcript and wait for it."""

    def __init__(
        self,
        api_key: str,
        *,
        api_base: str = "https://api.assemblyai.com",
        timeout: float = 60.0,
        poll_interval: float = 3.0,
        max_wait: float = 600.0,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._poll_interval = poll_interval
        self._max_wait = max_wait
        self._sleep = sleep
        self._clock = clock
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        merged = {"authorization": self._api_key, **(headers or {})}
        try:
            response = self._client.request(method, f"{self._api_base}{path}", headers=merged, **kwargs)
        except httpx.HTTPError as exc:
            raise AssemblyAIError(f"AssemblyAI request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            detail = payload.get("error") if isinstance(payload, dict) else None
            raise AssemblyAIError(f"AssemblyAI returned {response.status_code}: {detail or response.text}")
        if not isinstance(payload, dict):
            raise AssemblyAIError("AssemblyAI returned an unexpected payload")
        return payload

    def upload(self, path: Path) -> str:
        payload = self._request(
            "POST",
            "/v2/upload",
            content=Path(path).read_bytes(),
            headers={"content-type": "application/octet-stream"},
        )
        upload_url = payload.get("upload_url")
        if not upload_url:
            raise AssemblyAIError("AssemblyAI upload did not return an upload_url")
        return str(upload_url)

    def submit(self, audio_url: str) -> str:
        payload = self._request(
            "POST",
            "/v2/transcript",
            json={"audio_url": audio_url, "language_detection": True},
        )
        transcript_id = payload.get("id")
        if not transcript_id:
            raise AssemblyAIError("AssemblyAI did not return a transcript id")
        return str(transcript_id)

    def wait_for(self, transcript_id: str) -> str:
        deadline = self._clock() + self._max_wait
        while True:
            payload = self._request("GET", f"/v2/transcript/{transcript_id}")
            status = payload.get("status")
            if status == "completed":
                return str(payload.get("text") or "")
            if status == "error":
                raise AssemblyAIError(str(payload.get("error") or "Transcription failed"))
            if self._clock() >= deadline:
                raise AssemblyAIError(f"Transcript {transcript_id} did not finish within {self._max_wait:.0f}s")
            self._sleep(self._poll_interval)

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def transcribe(self, path: Path) -> str:
        upload_url = self.upload(path)
        transcript_id = self.submit(upload_url)
        logger.debug("Submitted %s as AssemblyAI transcript %s", Path(path).name, transcript_id)
        return self.wait_for(transcript_id)

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


__all__ = ["AssemblyAIClient", "AssemblyAIError"]
