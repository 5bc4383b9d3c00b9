"""Publish study notes to a Notion database."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Sequence

import httpx

from content_study.core.errors import PublicationError
from content_study.domain import SummaryResult, TranscriptResult
from content_study.domain.sessions import utcnow

from .publishing import PublishedPage, PublishStatus

logger = logging.getLogger(__name__)

# Notion rejects rich text over 2000 characters and appends over 100 blocks.
MAX_TEXT_LENGTH = 1900
MAX_CHILDREN_PER_REQUEST = 100

SUMMARY_HEADINGS: tuple[tuple[str, str], ...] = (
    ("Summary", "summary"),
    ("Key Takeaways", "key_takeaways"),
    ("How to Apply This", "how_to_apply"),
    ("Connections and Patterns", "connections_and_patterns"),
)


def _rich_text(content: str, **extra: Any) -> dict[str, Any]:
    text: dict[str, Any] = {"content": content}
    if "link" in extra:
        text["link"] = {"url": extra.pop("link")}
    item: dict[str, Any] = {"type": "text", "text": text}
    if extra:
        item["annotations"] = extra
    return item


def _heading(level: int, content: str) -> dict[str, Any]:
    key = f"heading_{level}"
    return {"type": key, key: {"rich_text": [_rich_text(content)]}}


def _paragraph(*parts: dict[str, Any]) -> dict[str, Any]:
    return {"type": "paragraph", "paragraph": {"rich_text": list(parts)}}


def _divider() -> dict[str, Any]:
    return {"type": "divider", "divider": {}}


def text_blocks(text: str, max_length: int = MAX_TEXT_LENGTH) -> list[dict[str, Any]]:
    """Split ``text`` into paragraph blocks on line boundaries.

    A single line longer than ``max_length`` is cut into fixed-size pieces.
    """

    blocks: list[dict[str, Any]] = []
    current = ""
    for line in (text or "").split("\n"):
        while len(line) > max_length:
            if current:
                blocks.append(_paragraph(_rich_text(current)))
                current = ""
            blocks.append(_paragraph(_rich_text(line[:max_length])))
            line = line[max_length:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > max_length:
            blocks.append(_paragraph(_rich_text(current)))
            current = line
        else:
            current = candidate
    if current.strip():
        blocks.append(_paragraph(_rich_text(current)))
    return blocks


def build_page_blocks(
    transcripts: Sequence[TranscriptResult],
    summary: SummaryResult,
    processed_at: datetime,
) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = [_heading(2, "Source URLs")]
    for item in transcripts:
        note = " (transcribed)" if item.success else f" (failed: {item.error})"
        blocks.append(
            {
                "type": "bulleted_list_item",
                "bulleted_list_item": {
                    "rich_text": [
                        _rich_text(f"{item.platform.upper()}: {item.url}", link=item.url),
                        _rich_text(note),
                    ]
                },
            }
        )
    blocks.append(_divider())

    for heading, field_name in SUMMARY_HEADINGS:
        blocks.append(_heading(2, heading))
        blocks.extend(text_blocks(getattr(summary, field_name)))

    blocks.append(_divider())
    blocks.append(_heading(2, "Combined Transcript"))
    successful = [item for item in transcripts if item.success]
    for index, item in enumerate(successful, start=1):
        blocks.append(_heading(3, f"Source {index}: {item.platform.upper()}"))
        blocks.extend(text_blocks(item.transcript))

    blocks.append(_divider())
    blocks.append(
        _paragraph(
            _rich_text(
                f"Processed on {processed_at.strftime('%Y-%m-%d %H:%M UTC')}",
                italic=True,
                color="gray",
            )
        )
    )
    return blocks


def _title_property(title: str) -> dict[str, Any]:
    return {"title": [{"text": {"content": title[:MAX_TEXT_LENGTH]}}]}


def _status_property(status: PublishStatus) -> dict[str, Any]:
    return {"select": {"name": status}}


class NotionPublisher:
    """Publisher backed by the Notion REST API."""

    def __init__(
        self,
        api_key: str,
        database_id: str,
        *,
        api_base: str = "https://api.notion.com",
        notion_version: str = "2022-06-28",
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if not api_key or not database_id:
            raise ValueError("api_key and database_id are required")
        self._database_id = database_id
        self._api_base = api_base.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": notion_version,
            "Content-Type": "application/json",
        }
        self._clock = clock
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.request(method, f"{self._api_base}{path}", headers=self._headers, json=payload)
        except httpx.HTTPError as exc:
            raise PublicationError(f"Notion request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            raise PublicationError(f"Notion returned {response.status_code}: {message or response.text}")
        return body if isinstance(body, dict) else {}

    @staticmethod
    def page_url(page_id: str) -> str:
        return f"https://notion.so/{page_id.replace('-', '')}"

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def create_page(self, title: str, source_urls: Sequence[str]) -> PublishedPage:
        payload = {
            "parent": {"database_id": self._database_id},
            "properties": {
                "Name": _title_property(title),
                "Source URLs": {"rich_text": [{"text": {"content": "\n".join(source_urls)[:MAX_TEXT_LENGTH]}}]},
                "Status": _status_property("Processing"),
            },
        }
        body = self._request("POST", "/v1/pages", payload)
        page_id = body.get("id")
        if not page_id:
            raise PublicationError("Notion did not return a page id")
        logger.info("Created Notion page %s for %r", page_id, title)
        return PublishedPage(page_id=str(page_id), page_url=body.get("url") or self.page_url(str(page_id)))

    def append_content(
        self,
        page_id: str,
        transcripts: Sequence[TranscriptResult],
        summary: SummaryResult,
        status: PublishStatus,
        title: str | None = None,
    ) -> None:
        properties: dict[str, Any] = {"Status": _status_property(status)}
        if title:
            properties["Name"] = _title_property(title)
        self._request("PATCH", f"/v1/pages/{page_id}", {"properties": properties})

        blocks = build_page_blocks(transcripts, summary, self._clock())
        for start in range(0, len(blocks), MAX_CHILDREN_PER_REQUEST):
            batch = blocks[start:start + MAX_CHILDREN_PER_REQUEST]
            self._request("PATCH", f"/v1/blocks/{page_id}/children", {"children": batch})

    def set_status(self, page_id: str, status: PublishStatus) -> None:
        self._request("PATCH", f"/v1/pages/{page_id}", {"properties": {"Status": _status_property(status)}})

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


__all__ = ["NotionPublisher", "build_page_blocks", "text_blocks"]
