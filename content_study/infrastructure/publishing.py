"""Contract for the external document store that receives study notes.

Without credentials the :class:`NoOpPublisher` is used: page ids are local
and no page URL is returned, which keeps the pipeline usable in development
and tests.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Literal, Protocol, Sequence

from content_study.domain import SummaryResult, TranscriptResult

logger = logging.getLogger(__name__)

PublishStatus = Literal["Processing", "Complete", "Failed"]


@dataclass(slots=True)
class PublishedPage:
    page_id: str
    page_url: str | None = None


class Publisher(Protocol):
    """Contract for publication integrations."""

    def create_page(self, title: str, source_urls: Sequence[str]) -> PublishedPage:
        """Create a page in ``Processing`` state listing the sources."""

    def append_content(
        self,
        page_id: str,
        transcripts: Sequence[TranscriptResult],
        summary: SummaryResult,
        status: PublishStatus,
        title: str | None = None,
    ) -> None:
        """Write the finished notes and update the page status and title."""

    def set_status(self, page_id: str, status: PublishStatus) -> None:
        """Update only the page status."""


class NoOpPublisher:
    """Fallback publisher used when no document store is configured."""

    def create_page(self, title: str, source_urls: Sequence[str]) -> PublishedPage:
        page = PublishedPage(page_id=f"local-{uuid.uuid4().hex}")
        logger.debug("Publishing disabled, created local page %s for %r", page.page_id, title)
        return page

    def append_content(
        self,
        page_id: str,
        transcripts: Sequence[TranscriptResult],
        summary: SummaryResult,
        status: PublishStatus,
        title: str | None = None,
    ) -> None:
        logger.debug("Publishing disabled, skipped content for %s", page_id)

    def set_status(self, page_id: str, status: PublishStatus) -> None:
        logger.debug("Publishing disabled, skipped status %s for %s", status, page_id)


__all__ = ["NoOpPublisher", "PublishStatus", "PublishedPage", "Publisher"]
