"""Turn one classified URL into transcript text."""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future
from contextlib import asynccontextmanager
from typing import AsyncIterator

from content_study.core.config import Settings
from content_study.core.errors import AcquisitionError, ProviderError
from content_study.core.urls import TEXT_PLATFORMS, UrlEntry
from content_study.infrastructure import DownloadedMedia, MediaDownloader, Providers, TextFetcher, Transcriber

logger = logging.getLogger(__name__)


def _release_late_download(future: "asyncio.Future[DownloadedMedia] | Future[DownloadedMedia]") -> None:
    """Release media from a download that finished after its timeout."""

    if future.cancelled() or future.exception() is not None:
        return
    future.result().release()


class AcquisitionAdapter:
    """Fetch post text directly or download and transcribe the audio.

    Provider calls are blocking, so each one runs in a worker thread under
    its own timeout. Failures are re-raised as :class:`AcquisitionError`
    carrying the URL; recording them is the caller's job.
    """

    def __init__(
        self,
        downloader: MediaDownloader,
        transcriber: Transcriber,
        text_fetcher: TextFetcher,
        *,
        download_timeout: float = 300.0,
        transcribe_timeout: float = 600.0,
        text_fetch_timeout: float = 30.0,
    ) -> None:
        self._downloader = downloader
        self._transcriber = transcriber
        self._text_fetcher = text_fetcher
        self._download_timeout = download_timeout
        self._transcribe_timeout = transcribe_timeout
        self._text_fetch_timeout = text_fetch_timeout

    @classmethod
    def from_providers(cls, providers: Providers, settings: Settings) -> "AcquisitionAdapter":
        return cls(
            providers.downloader,
            providers.transcriber,
            providers.text_fetcher,
            download_timeout=settings.download_timeout,
            transcribe_timeout=settings.transcribe_timeout,
            text_fetch_timeout=settings.text_fetch_timeout,
        )

    # ------------------------------------------------------------------
    # provider calls
    # ------------------------------------------------------------------
    async def fetch_text(self, entry: UrlEntry) -> str | None:
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._text_fetcher.fetch_text, entry.url, entry.platform),
                self._text_fetch_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Text lookup for %s timed out, falling back to download", entry.url)
            return None
        except Exception as exc:
            logger.warning("Text lookup for %s failed, falling back to download: %s", entry.url, exc)
            return None
        text = (text or "").strip()
        return text or None

    async def _download(self, entry: UrlEntry) -> DownloadedMedia:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, self._downloader.download, entry.url, entry.platform)
        try:
            return await asyncio.wait_for(asyncio.shield(future), self._download_timeout)
        except asyncio.TimeoutError as exc:
            future.add_done_callback(_release_late_download)
            raise ProviderError(f"Download timed out after {self._download_timeout:.0f}s") from exc

    @asynccontextmanager
    async def downloaded(self, entry: UrlEntry) -> AsyncIterator[DownloadedMedia]:
        """Yield the downloaded media and release it on every exit path."""

        media = await self._download(entry)
        try:
            yield media
        finally:
            media.release()

    async def transcribe(self, media: DownloadedMedia) -> str:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._transcriber.transcribe, media.path),
                self._transcribe_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderError(f"Transcription timed out after {self._transcribe_timeout:.0f}s") from exc

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def acquire(self, entry: UrlEntry) -> str:
        try:
            if entry.platform in TEXT_PLATFORMS:
                text = await self.fetch_text(entry)
                if text:
                    logger.info("Read %s post text directly from %s", entry.platform, entry.url)
                    return text

            async with self.downloaded(entry) as media:
                transcript = await self.transcribe(media)
        except AcquisitionError:
            raise
        except Exception as exc:
            raise AcquisitionError(entry.url, str(exc) or exc.__class__.__name__) from exc

        transcript = (transcript or "").strip()
        if not transcript:
            raise AcquisitionError(entry.url, "No speech detected in audio")
        return transcript


__all__ = ["AcquisitionAdapter"]
