from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from content_study.application import AcquisitionAdapter, SessionService, Summarizer, get_session_service
from content_study.application.summarizer import topic_sample
from content_study.core.config import get_settings
from content_study.core.errors import (
    AcquisitionError,
    AllAcquisitionsFailedError,
    InvalidTransitionError,
    PublicationError,
    SessionNotFoundError,
)
from content_study.core.urls import UrlEntry
from content_study.domain import TranscriptResult
from content_study.infrastructure import PublishedPage, Publisher, get_providers
from content_study.infrastructure.publishing import PublishStatus

logger = logging.getLogger(__name__)


@dataclass
class PipelineRequest:
    session_id: str
    entries: list[UrlEntry]
    page_id: str
    topic_name: str | None = None


@dataclass
class PipelineJob:
    session_id: str
    status: str


@dataclass
class PipelineOutcome:
    session_id: str
    status: str
    transcripts: list[TranscriptResult] = field(default_factory=list)
    error: str | None = None


class PipelineWorker:
    """Runs one detached asyncio task per session.

    URLs inside a session are acquired strictly one after another; separate
    sessions run concurrently. A job never raises: every failure ends in a
    terminal session state.
    """

    def __init__(
        self,
        service: SessionService,
        acquisition: AcquisitionAdapter,
        summarizer: Summarizer,
        publisher: Publisher,
        *,
        publish_timeout: float = 60.0,
    ) -> None:
        self._service = service
        self._acquisition = acquisition
        self._summarizer = summarizer
        self._publisher = publisher
        self._publish_timeout = publish_timeout
        self._tasks: dict[str, asyncio.Task[PipelineOutcome]] = {}

    # ------------------------------------------------------------------
    # queue
    # ------------------------------------------------------------------
    async def enqueue(self, request: PipelineRequest) -> PipelineJob:
        existing = self._tasks.get(request.session_id)
        if existing is not None and not existing.done():
            return PipelineJob(session_id=request.session_id, status="processing")

        task = asyncio.create_task(self.run(request), name=f"pipeline:{request.session_id}")
        self._tasks[request.session_id] = task
        task.add_done_callback(lambda done, sid=request.session_id: self._forget(sid, done))
        return PipelineJob(session_id=request.session_id, status="pending")

    def _forget(self, session_id: str, task: asyncio.Task[PipelineOutcome]) -> None:
        if self._tasks.get(session_id) is task:
            del self._tasks[session_id]

    def is_active(self, session_id: str) -> bool:
        task = self._tasks.get(session_id)
        return task is not None and not task.done()

    async def join(self, session_id: str) -> PipelineOutcome | None:
        task = self._tasks.get(session_id)
        if task is None:
            return None
        return await task

    async def shutdown(self) -> None:
        pending = list(self._tasks.values())
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # publication
    # ------------------------------------------------------------------
    async def _publish(self, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), self._publish_timeout)
        except asyncio.TimeoutError as exc:
            raise PublicationError(f"Publishing timed out after {self._publish_timeout:.0f}s") from exc

    async def open_page(self, title: str, source_urls: Sequence[str]) -> PublishedPage:
        """Create the external page before the session exists."""

        return await self._publish(self._publisher.create_page, title, list(source_urls))

    async def _mark_page(self, page_id: str, status: PublishStatus) -> None:
        try:
            await self._publish(self._publisher.set_status, page_id, status)
        except Exception as exc:
            logger.warning("Could not mark page %s as %s: %s", page_id, status, exc)

    # ------------------------------------------------------------------
    # pipeline
    # ------------------------------------------------------------------
    async def _acquire_all(self, session_id: str, entries: Sequence[UrlEntry]) -> list[TranscriptResult]:
        total = len(entries)
        results: list[TranscriptResult] = []
        for index, entry in enumerate(entries):
            self._service.update_progress(session_id, f"Acquiring {entry.platform} ({index + 1}/{total})")
            try:
                transcript = await self._acquisition.acquire(entry)
            except AcquisitionError as exc:
                logger.warning("Session %s: %s failed: %s", session_id, entry.url, exc.message)
                result = TranscriptResult.failed(entry.url, entry.platform, exc.message)
            else:
                logger.info("Session %s: acquired %s (%d chars)", session_id, entry.url, len(transcript))
                result = TranscriptResult.ok(entry.url, entry.platform, transcript)
            results.append(result)
            self._service.record_transcript(session_id, result)
            self._service.update_progress(
                session_id,
                f"Acquiring {entry.platform} ({index + 1}/{total})",
                current=index + 1,
            )
        return results

    async def _fail(self, request: PipelineRequest, message: str) -> None:
        try:
            self._service.fail(request.session_id, message)
        except (SessionNotFoundError, InvalidTransitionError) as exc:
            logger.error("Session %s could not be marked failed: %s", request.session_id, exc)
        await self._mark_page(request.page_id, "Failed")

    async def _execute(self, request: PipelineRequest) -> PipelineOutcome:
        session_id = request.session_id
        try:
            self._service.begin(session_id)
        except (SessionNotFoundError, InvalidTransitionError) as exc:
            logger.warning("Skipping pipeline for %s: %s", session_id, exc)
            return PipelineOutcome(session_id=session_id, status="skipped", error=str(exc))

        logger.info("Session %s: processing %d URL(s)", session_id, len(request.entries))
        transcripts = await self._acquire_all(session_id, request.entries)

        if not any(item.success for item in transcripts):
            message = str(AllAcquisitionsFailedError())
            logger.warning("Session %s: %s", session_id, message)
            await self._fail(request, message)
            return PipelineOutcome(session_id=session_id, status="failed", transcripts=transcripts, error=message)

        try:
            self._service.update_progress(session_id, "Generating summary")
            topic_name = request.topic_name
            if not topic_name:
                topic_name = await self._summarizer.derive_topic(topic_sample(transcripts))
                self._service.rename(session_id, topic_name)
            summary = await self._summarizer.summarize(transcripts, topic_name)
            await self._publish(
                self._publisher.append_content,
                request.page_id,
                transcripts,
                summary,
                "Complete",
                topic_name,
            )
            self._service.complete(session_id, summary, topic_name=topic_name)
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            logger.error("Session %s failed after acquisition: %s", session_id, message)
            await self._fail(request, message)
            return PipelineOutcome(session_id=session_id, status="failed", transcripts=transcripts, error=message)

        logger.info("Session %s complete as %r", session_id, topic_name)
        return PipelineOutcome(session_id=session_id, status="complete", transcripts=transcripts)

    async def run(self, request: PipelineRequest) -> PipelineOutcome:
        try:
            return await self._execute(request)
        except Exception as exc:  # pragma: no cover - detached jobs have no caller to report to
            logger.exception("Session %s crashed", request.session_id)
            await self._fail(request, "Unexpected error while processing")
            return PipelineOutcome(session_id=request.session_id, status="failed", error=str(exc))


_worker: PipelineWorker | None = None


def build_pipeline_worker(service: SessionService | None = None) -> PipelineWorker:
    settings = get_settings()
    providers = get_providers()
    return PipelineWorker(
        service or get_session_service(),
        AcquisitionAdapter.from_providers(providers, settings),
        Summarizer(providers.completer, timeout=settings.completion_timeout),
        providers.publisher,
        publish_timeout=settings.publish_timeout,
    )


def get_pipeline_worker() -> PipelineWorker:
    global _worker
    if _worker is None:
        _worker = build_pipeline_worker()
    return _worker


def reset_pipeline_worker() -> None:
    global _worker
    _worker = None
