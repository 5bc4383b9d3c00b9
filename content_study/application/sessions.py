"""Application service layer for study sessions."""
from __future__ import annotations

from typing import Sequence

from content_study.core.errors import SessionNotFoundError
from content_study.core.schema import SessionListItem, StatusResponse
from content_study.core.urls import UrlEntry
from content_study.domain import PLACEHOLDER_TOPIC, Session, SummaryResult, TranscriptResult
from content_study.infrastructure import InMemorySessionRepository, PublishedPage, SessionRepository


class SessionService:
    """Coordinates session use cases over a :class:`SessionRepository`."""

    def __init__(self, repository: SessionRepository) -> None:
        self._repository = repository

    # ------------------------------------------------------------------
    # session lifecycle
    # ------------------------------------------------------------------
    def next_session_id(self) -> str:
        return self._repository.next_session_id()

    def create_session(
        self,
        entries: Sequence[UrlEntry],
        page: PublishedPage,
        *,
        topic_name: str | None = None,
        user_id: str | None = None,
        session_id: str | None = None,
    ) -> Session:
        return self._repository.create_session(
            session_id or self.next_session_id(),
            topic_name or PLACEHOLDER_TOPIC,
            [entry.url for entry in entries],
            user_id=user_id,
            external_page_id=page.page_id,
            external_page_url=page.page_url,
        )

    def get_session(self, session_id: str) -> Session:
        session = self._repository.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    # ------------------------------------------------------------------
    # read models
    # ------------------------------------------------------------------
    def get_status(self, session_id: str) -> dict:
        return StatusResponse.from_session(self.get_session(session_id)).to_json()

    def list_sessions(self, user_id: str | None = None) -> list[dict]:
        return [
            SessionListItem.from_session(session).to_json()
            for session in self._repository.list_sessions(user_id)
        ]

    # ------------------------------------------------------------------
    # pipeline mutations
    # ------------------------------------------------------------------
    def begin(self, session_id: str) -> Session:
        return self._repository.begin(session_id)

    def update_progress(self, session_id: str, stage: str, *, current: int | None = None) -> Session:
        return self._repository.update_progress(session_id, stage, current=current)

    def record_transcript(self, session_id: str, result: TranscriptResult) -> Session:
        return self._repository.append_transcript(session_id, result)

    def rename(self, session_id: str, topic_name: str) -> Session:
        return self._repository.set_topic_name(session_id, topic_name)

    def complete(self, session_id: str, summary: SummaryResult, *, topic_name: str | None = None) -> Session:
        return self._repository.complete(session_id, summary, topic_name=topic_name)

    def fail(self, session_id: str, error: str) -> Session:
        return self._repository.fail(session_id, error)

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._repository.reset()


_repository = InMemorySessionRepository()
_service = SessionService(_repository)


def get_session_service() -> SessionService:
    """Return the singleton session service for the process."""

    return _service


def reset_session_state() -> None:
    """Reset the in-memory store (used in tests)."""

    _service.reset()
