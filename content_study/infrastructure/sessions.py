"""Infrastructure layer for session persistence."""
from __future__ import annotations

import copy
import secrets
import string
import threading
import time
from typing import Callable, Protocol, Sequence

from content_study.core.errors import SessionNotFoundError
from content_study.domain import Session, SummaryResult, TranscriptResult

_ID_ALPHABET = string.ascii_lowercase + string.digits


class SessionRepository(Protocol):
    """Persistence contract for study sessions."""

    def next_session_id(self) -> str: ...

    def create_session(
        self,
        session_id: str,
        topic_name: str,
        urls: Sequence[str],
        *,
        user_id: str | None = None,
        external_page_id: str | None = None,
        external_page_url: str | None = None,
    ) -> Session: ...

    def get_session(self, session_id: str) -> Session | None: ...

    def list_sessions(self, user_id: str | None = None) -> list[Session]: ...

    def begin(self, session_id: str) -> Session: ...

    def update_progress(self, session_id: str, stage: str, *, current: int | None = None) -> Session: ...

    def append_transcript(self, session_id: str, result: TranscriptResult) -> Session: ...

    def set_topic_name(self, session_id: str, topic_name: str) -> Session: ...

    def complete(self, session_id: str, summary: SummaryResult, *, topic_name: str | None = None) -> Session: ...

    def fail(self, session_id: str, error: str) -> Session: ...

    def reset(self) -> None: ...


class InMemorySessionRepository:
    """Process-local repository; sessions vanish on restart.

    Every mutation runs under one lock and readers receive deep copies, so
    a snapshot never changes after it has been handed out.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _mutate(self, session_id: str, change: Callable[[Session], None]) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            change(session)
            return copy.deepcopy(session)

    # ------------------------------------------------------------------
    # CRUD operations
    # ------------------------------------------------------------------
    def next_session_id(self) -> str:
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
        return f"session_{int(time.time() * 1000)}_{suffix}"

    def create_session(
        self,
        session_id: str,
        topic_name: str,
        urls: Sequence[str],
        *,
        user_id: str | None = None,
        external_page_id: str | None = None,
        external_page_url: str | None = None,
    ) -> Session:
        session = Session(
            id=session_id,
            topic_name=topic_name,
            urls=list(urls),
            user_id=user_id,
            external_page_id=external_page_id,
            external_page_url=external_page_url,
        )
        with self._lock:
            if session_id in self._sessions:
                raise ValueError(f"session {session_id} already exists")
            self._sessions[session_id] = session
            return copy.deepcopy(session)

    def get_session(self, session_id: str) -> Session | None:
        with self._lock:
            session = self._sessions.get(session_id)
            return copy.deepcopy(session) if session is not None else None

    def list_sessions(self, user_id: str | None = None) -> list[Session]:
        with self._lock:
            sessions = [
                copy.deepcopy(session)
                for session in self._sessions.values()
                if user_id is None or session.user_id == user_id
            ]
        sessions.sort(key=lambda item: item.created_at, reverse=True)
        return sessions

    def begin(self, session_id: str) -> Session:
        return self._mutate(session_id, lambda session: session.begin())

    def update_progress(self, session_id: str, stage: str, *, current: int | None = None) -> Session:
        return self._mutate(session_id, lambda session: session.set_stage(stage, current))

    def append_transcript(self, session_id: str, result: TranscriptResult) -> Session:
        return self._mutate(session_id, lambda session: session.record_transcript(result))

    def set_topic_name(self, session_id: str, topic_name: str) -> Session:
        return self._mutate(session_id, lambda session: session.rename(topic_name))

    def complete(self, session_id: str, summary: SummaryResult, *, topic_name: str | None = None) -> Session:
        return self._mutate(session_id, lambda session: session.complete(summary, topic_name))

    def fail(self, session_id: str, error: str) -> Session:
        return self._mutate(session_id, lambda session: session.fail(error))

    def reset(self) -> None:
        with self._lock:
            self._sessions.clear()
