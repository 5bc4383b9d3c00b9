"""Domain entities for study sessions."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from content_study.core.errors import InvalidTransitionError

SessionStatus = Literal["pending", "processing", "complete", "failed"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"complete", "failed"})

_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"processing"}),
    "processing": frozenset({"complete", "failed"}),
    "complete": frozenset(),
    "failed": frozenset(),
}

PLACEHOLDER_TOPIC = "Processing..."
DEFAULT_TOPIC = "Study Session"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class TranscriptResult:
    """Outcome of acquiring one URL."""

    url: str
    platform: str
    transcript: str = ""
    success: bool = False
    error: str | None = None

    @classmethod
    def ok(cls, url: str, platform: str, transcript: str) -> "TranscriptResult":
        return cls(url=url, platform=platform, transcript=transcript, success=True)

    @classmethod
    def failed(cls, url: str, platform: str, error: str) -> "TranscriptResult":
        return cls(url=url, platform=platform, transcript="", success=False, error=error or "Unknown error")


@dataclass(frozen=True, slots=True)
class SummaryResult:
    summary: str = ""
    key_takeaways: str = ""
    how_to_apply: str = ""
    connections_and_patterns: str = ""


@dataclass(slots=True)
class Progress:
    current: int
    total: int
    stage: str


@dataclass(slots=True)
class Session:
    """Aggregate root for one processing run.

    Mutations go through the methods below so that status only moves
    forward and a finished session never changes again.
    """

    id: str
    topic_name: str
    urls: list[str]
    user_id: str | None = None
    status: SessionStatus = "pending"
    progress: Progress | None = None
    transcripts: list[TranscriptResult] = field(default_factory=list)
    summary: SummaryResult | None = None
    error: str | None = None
    external_page_id: str | None = None
    external_page_url: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.progress is None:
            self.progress = Progress(current=0, total=len(self.urls), stage="Initializing")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def _touch(self) -> None:
        self.updated_at = utcnow()

    def _ensure_open(self) -> None:
        if self.is_terminal:
            raise InvalidTransitionError(f"session {self.id} is already {self.status}")

    def _transition(self, target: SessionStatus) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(f"session {self.id} cannot move from {self.status} to {target}")
        self.status = target

    def begin(self) -> None:
        self._transition("processing")
        self.progress = Progress(current=0, total=len(self.urls), stage="Starting")
        self._touch()

    def set_stage(self, stage: str, current: int | None = None) -> None:
        self._ensure_open()
        if self.progress is None:
            raise InvalidTransitionError(f"session {self.id} has not started")
        if current is not None:
            if current < self.progress.current or current > self.progress.total:
                raise InvalidTransitionError(
                    f"progress for session {self.id} must stay within "
                    f"[{self.progress.current}, {self.progress.total}], got {current}"
                )
            self.progress.current = current
        self.progress.stage = stage
        self._touch()

    def record_transcript(self, result: TranscriptResult) -> None:
        if self.status != "processing":
            raise InvalidTransitionError(f"session {self.id} is not processing")
        if len(self.transcripts) >= len(self.urls):
            raise InvalidTransitionError(f"session {self.id} already has a result for every URL")
        self.transcripts.append(result)
        self._touch()

    def rename(self, topic_name: str) -> None:
        self._ensure_open()
        self.topic_name = topic_name
        self._touch()

    def complete(self, summary: SummaryResult, topic_name: str | None = None) -> None:
        if len(self.transcripts) != len(self.urls):
            raise InvalidTransitionError(
                f"session {self.id} has {len(self.transcripts)} results for {len(self.urls)} URLs"
            )
        self._transition("complete")
        if topic_name:
            self.topic_name = topic_name
        self.summary = summary
        total = len(self.urls)
        self.progress = Progress(current=total, total=total, stage="Complete")
        self.error = None
        self._touch()

    def fail(self, error: str) -> None:
        self._transition("failed")
        self.error = error or "Unknown error"
        self.summary = None
        self._touch()


__all__ = [
    "DEFAULT_TOPIC",
    "PLACEHOLDER_TOPIC",
    "Progress",
    "Session",
    "SessionStatus",
    "SummaryResult",
    "TERMINAL_STATUSES",
    "TranscriptResult",
    "utcnow",
]
