"""Domain layer definitions."""

from .sessions import (
    DEFAULT_TOPIC,
    PLACEHOLDER_TOPIC,
    Progress,
    Session,
    SessionStatus,
    SummaryResult,
    TranscriptResult,
)

__all__ = [
    "DEFAULT_TOPIC",
    "PLACEHOLDER_TOPIC",
    "Progress",
    "Session",
    "SessionStatus",
    "SummaryResult",
    "TranscriptResult",
]
