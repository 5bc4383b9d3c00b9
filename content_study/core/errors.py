"""Exception types raised across the study pipeline."""
from __future__ import annotations


class ContentStudyError(RuntimeError):
    """Base class for every error raised by the project."""


class ProviderError(ContentStudyError):
    """Raised when a remote provider returns an error or unusable payload."""


class ProviderNotConfiguredError(ProviderError):
    """Raised when a provider is called without credentials."""


class AcquisitionError(ContentStudyError):
    """Download, text fetch or transcription failed for a single URL."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
        self.message = message


class AllAcquisitionsFailedError(ContentStudyError):
    """No URL in the run produced a transcript."""

    def __init__(self, message: str = "All URLs failed to process") -> None:
        super().__init__(message)


class SummarizationError(ContentStudyError):
    """The summary could not be produced."""


class PublicationError(ContentStudyError):
    """The external document store rejected a call."""


class SessionNotFoundError(ContentStudyError):
    """Lookup of an unknown or expired session id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class InvalidTransitionError(ContentStudyError):
    """A session was asked to move backwards or mutate after completion."""


__all__ = [
    "AcquisitionError",
    "AllAcquisitionsFailedError",
    "ContentStudyError",
    "InvalidTransitionError",
    "ProviderError",
    "ProviderNotConfiguredError",
    "PublicationError",
    "SessionNotFoundError",
    "SummarizationError",
]
