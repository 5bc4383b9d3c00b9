"""Contracts for media acquisition and transcription providers.

Concrete implementations live in :mod:`downloader`, :mod:`farcaster` and
:mod:`assemblyai`. The unconfigured transcriber is installed when no API key
is available so that each URL fails with a readable message instead of the
whole service refusing to start.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from content_study.core.errors import ProviderNotConfiguredError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DownloadedMedia:
    """A temporary audio file owned by exactly one acquisition call."""

    path: Path
    released: bool = False

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove temporary media %s: %s", self.path, exc)


class MediaDownloader(Protocol):
    """Contract for the audio download backend."""

    def download(self, url: str, platform: str) -> DownloadedMedia:
        """Download the audio track of ``url`` into a temporary file."""


class TextFetcher(Protocol):
    """Contract for reading text-native posts without downloading media."""

    def fetch_text(self, url: str, platform: str) -> str | None:
        """Return the post text, or ``None`` when the item is not text-only."""


class Transcriber(Protocol):
    """Contract for speech-to-text providers."""

    def transcribe(self, path: Path) -> str:
        """Return the transcript of the audio file at ``path``."""


class UnconfiguredTranscriber:
    def __init__(self, setting: str = "ASSEMBLYAI_API_KEY") -> None:
        self._setting = setting

    def transcribe(self, path: Path) -> str:
        raise ProviderNotConfiguredError(f"Transcription is not configured ({self._setting} is not set)")


__all__ = [
    "DownloadedMedia",
    "MediaDownloader",
    "TextFetcher",
    "Transcriber",
    "UnconfiguredTranscriber",
]
