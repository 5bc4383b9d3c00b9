"""Audio download and tweet text lookup through yt-dlp."""
from __future__ import annotations

import logging
import re
import time
import uuid
from pathlib import Path
from typing import Any, Callable

import yt_dlp
from yt_dlp.utils import DownloadError

from content_study.core.errors import ProviderError

from .media import DownloadedMedia

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# Platforms that reject the default yt-dlp user agent more often than not.
_USER_AGENT_PLATFORMS = {"twitter", "tiktok", "instagram"}

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")

YoutubeDLFactory = Callable[[dict[str, Any]], Any]


def clean_error_message(exc: BaseException) -> str:
    """Strip terminal colour codes and the ``ERROR:`` prefix yt-dlp adds."""

    message = _ANSI_ESCAPE.sub("", str(exc)).strip()
    if message.upper().startswith("ERROR:"):
        message = message[len("ERROR:"):].strip()
    return message or exc.__class__.__name__


class YtDlpDownloader:
    """Download the best audio stream of a URL and convert it to mp3."""

    def __init__(
        self,
        download_dir: Path,
        *,
        socket_timeout: float = 30.0,
        ydl_factory: YoutubeDLFactory | None = None,
    ) -> None:
        self._download_dir = Path(download_dir)
        self._socket_timeout = socket_timeout
        self._ydl_factory = ydl_factory or yt_dlp.YoutubeDL

    def _options(self, output_template: Path, platform: str) -> dict[str, Any]:
        options: dict[str, Any] = {
            "format": "bestaudio/best",
            "outtmpl": str(output_template),
            "noplaylist": True,
            "quiet": True,
            "no_warnings": True,
            "socket_timeout": self._socket_timeout,
            "postprocessors": [
                {
                    "key": "FFmpegExtractAudio",
                    "preferredcodec": "mp3",
                    "preferredquality": "0",
                }
            ],
        }
        if platform in _USER_AGENT_PLATFORMS:
            options["http_headers"] = {"User-Agent": BROWSER_USER_AGENT}
        return options

    def _matching_files(self, stem: str) -> list[Path]:
        return sorted(self._download_dir.glob(f"{stem}.*"))

    def _remove_partials(self, stem: str) -> None:
        for candidate in self._matching_files(stem):
            try:
                candidate.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove partial download %s: %s", candidate, exc)

    def download(self, url: str, platform: str) -> DownloadedMedia:
        self._download_dir.mkdir(parents=True, exist_ok=True)
        stem = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
        template = self._download_dir / f"{stem}.%(ext)s"

        logger.info("Downloading audio for %s (%s)", url, platform)
        try:
            with self._ydl_factory(self._options(template, platform)) as ydl:
                ydl.download([url])
            files = self._matching_files(stem)
            if not files:
                raise ProviderError("Downloaded audio file not found")
        except DownloadError as exc:
            self._remove_partials(stem)
            raise ProviderError(clean_error_message(exc)) from exc
        except BaseException:
            self._remove_partials(stem)
            raise

        mp3 = [path for path in files if path.suffix == ".mp3"]
        chosen = mp3[0] if mp3 else files[0]
        for leftover in files:
            if leftover != chosen:
                leftover.unlink(missing_ok=True)
        logger.debug("Downloaded %s to %s", url, chosen)
        return DownloadedMedia(path=chosen)


class TweetTextFetcher:
    """Read the text of a post that carries no media."""

    def __init__(self, *, socket_timeout: float = 30.0, ydl_factory: YoutubeDLFactory | None = None) -> None:
        self._socket_timeout = socket_timeout
        self._ydl_factory = ydl_factory or yt_dlp.YoutubeDL

    def fetch_text(self, url: str, platform: str = "twitter") -> str | None:
        options = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "socket_timeout": self._socket_timeout,
        }
        try:
            with self._ydl_factory(options) as ydl:
                info = ydl.extract_info(url, download=False)
        except DownloadError as exc:
            logger.debug("No text metadata for %s: %s", url, clean_error_message(exc))
            return None

        if not isinstance(info, dict):
            return None
        description = str(info.get("description") or "").strip()
        if description and not info.get("formats"):
            return description
        return None


__all__ = ["TweetTextFetcher", "YtDlpDownloader", "clean_error_message"]
