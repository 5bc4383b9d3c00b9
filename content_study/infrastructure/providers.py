"""Process-wide registry of the external collaborators.

Applications call :func:`configure_providers` during start-up (tests install
fakes the same way); everything else asks :func:`get_providers`.
"""
from __future__ import annotations

from dataclasses import dataclass

from content_study.core.config import Settings, get_settings

from .assemblyai import AssemblyAIClient
from .claude import ClaudeClient
from .downloader import TweetTextFetcher, YtDlpDownloader
from .farcaster import FarcasterClient
from .llm import CompletionClient, UnconfiguredCompletionClient
from .media import MediaDownloader, TextFetcher, Transcriber, UnconfiguredTranscriber
from .notion import NotionPublisher
from .publishing import NoOpPublisher, Publisher


class PlatformTextFetcher:
    """Route text lookups to the fetcher registered for each platform."""

    def __init__(self, fetchers: dict[str, TextFetcher]) -> None:
        self._fetchers = dict(fetchers)

    def fetch_text(self, url: str, platform: str) -> str | None:
        fetcher = self._fetchers.get(platform)
        if fetcher is None:
            return None
        return fetcher.fetch_text(url, platform)


@dataclass(slots=True)
class Providers:
    downloader: MediaDownloader
    text_fetcher: TextFetcher
    transcriber: Transcriber
    completer: CompletionClient
    publisher: Publisher


def build_providers(settings: Settings) -> Providers:
    """Create provider clients for whichever credentials are configured."""

    transcriber: Transcriber = UnconfiguredTranscriber()
    if settings.assemblyai_api_key:
        transcriber = AssemblyAIClient(settings.assemblyai_api_key, max_wait=settings.transcribe_timeout)

    completer: CompletionClient = UnconfiguredCompletionClient()
    if settings.anthropic_api_key:
        completer = ClaudeClient(
            settings.anthropic_api_key,
            model=settings.anthropic_model,
            timeout=settings.completion_timeout,
        )

    publisher: Publisher = NoOpPublisher()
    if settings.notion_api_key and settings.notion_database_id:
        publisher = NotionPublisher(
            settings.notion_api_key,
            settings.notion_database_id,
            timeout=settings.publish_timeout,
        )

    text_fetcher = PlatformTextFetcher(
        {
            "twitter": TweetTextFetcher(socket_timeout=settings.text_fetch_timeout),
            "farcaster": FarcasterClient(settings.neynar_api_key, timeout=settings.text_fetch_timeout),
        }
    )

    return Providers(
        downloader=YtDlpDownloader(settings.download_dir),
        text_fetcher=text_fetcher,
        transcriber=transcriber,
        completer=completer,
        publisher=publisher,
    )


_providers: Providers | None = None


def configure_providers(providers: Providers | None) -> None:
    """Install the providers used by the pipeline (``None`` rebuilds lazily)."""

    global _providers
    _providers = providers


def get_providers() -> Providers:
    """Return the configured providers, building defaults from settings."""

    global _providers
    if _providers is None:
        _providers = build_providers(get_settings())
    return _providers


__all__ = [
    "PlatformTextFetcher",
    "Providers",
    "build_providers",
    "configure_providers",
    "get_providers",
]
