"""Infrastructure layer exports."""

from .llm import CompletionClient
from .media import DownloadedMedia, MediaDownloader, TextFetcher, Transcriber
from .providers import Providers, build_providers, configure_providers, get_providers
from .publishing import NoOpPublisher, PublishedPage, Publisher
from .sessions import InMemorySessionRepository, SessionRepository

__all__ = [
    "CompletionClient",
    "DownloadedMedia",
    "InMemorySessionRepository",
    "MediaDownloader",
    "NoOpPublisher",
    "Providers",
    "PublishedPage",
    "Publisher",
    "SessionRepository",
    "TextFetcher",
    "Transcriber",
    "build_providers",
    "configure_providers",
    "get_providers",
]
