"""In-process stand-ins for the external providers."""
from __future__ import annotations

import itertools
from pathlib import Path
from typing import Sequence

from content_study.application import AcquisitionAdapter, SessionService, Summarizer
from content_study.core.errors import ProviderError, PublicationError
from content_study.infrastructure import DownloadedMedia, Providers, PublishedPage
from content_study.infrastructure.sessions import InMemorySessionRepository
from content_study.workers.pipeline import PipelineWorker

SUMMARY_TEXT = """## Summary
Two creators explain spaced repetition.

## Key Takeaways
• Review material at growing intervals.
• Test yourself instead of rereading.

## How to Apply This
• Schedule three short reviews this week.

## Connections and Patterns
• Both sources stress active recall.
"""


class FakeDownloader:
    """Writes the URL into a temp file so the transcriber knows what it got."""

    def __init__(self, root: Path, failures: dict[str, Exception] | None = None) -> None:
        self.root = root
        self.failures = dict(failures or {})
        self.calls: list[tuple[str, str]] = []
        self.created: list[Path] = []
        self._counter = itertools.count(1)

    def download(self, url: str, platform: str) -> DownloadedMedia:
        self.calls.append((url, platform))
        if url in self.failures:
            raise self.failures[url]
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / f"media-{next(self._counter)}.mp3"
        path.write_text(url, encoding="utf-8")
        self.created.append(path)
        return DownloadedMedia(path=path)


class FakeTranscriber:
    def __init__(self, texts: dict[str, str] | None = None, failures: dict[str, Exception] | None = None) -> None:
        self.texts = dict(texts or {})
        self.failures = dict(failures or {})
        self.calls: list[Path] = []

    def transcribe(self, path: Path) -> str:
        self.calls.append(path)
        url = path.read_text(encoding="utf-8")
        if url in self.failures:
            raise self.failures[url]
        return self.texts.get(url, f"Transcript of {url}")


class FakeTextFetcher:
    def __init__(self, texts: dict[str, str] | None = None) -> None:
        self.texts = dict(texts or {})
        self.calls: list[tuple[str, str]] = []

    def fetch_text(self, url: str, platform: str) -> str | None:
        self.calls.append((url, platform))
        return self.texts.get(url)


class FakeCompleter:
    def __init__(
        self,
        summary: str = SUMMARY_TEXT,
        title: str = "Spaced Repetition Basics",
        chat_reply: str = "Review often.",
        error: Exception | None = None,
        title_error: Exception | None = None,
    ) -> None:
        self.summary = summary
        self.title = title
        self.chat_reply = chat_reply
        self.error = error
        self.title_error = title_error
        self.prompts: list[str] = []
        self.chats: list[tuple[list[dict[str, str]], str | None]] = []

    def complete(self, prompt: str, max_tokens: int = 1024, *, system: str | None = None) -> str:
        self.prompts.append(prompt)
        if "topic title" in prompt:
            if self.title_error is not None:
                raise self.title_error
            return self.title
        if self.error is not None:
            raise self.error
        return self.summary

    def chat(self, messages, *, system: str | None = None, max_tokens: int = 1024) -> str:
        self.chats.append((list(messages), system))
        if self.error is not None:
            raise self.error
        return self.chat_reply

    @property
    def summary_prompts(self) -> list[str]:
        return [prompt for prompt in self.prompts if "topic title" not in prompt]


class FakePublisher:
    def __init__(self, fail_on: Sequence[str] = ()) -> None:
        self.fail_on = set(fail_on)
        self.calls: list[tuple] = []
        self.statuses: list[tuple[str, str]] = []

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise PublicationError(f"{name} rejected")

    def create_page(self, title: str, source_urls: Sequence[str]) -> PublishedPage:
        self.calls.append(("create_page", title, list(source_urls)))
        self._maybe_fail("create_page")
        return PublishedPage(page_id="page-1", page_url="https://notion.so/page1")

    def append_content(self, page_id, transcripts, summary, status, title=None) -> None:
        self.calls.append(("append_content", page_id, list(transcripts), summary, status, title))
        self._maybe_fail("append_content")

    def set_status(self, page_id: str, status: str) -> None:
        self.calls.append(("set_status", page_id, status))
        self.statuses.append((page_id, status))
        self._maybe_fail("set_status")

    def called(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


def make_providers(
    root: Path,
    *,
    download_failures: dict[str, Exception] | None = None,
    transcripts: dict[str, str] | None = None,
    transcribe_failures: dict[str, Exception] | None = None,
    post_texts: dict[str, str] | None = None,
    completer: FakeCompleter | None = None,
    publisher: FakePublisher | None = None,
) -> Providers:
    return Providers(
        downloader=FakeDownloader(root, download_failures),
        text_fetcher=FakeTextFetcher(post_texts),
        transcriber=FakeTranscriber(transcripts, transcribe_failures),
        completer=completer or FakeCompleter(),
        publisher=publisher or FakePublisher(),
    )


def make_worker(providers: Providers, service: SessionService | None = None) -> PipelineWorker:
    service = service or SessionService(InMemorySessionRepository())
    return PipelineWorker(
        service,
        AcquisitionAdapter(providers.downloader, providers.transcriber, providers.text_fetcher),
        Summarizer(providers.completer),
        providers.publisher,
    )


def download_failure(message: str = "Video unavailable") -> ProviderError:
    return ProviderError(message)
