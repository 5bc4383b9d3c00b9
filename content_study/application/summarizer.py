"""Study summaries and topic titles from collected transcripts."""
from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from content_study.core.errors import SummarizationError
from content_study.core.sections import parse_summary_sections
from content_study.domain import DEFAULT_TOPIC, SummaryResult, TranscriptResult
from content_study.infrastructure import CompletionClient

logger = logging.getLogger(__name__)

STUDY_PROMPT = """Turn this content into study notes with exactly these four sections:

## Summary
2-3 sentences on what the content covers.

## Key Takeaways
3-5 bullets, each starting with "• ", one sentence of at most 15 words.

## How to Apply This
2-4 bullets starting with "• " describing concrete actions.

## Connections and Patterns
1-3 bullets starting with "• " linking ideas across the sources.

RULES:
- Use the section headings exactly as written
- No intro text before the first heading
- No other markdown

---

Content:

"""

TOPIC_PROMPT = (
    "Based on this transcript excerpt, generate a concise topic title (MAXIMUM 5 words) "
    "that describes what this content is about. Be specific and descriptive. "
    "Only respond with the title, nothing else.\n\nTranscript: {sample}"
)

SOURCE_SEPARATOR = "\n\n---\n\n"
TOPIC_SAMPLE_CHARS = 500
TOPIC_MAX_WORDS = 5


def successful_transcripts(transcripts: Sequence[TranscriptResult]) -> list[TranscriptResult]:
    return [item for item in transcripts if item.success]


def topic_sample(transcripts: Sequence[TranscriptResult]) -> str:
    """First characters of the first successful transcript."""

    for item in transcripts:
        if item.success:
            return item.transcript[:TOPIC_SAMPLE_CHARS]
    return ""


def format_sources(transcripts: Sequence[TranscriptResult]) -> str:
    return SOURCE_SEPARATOR.join(
        f"### Source {index}: {item.platform.upper()}\nURL: {item.url}\n\n{item.transcript}"
        for index, item in enumerate(transcripts, start=1)
    )


def truncate_title(title: str, max_words: int = TOPIC_MAX_WORDS) -> str:
    words = title.strip().strip("\"'").split()
    return " ".join(words[:max_words])


class Summarizer:
    """Wraps the text-generation provider for summaries and titles."""

    def __init__(
        self,
        completer: CompletionClient,
        *,
        timeout: float = 120.0,
        max_tokens: int = 4096,
        title_max_tokens: int = 50,
    ) -> None:
        self._completer = completer
        self._timeout = timeout
        self._max_tokens = max_tokens
        self._title_max_tokens = title_max_tokens

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        return await asyncio.wait_for(
            asyncio.to_thread(self._completer.complete, prompt, max_tokens),
            self._timeout,
        )

    def build_prompt(self, transcripts: Sequence[TranscriptResult], topic_hint: str | None = None) -> str:
        context = f'The topic is: "{topic_hint}"\n\n' if topic_hint else ""
        return context + STUDY_PROMPT + format_sources(transcripts)

    async def summarize(
        self,
        transcripts: Sequence[TranscriptResult],
        topic_hint: str | None = None,
    ) -> SummaryResult:
        """Summarize every successful transcript with a single provider call."""

        usable = successful_transcripts(transcripts)
        if not usable:
            raise SummarizationError("No successful transcripts to summarize")

        prompt = self.build_prompt(usable, topic_hint)
        try:
            text = await self._complete(prompt, self._max_tokens)
        except asyncio.TimeoutError as exc:
            raise SummarizationError(f"Summary generation timed out after {self._timeout:.0f}s") from exc
        except Exception as exc:
            raise SummarizationError(str(exc) or "Summary generation failed") from exc

        if not isinstance(text, str) or not text.strip():
            raise SummarizationError("Summary generation returned no text")
        return SummaryResult(**parse_summary_sections(text))

    async def derive_topic(self, sample_text: str) -> str:
        """Return a title of at most five words, or the default title."""

        sample = (sample_text or "")[:TOPIC_SAMPLE_CHARS]
        if not sample.strip():
            return DEFAULT_TOPIC
        try:
            text = await self._complete(TOPIC_PROMPT.format(sample=sample), self._title_max_tokens)
        except Exception as exc:
            logger.warning("Topic generation failed, using default title: %s", exc)
            return DEFAULT_TOPIC
        if not isinstance(text, str):
            return DEFAULT_TOPIC
        return truncate_title(text) or DEFAULT_TOPIC


__all__ = [
    "STUDY_PROMPT",
    "Summarizer",
    "format_sources",
    "successful_transcripts",
    "topic_sample",
    "truncate_title",
]
