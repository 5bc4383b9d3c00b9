from __future__ import annotations

import asyncio
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from fakes import FakeCompleter
from content_study.application import ChatService, Summarizer
from content_study.application.summarizer import format_sources, topic_sample
from content_study.core.errors import ProviderError, SummarizationError
from content_study.domain import DEFAULT_TOPIC, TranscriptResult

TRANSCRIPTS = [
    TranscriptResult.ok("https://youtu.be/dQw4w9WgXcQ", "youtube", "Spaced repetition beats cramming."),
    TranscriptResult.failed("https://x.com/a/status/1", "twitter", "Video unavailable"),
    TranscriptResult.ok("https://tiktok.com/@u/video/2", "tiktok", "Test yourself every day."),
]


def test_summarize_makes_one_call_over_successful_sources():
    completer = FakeCompleter()
    summarizer = Summarizer(completer)

    result = asyncio.run(summarizer.summarize(TRANSCRIPTS, "Learning"))

    assert len(completer.summary_prompts) == 1
    prompt = completer.summary_prompts[0]
    assert prompt.startswith('The topic is: "Learning"')
    assert "### Source 1: YOUTUBE\nURL: https://youtu.be/dQw4w9WgXcQ" in prompt
    assert "### Source 2: TIKTOK" in prompt
    assert "x.com" not in prompt
    assert result.summary == "Two creators explain spaced repetition."
    assert result.key_takeaways.startswith("• Review material")
    assert result.how_to_apply == "• Schedule three short reviews this week."
    assert result.connections_and_patterns == "• Both sources stress active recall."


def test_summarize_rejects_input_without_successes():
    completer = FakeCompleter()
    failures = [TranscriptResult.failed("https://x.com/a/status/1", "twitter", "gone")]

    with pytest.raises(SummarizationError):
        asyncio.run(Summarizer(completer).summarize(failures))
    assert completer.prompts == []


def test_summarize_wraps_provider_errors():
    completer = FakeCompleter(error=ProviderError("overloaded"))

    with pytest.raises(SummarizationError, match="overloaded"):
        asyncio.run(Summarizer(completer).summarize(TRANSCRIPTS))


def test_summarize_rejects_empty_model_output():
    with pytest.raises(SummarizationError):
        asyncio.run(Summarizer(FakeCompleter(summary="   ")).summarize(TRANSCRIPTS))


def test_derive_topic_truncates_to_five_words():
    completer = FakeCompleter(title='"A Very Long Title About Memory Techniques"')

    title = asyncio.run(Summarizer(completer).derive_topic("some transcript"))

    assert title == "A Very Long Title About"


def test_derive_topic_falls_back_to_default():
    summarizer = Summarizer(FakeCompleter(title_error=ProviderError("down")))

    assert asyncio.run(summarizer.derive_topic("some transcript")) == DEFAULT_TOPIC
    assert asyncio.run(Summarizer(FakeCompleter()).derive_topic("   ")) == DEFAULT_TOPIC
    assert asyncio.run(Summarizer(FakeCompleter(title="  ")).derive_topic("text")) == DEFAULT_TOPIC


def test_topic_sample_uses_first_success_only():
    long_text = "x" * 800
    transcripts = [
        TranscriptResult.failed("https://a", "youtube", "no"),
        TranscriptResult.ok("https://b", "youtube", long_text),
    ]

    assert topic_sample(transcripts) == "x" * 500
    assert topic_sample(transcripts[:1]) == ""


def test_format_sources_separates_blocks():
    text = format_sources([TRANSCRIPTS[0], TRANSCRIPTS[2]])

    assert text.count("\n\n---\n\n") == 1


def test_chat_service_passes_context_as_system_prompt():
    completer = FakeCompleter(chat_reply="Use flashcards.")
    service = ChatService(completer)

    answer = asyncio.run(service.answer([{"role": "user", "content": "How?"}], "Transcript text"))

    assert answer == "Use flashcards."
    messages, system = completer.chats[0]
    assert messages == [{"role": "user", "content": "How?"}]
    assert "Transcript text" in system


def test_chat_service_requires_messages():
    with pytest.raises(ValueError):
        asyncio.run(ChatService(FakeCompleter()).answer([], "context"))
