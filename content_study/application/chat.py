"""Answer follow-up questions about collected content."""
from __future__ import annotations

import asyncio
from typing import Sequence

from content_study.core.errors import ProviderError
from content_study.infrastructure import CompletionClient

CHAT_SYSTEM_PROMPT = """You are a helpful assistant answering questions about content the user has collected. Be concise and direct. No fluff.

Here is the content context:
---
{context}
---

Answer questions based on this content. If asked something not covered, say so briefly."""


class ChatService:
    def __init__(self, completer: CompletionClient, *, timeout: float = 120.0, max_tokens: int = 1024) -> None:
        self._completer = completer
        self._timeout = timeout
        self._max_tokens = max_tokens

    async def answer(self, messages: Sequence[dict[str, str]], context: str) -> str:
        if not messages:
            raise ValueError("at least one message is required")
        system = CHAT_SYSTEM_PROMPT.format(context=context)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(
                    lambda: self._completer.chat(list(messages), system=system, max_tokens=self._max_tokens)
                ),
                self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderError(f"Chat response timed out after {self._timeout:.0f}s") from exc
