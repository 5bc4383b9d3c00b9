"""Contract for text-generation providers."""
from __future__ import annotations

from typing import Protocol, Sequence

from content_study.core.errors import ProviderNotConfiguredError


class CompletionClient(Protocol):
    """Contract for language model integrations."""

    def complete(self, prompt: str, max_tokens: int = 1024, *, system: str | None = None) -> str:
        """Return the model's text reply to a single user prompt."""

    def chat(
        self,
        messages: Sequence[dict[str, str]],
        *,
        system: str | None = None,
        max_tokens: int = 1024,
    ) -> str:
        """Return the model's reply to a multi-turn conversation."""


class UnconfiguredCompletionClient:
    """Installed when no model credentials are available."""

    def __init__(self, setting: str = "ANTHROPIC_API_KEY") -> None:
        self._setting = setting

    def _fail(self) -> str:
        raise ProviderNotConfiguredError(f"Text generation is not configured ({self._setting} is not set)")

    def complete(self, prompt: str, max_tokens: int = 1024, *, system: str | None = None) -> str:
        return self._fail()

    def chat(
        self,
        messages: Sequence[dict[str, str]],
        *,
        system: str | None = None,
        max_tokens: int = 1024,
    ) -> str:
        return self._fail()


__all__ = ["CompletionClient", "UnconfiguredCompletionClient"]
