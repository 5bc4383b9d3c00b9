"""Read Farcaster casts through Neynar, falling back to page metadata."""
from __future__ import annotations

import html
import logging
import re
from typing import Any

import httpx

logger = logging.getLogger(__name__)

CAST_URL = re.compile(r"(?:farcaster\.xyz|warpcast\.com)/([^/\s?#]+)/([a-zA-Z0-9x]+)", re.IGNORECASE)

_META_PATTERNS = (
    re.compile(r'<meta[^>]*property="og:description"[^>]*content="([^"]+)"', re.IGNORECASE),
    re.compile(r'<meta[^>]*name="twitter:description"[^>]*content="([^"]+)"', re.IGNORECASE),
    re.compile(r'<meta[^>]*name="description"[^>]*content="([^"]+)"', re.IGNORECASE),
)

BROWSER_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"


class FarcasterClient:
    """Fetch the text of a cast given its warpcast or farcaster.xyz URL."""

    def __init__(
        self,
        api_key: str = "NEYNAR_API_DOCS",
        *,
        api_base: str = "https://api.neynar.com",
        web_base: str = "https://warpcast.com",
        timeout: float = 15.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._web_base = web_base.rstrip("/")
        self._client = http_client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def parse_cast_url(url: str) -> tuple[str, str] | None:
        match = CAST_URL.search(url)
        if not match:
            return None
        return match.group(1), match.group(2)

    def _from_neynar(self, username: str, cast_hash: str) -> str | None:
        identifier = f"{self._web_base}/{username}/{cast_hash}"
        try:
            response = self._client.get(
                f"{self._api_base}/v2/farcaster/cast",
                params={"identifier": identifier, "type": "url"},
                headers={"Accept": "application/json", "api_key": self._api_key},
            )
        except httpx.HTTPError as exc:
            logger.warning("Neynar lookup failed for %s: %s", identifier, exc)
            return None
        if response.status_code != 200:
            logger.debug("Neynar returned %s for %s", response.status_code, identifier)
            return None

        try:
            payload: Any = response.json()
        except ValueError:
            return None
        cast = payload.get("cast") if isinstance(payload, dict) else None
        if not isinstance(cast, dict) or not cast.get("text"):
            return None
        author = cast.get("author")
        if not isinstance(author, dict):
            author = {}
        name = author.get("display_name") or author.get("username") or username
        return f"[Cast by @{name}]\n\n{cast['text']}"

    def _from_page_meta(self, username: str, cast_hash: str) -> str | None:
        page_url = f"{self._web_base}/{username}/{cast_hash}"
        try:
            response = self._client.get(page_url, headers={"User-Agent": BROWSER_USER_AGENT})
        except httpx.HTTPError as exc:
            logger.warning("Could not load cast page %s: %s", page_url, exc)
            return None
        if response.status_code != 200:
            return None

        for pattern in _META_PATTERNS:
            match = pattern.search(response.text)
            if match:
                return html.unescape(match.group(1))
        return None

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def fetch_text(self, url: str, platform: str = "farcaster") -> str | None:
        parsed = self.parse_cast_url(url)
        if parsed is None:
            return None
        username, cast_hash = parsed
        return self._from_neynar(username, cast_hash) or self._from_page_meta(username, cast_hash)

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


__all__ = ["FarcasterClient"]
