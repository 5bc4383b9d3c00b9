"""Detect supported platforms in pasted text."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlparse

Platform = Literal["youtube", "tiktok", "instagram", "twitter", "farcaster", "unknown"]

# Text-native platforms can often be read without downloading media.
TEXT_PLATFORMS: frozenset[str] = frozenset({"twitter", "farcaster"})

_START = r"(?<![\w-])(?:https?://)?"

PLATFORM_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "youtube": (
        re.compile(_START + r"(?:www\.|m\.)?youtube\.com/watch\?(?:[^#\s]*&)?v=([A-Za-z0-9_-]{11})"),
        re.compile(_START + r"(?:www\.)?youtu\.be/([A-Za-z0-9_-]{11})"),
        re.compile(_START + r"(?:www\.|m\.)?youtube\.com/shorts/([A-Za-z0-9_-]{11})"),
        re.compile(_START + r"(?:www\.|m\.)?youtube\.com/embed/([A-Za-z0-9_-]{11})"),
    ),
    "tiktok": (
        re.compile(_START + r"(?:www\.|m\.)?tiktok\.com/@[\w.-]+/video/(\d+)"),
        re.compile(_START + r"(?:vm|vt)\.tiktok\.com/(\w+)"),
        re.compile(_START + r"(?:www\.)?tiktok\.com/t/(\w+)"),
    ),
    "instagram": (
        re.compile(_START + r"(?:www\.)?instagram\.com/(?:p|reel|reels|tv)/([\w-]+)"),
    ),
    "twitter": (
        re.compile(_START + r"(?:www\.|mobile\.)?(?:twitter|x)\.com/\w+/status/(\d+)"),
        re.compile(_START + r"(?:www\.|mobile\.)?(?:twitter|x)\.com/\w+/statuses/(\d+)"),
    ),
    "farcaster": (
        re.compile(_START + r"(?:www\.)?(?:warpcast\.com|farcaster\.xyz)/[^/\s?#]+/(0x[0-9a-fA-F]+)"),
    ),
}

DISPLAY_NAMES: dict[str, str] = {
    "youtube": "YouTube",
    "tiktok": "TikTok",
    "instagram": "Instagram",
    "twitter": "X (Twitter)",
    "farcaster": "Farcaster",
    "unknown": "Unknown",
}

_SCHEME_BOUNDARY = re.compile(r"(?=https?://)")
_URL_CANDIDATE = re.compile(r"(?:https?://|(?<![\w.-])www\.)[^\s<>\"'`]+")
_VALID_URL = re.compile(r"https?://[^\s<>\"'`]+")
_TRAILING_PUNCTUATION = ".,;:!?)"


@dataclass(frozen=True, slots=True)
class UrlEntry:
    """A URL found in user input together with its detected platform."""

    url: str
    platform: Platform
    id: str | None = None


def detect_platform(url: str) -> Platform:
    for platform, patterns in PLATFORM_PATTERNS.items():
        if any(pattern.search(url) for pattern in patterns):
            return platform  # type: ignore[return-value]
    return "unknown"


def extract_id(url: str, platform: str) -> str | None:
    for pattern in PLATFORM_PATTERNS.get(platform, ()):
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1)
    return None


def platform_display_name(platform: str) -> str:
    return DISPLAY_NAMES.get(platform, DISPLAY_NAMES["unknown"])


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _clean_candidate(candidate: str) -> str | None:
    url = candidate.rstrip(_TRAILING_PUNCTUATION)
    if url.startswith("www."):
        url = f"https://{url}"
    if not _VALID_URL.fullmatch(url) or not is_valid_url(url):
        return None
    return url


def extract_urls(raw_text: str) -> list[str]:
    """Return the distinct URLs in ``raw_text`` in first-seen order.

    Concatenated URLs such as ``https://a.comhttps://b.com`` are split at
    every scheme token before matching.
    """

    if not raw_text:
        return []

    separated = _SCHEME_BOUNDARY.sub("\n", raw_text)
    seen: set[str] = set()
    urls: list[str] = []
    for match in _URL_CANDIDATE.finditer(separated):
        url = _clean_candidate(match.group(0))
        if url is None or url in seen:
            continue
        seen.add(url)
        urls.append(url)
    return urls


def classify(raw_text: str) -> list[UrlEntry]:
    """Parse pasted text into ordered, de-duplicated :class:`UrlEntry` items.

    Unknown-platform URLs are kept so callers can report them.
    """

    entries: list[UrlEntry] = []
    for url in extract_urls(raw_text):
        platform = detect_platform(url)
        entries.append(UrlEntry(url=url, platform=platform, id=extract_id(url, platform)))
    return entries


__all__ = [
    "DISPLAY_NAMES",
    "PLATFORM_PATTERNS",
    "Platform",
    "TEXT_PLATFORMS",
    "UrlEntry",
    "classify",
    "detect_platform",
    "extract_id",
    "extract_urls",
    "is_valid_url",
    "platform_display_name",
]
