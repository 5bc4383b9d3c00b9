"""Split model responses into the named sections of a study summary."""
from __future__ import annotations

import re
from dataclasses import dataclass

SECTION_FIELDS: tuple[str, ...] = (
    "summary",
    "key_takeaways",
    "how_to_apply",
    "connections_and_patterns",
)

# Checked in order; the first keyword found in a heading wins.
SECTION_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("key_takeaways", ("takeaway", "key point", "key insight")),
    ("how_to_apply", ("apply", "application", "action item")),
    ("connections_and_patterns", ("connection", "pattern", "theme")),
    ("summary", ("summary", "overview", "tl;dr")),
)

_MARKDOWN_HEADING = re.compile(r"^\s{0,3}#{1,6}\s+(?P<title>.+?)\s*#*\s*$")
_BOLD_HEADING = re.compile(r"^\s*\*\*(?P<title>[^*]+?)\*\*\s*:?\s*$")


@dataclass(slots=True)
class Section:
    title: str | None
    body: str


def heading_title(line: str) -> str | None:
    """Return the heading text when ``line`` is a section heading."""

    for pattern in (_MARKDOWN_HEADING, _BOLD_HEADING):
        match = pattern.match(line)
        if match:
            return match.group("title").strip().rstrip(":").strip()
    return None


def split_sections(text: str) -> list[Section]:
    """Split ``text`` at heading lines.

    Text before the first heading is returned as a section without a title.
    """

    sections: list[Section] = []
    title: str | None = None
    lines: list[str] = []

    def flush() -> None:
        body = "\n".join(lines).strip()
        if title is not None or body:
            sections.append(Section(title=title, body=body))

    for line in text.splitlines():
        candidate = heading_title(line)
        if candidate is None:
            lines.append(line)
            continue
        flush()
        title = candidate
        lines = []
    flush()
    return sections


def field_for_heading(title: str) -> str | None:
    lowered = title.lower()
    for field_name, keywords in SECTION_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return field_name
    return None


def parse_summary_sections(text: str) -> dict[str, str]:
    """Map a model response onto the summary fields.

    Responses without any heading land entirely in ``summary``. Untitled
    preamble and sections with unrecognised headings are folded into
    ``summary`` so no generated text is lost; absent sections stay empty.
    """

    fields: dict[str, list[str]] = {name: [] for name in SECTION_FIELDS}
    stripped = (text or "").strip()
    if not stripped:
        return {name: "" for name in SECTION_FIELDS}

    sections = split_sections(stripped)
    if all(section.title is None for section in sections):
        return {**{name: "" for name in SECTION_FIELDS}, "summary": stripped}

    for section in sections:
        if section.title is None:
            fields["summary"].append(section.body)
            continue
        target = field_for_heading(section.title)
        if target is None:
            if section.body:
                fields["summary"].append(f"{section.title}\n{section.body}")
            continue
        if section.body:
            fields[target].append(section.body)

    return {name: "\n\n".join(parts).strip() for name, parts in fields.items()}


__all__ = [
    "SECTION_FIELDS",
    "Section",
    "field_for_heading",
    "heading_title",
    "parse_summary_sections",
    "split_sections",
]
