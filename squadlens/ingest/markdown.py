"""Markdown structure helpers.

Splits a document on ATX headings with line-level locators and offers the
section, bullet-list and table lookups that the log, roster and decision
parsers share. This is deliberately not a general markdown parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from squadlens.utils.text import strip_emphasis

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+?)\s*$")
FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")
BULLET_PATTERN = re.compile(r"^\s*[-*]\s+(.+)$")
NUMBERED_PATTERN = re.compile(r"^\s*\d+\.\s+(.+)$")
SEPARATOR_CELL_PATTERN = re.compile(r"^:?-+:?$")


@dataclass
class MarkdownSection:
    """A heading and the lines it governs."""

    heading: str
    level: int
    start_line: int  # 1-based line of the heading
    end_line: int  # last line of the section, subsections included
    body: str  # text below the heading, subsections included

    @property
    def name(self) -> str:
        """Heading text without emphasis or a trailing colon, for matching."""
        return strip_emphasis(self.heading).rstrip(":").strip()


@dataclass
class MarkdownDocument:
    """A document split into heading sections."""

    text: str
    lines: list[str]
    sections: list[MarkdownSection]

    def section(self, *names: str) -> str | None:
        """Return the body of the first section whose heading matches a name.

        Names are tried in order and compared case-insensitively. An empty
        body counts as no match.
        """
        for wanted in names:
            target = wanted.lower()
            for section in self.sections:
                if section.name.lower() == target:
                    body = section.body.strip()
                    if body:
                        return body
        return None

    def first_heading(self, level: int | None = None) -> MarkdownSection | None:
        """Return the first heading, optionally restricted to one level."""
        for section in self.sections:
            if level is None or section.level == level:
                return section
        return None


def parse_markdown(text: str) -> MarkdownDocument:
    """Split markdown text into sections keyed by heading.

    Headings inside fenced code blocks are ignored. Each section's body runs
    until the next heading of the same or a higher level.
    """
    lines = text.split("\n")

    headings: list[tuple[int, int, str]] = []  # (index, level, text)
    in_fence = False
    for i, line in enumerate(lines):
        if FENCE_PATTERN.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = HEADING_PATTERN.match(line)
        if match:
            headings.append((i, len(match.group(1)), match.group(2).strip()))

    sections: list[MarkdownSection] = []
    for position, (index, level, heading) in enumerate(headings):
        end = len(lines)
        for next_index, next_level, _ in headings[position + 1 :]:
            if next_level <= level:
                end = next_index
                break
        sections.append(
            MarkdownSection(
                heading=heading,
                level=level,
                start_line=index + 1,
                end_line=end,
                body="\n".join(lines[index + 1 : end]),
            )
        )

    return MarkdownDocument(text=text, lines=lines, sections=sections)


def list_items(content: str) -> list[str]:
    """Collect bullet and numbered list items, in order."""
    items: list[str] = []
    for line in content.split("\n"):
        match = BULLET_PATTERN.match(line) or NUMBERED_PATTERN.match(line)
        if match:
            items.append(match.group(1).strip())
    return items


def split_table_row(line: str) -> list[str] | None:
    """Split a ``| a | b |`` line into trimmed cells, or None for non-rows."""
    trimmed = line.strip()
    if not trimmed.startswith("|"):
        return None
    cells = trimmed.split("|")[1:]
    if trimmed.endswith("|"):
        cells = cells[:-1]
    return [cell.strip() for cell in cells]


def is_separator_row(cells: list[str]) -> bool:
    """True for ``|---|:--:|`` rows."""
    filled = [cell for cell in cells if cell]
    return bool(filled) and all(SEPARATOR_CELL_PATTERN.match(cell) for cell in filled)


def table_rows(content: str) -> list[list[str]]:
    """Return every non-separator table row in content, header included."""
    rows: list[list[str]] = []
    for line in content.split("\n"):
        cells = split_table_row(line)
        if cells is None or is_separator_row(cells):
            continue
        rows.append(cells)
    return rows


def parse_table(content: str) -> list[dict[str, str]]:
    """Parse the first table in content into dicts keyed by lowercase header."""
    rows: list[dict[str, str]] = []
    headers: list[str] | None = None

    for line in content.split("\n"):
        cells = split_table_row(line)
        if cells is None:
            if headers is not None and rows and line.strip():
                break
            continue
        if headers is None:
            headers = [strip_emphasis(cell).lower() for cell in cells]
            continue
        if is_separator_row(cells):
            continue
        row = {headers[i]: cells[i] for i in range(min(len(headers), len(cells)))}
        if row:
            rows.append(row)

    return rows
