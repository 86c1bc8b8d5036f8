"""Log document parser.

Squad logs have been written in several dialects over time: session logs with
``**Participants:**`` and ``## Summary``, routing logs that are mostly a
metadata table, and free-form notes with a ``## Who Worked`` section. Each
``LogEntry`` field is resolved by an ordered chain of extractors; the first one
that returns a non-empty value wins. Every extractor is a plain function of a
``LogContext`` so the chains can be inspected and tested one step at a time.

Parsing never raises on document content.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, time
from pathlib import Path
from typing import TypeVar

from squadlens.ingest.base import DocumentSource, FileSystemSource
from squadlens.ingest.date_parser import extract_date_from_content, parse_iso_date
from squadlens.ingest.markdown import (
    MarkdownDocument,
    list_items,
    parse_markdown,
    table_rows,
)
from squadlens.logs.discovery import LogFilename, parse_log_filename
from squadlens.models import LogEntry, WorkItem
from squadlens.utils.text import normalize_text, slugify, strip_emphasis

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_SUMMARY = "No summary available"
UNKNOWN_TOPIC = "unknown"
TOPIC_MAX_LENGTH = 50

DATE_LABEL_PATTERN = re.compile(r"\*\*Date:\*\*\s*(\d{4}-\d{2}-\d{2})", re.IGNORECASE)
PARTICIPANTS_LABEL_PATTERN = re.compile(
    r"^[ \t]*(?:[-*][ \t]+)?(?:\*\*)?Participants?(?:\*\*)?[ \t]*:[ \t]*(?:\*\*)?[ \t]*(\S.*)$",
    re.IGNORECASE | re.MULTILINE,
)
# bold label after other text on the same line
INLINE_PARTICIPANTS_PATTERN = re.compile(
    r"\*\*Participants?:\*\*[ \t]*(\S[^\n]*)", re.IGNORECASE
)
WHO_WORKED_LABEL_PATTERN = re.compile(
    r"^[ \t]*(?:[-*][ \t]+)?(?:\*\*)?Who worked(?:\*\*)?[ \t]*:[ \t]*(?:\*\*)?[ \t]*(\S.*)$",
    re.IGNORECASE | re.MULTILINE,
)
AGENT_ROUTED_PATTERN = re.compile(
    r"\*\*Agent routed:?\*\*:?[ \t]*\|?[ \t]*([^|\n]+)", re.IGNORECASE
)
OUTCOME_ROW_PATTERN = re.compile(r"\|\s*\*\*Outcome\*\*\s*\|\s*(.+?)\s*\|", re.IGNORECASE)
EM_DASH_HEADING_PATTERN = re.compile(r"^#{1,6}\s+.+?\s*—\s*(.+)$", re.MULTILINE)
INLINE_WORK_LABEL_PATTERN = re.compile(
    r"\*\*(?:Work done|What happened|What was done):\*\*\s*\n(.*?)(?=\n\*\*|\n##\s|\Z)",
    re.IGNORECASE | re.DOTALL,
)
# - **Agent:** description, colon inside or outside the bold markers
WORK_ITEM_PATTERN = re.compile(r"^\s*[-*]\s+\*\*(.+?):?\*\*:?\s*(.+)$")
BOLD_BULLET_NAME_PATTERN = re.compile(r"^\s*[-*]\s+\*\*(.+?):?\*\*:?\s")
BOLD_CAPITALIZED_BULLET_PATTERN = re.compile(r"^\s*[-*]\s+\*\*([A-Z][a-z]+)\*\*\s")
PLAIN_CAPITALIZED_BULLET_PATTERN = re.compile(r"^\s*[-*]\s+([A-Z][a-z]+)\s+")
TRAILING_PARENTHETICAL_PATTERN = re.compile(r"\s*\(.*?\)\s*$")
PARENTHETICAL_PATTERN = re.compile(r"\s*\(.*?\)\s*")
NAME_SEPARATOR_PATTERN = re.compile(r"\s*(?::|—|–|\s-\s)\s*")
ISSUE_REF_PATTERN = re.compile(r"#\d+")

TABLE_HEADER_NAMES = {"agent", "name", "member", "who"}


@dataclass
class LogContext:
    """Everything an extractor may look at for one document."""

    text: str
    filename: str
    markdown: MarkdownDocument
    name_parts: LogFilename | None


Extractor = Callable[[LogContext], T | None]


def first_match(extractors: Sequence[Extractor[T]], ctx: LogContext) -> T | None:
    """Run extractors in order and return the first non-empty result."""
    for extractor in extractors:
        result = extractor(ctx)
        if result:
            return result
    return None


def _unique(names: Iterable[str]) -> list[str]:
    """Drop blanks and duplicates, keeping first-seen order."""
    seen: set[str] = set()
    ordered: list[str] = []
    for name in names:
        cleaned = name.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            ordered.append(cleaned)
    return ordered


def _split_names(value: str) -> list[str]:
    return _unique(strip_emphasis(part) for part in re.split(r"[,;]", value))


# === Date and topic ===


def date_from_filename(ctx: LogContext) -> date | None:
    return ctx.name_parts.date if ctx.name_parts else None


def date_from_label(ctx: LogContext) -> date | None:
    match = DATE_LABEL_PATTERN.search(ctx.text)
    return parse_iso_date(match.group(1)) if match else None


def date_from_content(ctx: LogContext) -> date | None:
    return extract_date_from_content(ctx.text)


DATE_EXTRACTORS: list[Extractor[date]] = [
    date_from_filename,
    date_from_label,
    date_from_content,
]


def topic_from_filename(ctx: LogContext) -> str | None:
    return ctx.name_parts.topic if ctx.name_parts else None


def topic_from_title(ctx: LogContext) -> str | None:
    title = ctx.markdown.first_heading(level=1)
    if not title:
        return None
    return slugify(strip_emphasis(title.heading))[:TOPIC_MAX_LENGTH].rstrip("-") or None


TOPIC_EXTRACTORS: list[Extractor[str]] = [topic_from_filename, topic_from_title]


# === Participants ===


def participants_from_label(ctx: LogContext) -> list[str] | None:
    """``**Participants:** Alice, Bob``"""
    match = PARTICIPANTS_LABEL_PATTERN.search(ctx.text)
    if not match:
        match = INLINE_PARTICIPANTS_PATTERN.search(ctx.text)
    return _split_names(match.group(1)) if match else None


def _table_first_column(content: str) -> list[str]:
    names: list[str] = []
    for cells in table_rows(content):
        filled = [cell for cell in cells if cell]
        if not filled:
            continue
        name = filled[0]
        if name.startswith(("-", "*")) and not name.startswith("**"):
            continue
        name = strip_emphasis(name)
        if name.lower() in TABLE_HEADER_NAMES:
            continue
        names.append(name)
    return _unique(names)


def _list_names(content: str) -> list[str]:
    names: list[str] = []
    for item in list_items(content):
        name = NAME_SEPARATOR_PATTERN.split(strip_emphasis(item), maxsplit=1)[0]
        names.append(TRAILING_PARENTHETICAL_PATTERN.sub("", name))
    return _unique(names)


def participants_from_who_worked(ctx: LogContext) -> list[str] | None:
    """``**Who worked:** A, B`` or a ``## Who Worked`` section (table or bullets)."""
    match = WHO_WORKED_LABEL_PATTERN.search(ctx.text)
    if match:
        names = _split_names(match.group(1))
        if names:
            return names

    section = ctx.markdown.section("Who Worked")
    if not section:
        return None
    return _table_first_column(section) or _list_names(section)


def participants_from_agent_routed(ctx: LogContext) -> list[str] | None:
    """``| **Agent routed** | Fury (Lead) |``"""
    match = AGENT_ROUTED_PATTERN.search(ctx.text)
    if not match:
        return None
    names = []
    for part in re.split(r"[,;]", match.group(1)):
        names.append(strip_emphasis(PARENTHETICAL_PATTERN.sub(" ", part).replace("|", "")))
    return _unique(names)


def _bold_bullet_names(content: str) -> list[str]:
    names = []
    for line in content.split("\n"):
        match = BOLD_BULLET_NAME_PATTERN.match(line)
        if match:
            names.append(TRAILING_PARENTHETICAL_PATTERN.sub("", match.group(1)))
    return _unique(names)


def participants_from_action_section(ctx: LogContext) -> list[str] | None:
    """Bold agent names opening bullets under What Happened / What Was Done."""
    section = ctx.markdown.section("What Happened", "What Was Done")
    return _bold_bullet_names(section) if section else None


def participants_from_inline_work_label(ctx: LogContext) -> list[str] | None:
    """Names opening the bullets that follow a ``**Work done:**`` label."""
    match = INLINE_WORK_LABEL_PATTERN.search(ctx.text)
    if not match:
        return None
    names = []
    for line in match.group(1).split("\n"):
        bold = BOLD_BULLET_NAME_PATTERN.match(line)
        if bold:
            names.append(TRAILING_PARENTHETICAL_PATTERN.sub("", bold.group(1)))
            continue
        plain = PLAIN_CAPITALIZED_BULLET_PATTERN.match(line)
        if plain:
            names.append(plain.group(1))
    return _unique(names)


def participants_from_bold_bullets(ctx: LogContext) -> list[str] | None:
    """Last resort: ``- **Name** did x`` anywhere in the document."""
    names = []
    for line in ctx.markdown.lines:
        match = BOLD_CAPITALIZED_BULLET_PATTERN.match(line)
        if match:
            names.append(match.group(1))
    return _unique(names)


PARTICIPANT_EXTRACTORS: list[Extractor[list[str]]] = [
    participants_from_label,
    participants_from_who_worked,
    participants_from_agent_routed,
    participants_from_action_section,
    participants_from_inline_work_label,
    participants_from_bold_bullets,
]


# === Summary ===


def summary_from_section(ctx: LogContext) -> str | None:
    return ctx.markdown.section("Summary")


def summary_from_outcome_row(ctx: LogContext) -> str | None:
    """``| **Outcome** | value |`` with markdown emphasis removed."""
    match = OUTCOME_ROW_PATTERN.search(ctx.text)
    if not match:
        return None
    return strip_emphasis(match.group(1)) or None


def summary_from_heading_title(ctx: LogContext) -> str | None:
    """``### 2026-02-13T14:15 — Design system architecture``"""
    match = EM_DASH_HEADING_PATTERN.search(ctx.text)
    return match.group(1).strip() if match else None


def summary_from_first_paragraph(ctx: LogContext) -> str | None:
    """First prose paragraph, skipping headings, metadata and table rows."""
    paragraph: list[str] = []
    for line in ctx.markdown.lines:
        stripped = line.strip()
        if stripped.startswith(("#", "**", "|", "```", "~~~", "---")):
            if paragraph:
                break
            continue
        if stripped:
            paragraph.append(stripped)
        elif paragraph:
            break
    return " ".join(paragraph) or None


SUMMARY_EXTRACTORS: list[Extractor[str]] = [
    summary_from_section,
    summary_from_outcome_row,
    summary_from_heading_title,
    summary_from_first_paragraph,
]


# === What was done ===


def _work_items(content: str) -> list[WorkItem]:
    items: list[WorkItem] = []
    for line in content.split("\n"):
        match = WORK_ITEM_PATTERN.match(line)
        if not match:
            continue
        agent = TRAILING_PARENTHETICAL_PATTERN.sub("", match.group(1)).strip()
        description = match.group(2).strip()
        if agent and description:
            items.append(WorkItem(agent=agent, description=description))
    return items


def work_from_what_was_done(ctx: LogContext) -> list[WorkItem] | None:
    section = ctx.markdown.section("What Was Done")
    return _work_items(section) if section else None


def work_from_what_happened(ctx: LogContext) -> list[WorkItem] | None:
    section = ctx.markdown.section("What Happened")
    return _work_items(section) if section else None


def work_from_inline_label(ctx: LogContext) -> list[WorkItem] | None:
    match = INLINE_WORK_LABEL_PATTERN.search(ctx.text)
    return _work_items(match.group(1)) if match else None


WORK_EXTRACTORS: list[Extractor[list[WorkItem]]] = [
    work_from_what_was_done,
    work_from_what_happened,
    work_from_inline_label,
]


# === Lists ===


def _list_section(ctx: LogContext, name: str) -> list[str]:
    section = ctx.markdown.section(name)
    return list_items(section) if section else []


def extract_related_issues(ctx: LogContext) -> list[str]:
    """Items of the Related Issues section, else every distinct ``#N`` in the text."""
    section = ctx.markdown.section("Related Issues")
    if section:
        items = list_items(section) or ISSUE_REF_PATTERN.findall(section)
        if items:
            return items
    return _unique(ISSUE_REF_PATTERN.findall(ctx.text))


# === Entry points ===


def parse_log(
    text: str,
    filename: str,
    *,
    source_path: str | None = None,
    today: date | None = None,
) -> LogEntry:
    """Parse one log document into a LogEntry.

    Args:
        text: Document text; line endings are normalized here as well.
        filename: Base name of the document, used for date, time and topic.
        source_path: Optional path recorded on the entry.
        today: Date used when neither filename nor content carries one.

    Returns:
        A LogEntry. Always produced, with best-effort fields.
    """
    text = normalize_text(text)
    ctx = LogContext(
        text=text,
        filename=filename,
        markdown=parse_markdown(text),
        name_parts=parse_log_filename(filename),
    )

    return LogEntry(
        date=first_match(DATE_EXTRACTORS, ctx) or today or date.today(),
        topic=first_match(TOPIC_EXTRACTORS, ctx) or UNKNOWN_TOPIC,
        participants=first_match(PARTICIPANT_EXTRACTORS, ctx) or [],
        summary=first_match(SUMMARY_EXTRACTORS, ctx) or NO_SUMMARY,
        decisions=_list_section(ctx, "Decisions"),
        outcomes=_list_section(ctx, "Outcomes"),
        related_issues=extract_related_issues(ctx),
        what_was_done=first_match(WORK_EXTRACTORS, ctx) or [],
        timestamp=_timestamp(ctx),
        source_path=source_path,
    )


def _timestamp(ctx: LogContext) -> time | None:
    return ctx.name_parts.timestamp if ctx.name_parts else None


def parse_log_file(path: Path, source: DocumentSource | None = None) -> LogEntry | None:
    """Read and parse one log file, or None if it cannot be read."""
    source = source or FileSystemSource()
    text = source.read_text(path)
    if text is None:
        logger.warning(f"Skipping unreadable log {path}")
        return None
    return parse_log(text, path.name, source_path=str(path))


def parse_all_logs(
    paths: Iterable[Path], source: DocumentSource | None = None
) -> list[LogEntry]:
    """Parse many log files, newest first.

    Unreadable files are skipped. Entries on the same day keep discovery order
    unless a filename time component separates them.
    """
    source = source or FileSystemSource()
    entries = []
    for path in paths:
        entry = parse_log_file(path, source)
        if entry is not None:
            entries.append(entry)

    logger.debug(f"Parsed {len(entries)} log entries")
    return sorted(entries, key=lambda e: e.sort_key, reverse=True)
