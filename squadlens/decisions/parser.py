"""Decision record parsing.

Two heading conventions are recognized:

- ``# Decision: Title`` at level 1. Everything up to the next level-1 heading
  is the decision's content, nested headings included. Other level-1 headings
  are skipped.
- Level 2 headings are always decisions. Level 3 headings are decisions only
  when they open with a ``YYYY-MM-DD:`` prefix; otherwise they are content of
  the enclosing decision.

``Date:``, ``Author:`` and ``By:`` metadata is read from the lines right below
the heading. A date in the heading itself wins over the metadata.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from squadlens.config import DecisionsConfig
from squadlens.ingest.base import DocumentSource, FileSystemSource
from squadlens.ingest.date_parser import first_iso_date
from squadlens.ingest.markdown import MarkdownSection, parse_markdown
from squadlens.models import DecisionEntry
from squadlens.utils.text import strip_emphasis

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Decision"

H1_DECISION_PATTERN = re.compile(r"^Decision:\s*(.+)$", re.IGNORECASE)
DATED_H3_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(?:/\d+)?:")
MALFORMED_HEADING_PATTERN = re.compile(r"^#+\s+")
DATE_PREFIX_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:/\d+)?[:/]?\s*")
DIRECTIVE_PREFIX_PATTERN = re.compile(r"^User directive\s*[—–-]\s*", re.IGNORECASE)
DECISION_PREFIX_PATTERN = re.compile(r"^Decision:\s*", re.IGNORECASE)
FILE_TITLE_PREFIX_PATTERN = re.compile(
    r"^(?:Design Decision|Decision|Feature Summary|Context|Summary):\s*", re.IGNORECASE
)
METADATA_PATTERN = re.compile(
    r"^\s*(?:[-*]\s+)?(?:\*\*)?(Date|Author|By)(?:\*\*)?\s*:\s*(?:\*\*)?\s*(.+?)\s*$",
    re.IGNORECASE,
)


@dataclass
class DecisionMetadata:
    """Metadata found below a decision heading."""

    date: str | None = None
    author: str | None = None


def read_metadata(lines: Iterable[str]) -> DecisionMetadata:
    """Scan lines for Date/Author/By fields.

    The first ISO date of the first ``Date:`` value is used, so a range such as
    ``2026-02-14/15`` resolves to its start. ``Author:`` beats ``By:``.
    """
    date = None
    author = None
    by = None
    for line in lines:
        match = METADATA_PATTERN.match(line)
        if not match:
            continue
        label = match.group(1).lower()
        value = strip_emphasis(match.group(2))
        if label == "date" and date is None:
            date = first_iso_date(value)
        elif label == "author" and author is None:
            author = value or None
        elif label == "by" and by is None:
            by = value or None
    return DecisionMetadata(date=date, author=author or by)


def clean_title(
    heading: str, prefixes: re.Pattern[str] = DECISION_PREFIX_PATTERN
) -> tuple[str, str | None]:
    """Strip heading noise and return ``(title, heading_date)``."""
    title = MALFORMED_HEADING_PATTERN.sub("", strip_emphasis(heading))

    heading_date = None
    match = DATE_PREFIX_PATTERN.match(title)
    if match:
        heading_date = first_iso_date(match.group(1))
        title = title[match.end() :]
    else:
        heading_date = first_iso_date(title)

    title = DIRECTIVE_PREFIX_PATTERN.sub("", title)
    title = prefixes.sub("", title)
    return title.strip() or UNTITLED, heading_date


def is_decision_heading(section: MarkdownSection) -> bool:
    """Whether a level-2 or level-3 heading starts a decision."""
    if section.level == 2:
        return True
    if section.level == 3:
        return bool(DATED_H3_PATTERN.match(strip_emphasis(section.heading)))
    return False


def sort_decisions(entries: Iterable[DecisionEntry]) -> list[DecisionEntry]:
    """Most recent first; undated entries after every dated one, in input order."""
    items = list(entries)
    dated = [entry for entry in items if entry.date]
    undated = [entry for entry in items if not entry.date]
    return sorted(dated, key=lambda e: e.date or "", reverse=True) + undated


class DecisionParser:
    """Parses the decisions document and the decisions directory."""

    def __init__(
        self,
        source: DocumentSource | None = None,
        config: DecisionsConfig | None = None,
    ) -> None:
        self.source = source or FileSystemSource()
        self.config = config or DecisionsConfig()

    def parse_document(self, text: str, file_path: str) -> list[DecisionEntry]:
        """Parse every decision in one document, in document order.

        Args:
            text: Normalized document text.
            file_path: Path recorded on each entry.

        Returns:
            Decisions found by either heading convention.
        """
        document = parse_markdown(text)
        entries: list[DecisionEntry] = []
        covered_until = 0  # last line owned by a level-1 decision

        for position, section in enumerate(document.sections):
            if section.start_line <= covered_until:
                continue

            end = section.end_line
            if section.level == 1:
                match = H1_DECISION_PATTERN.match(strip_emphasis(section.heading))
                if not match:
                    continue
                title, heading_date = clean_title(match.group(1))
                covered_until = section.end_line
            elif is_decision_heading(section):
                title, heading_date = clean_title(section.heading)
                # a dated H3 below an H2 starts its own decision
                for following in document.sections[position + 1 :]:
                    if following.start_line > end:
                        break
                    if is_decision_heading(following):
                        end = following.start_line - 1
                        break
            else:
                continue

            entries.append(
                self._entry(section, end, document.lines, title, heading_date, file_path)
            )

        return entries

    def _entry(
        self,
        section: MarkdownSection,
        end_line: int,
        lines: list[str],
        title: str,
        heading_date: str | None,
        file_path: str,
    ) -> DecisionEntry:
        start = section.start_line  # index of the first line below the heading
        end = min(start + self.config.metadata_window, end_line)
        metadata = read_metadata(lines[start:end])
        return DecisionEntry(
            title=title,
            file_path=file_path,
            line_number=section.start_line,
            content="\n".join(lines[start:end_line]).strip(),
            date=heading_date or metadata.date,
            author=metadata.author,
        )

    def parse_file_fallback(self, text: str, file_path: str) -> DecisionEntry:
        """Treat a whole file as a single decision titled by its first heading."""
        document = parse_markdown(text)
        heading = document.first_heading(level=1) or document.first_heading()

        title, heading_date = UNTITLED, None
        line_number = 1
        if heading:
            title, heading_date = clean_title(heading.heading, FILE_TITLE_PREFIX_PATTERN)
            line_number = heading.start_line

        metadata = read_metadata(document.lines)
        return DecisionEntry(
            title=title,
            file_path=file_path,
            line_number=line_number,
            content=text.strip(),
            date=heading_date or metadata.date,
            author=metadata.author,
        )

    def parse_path(self, path: Path) -> list[DecisionEntry]:
        """Parse one file; an unreadable file yields nothing."""
        if not self.source.exists(path):
            return []
        text = self.source.read_text(path)
        if text is None:
            logger.warning(f"Skipping unreadable decision file {path}")
            return []
        return self.parse_document(text, str(path))

    def parse_directory(self, directory: Path) -> list[DecisionEntry]:
        """Recursively parse markdown files under a directory."""
        entries = self.source.list_dir(directory)
        if entries is None:
            return []

        decisions: list[DecisionEntry] = []
        for entry in entries:
            path = directory / entry.name
            if entry.is_dir:
                decisions.extend(self.parse_directory(path))
                continue
            if not entry.name.lower().endswith(".md"):
                continue
            text = self.source.read_text(path)
            if text is None:
                logger.warning(f"Skipping unreadable decision file {path}")
                continue
            found = self.parse_document(text, str(path))
            if not found and text.strip():
                found = [self.parse_file_fallback(text, str(path))]
            decisions.extend(found)
        return decisions

    def load(self, decisions_file: Path, decisions_dir: Path | None = None) -> list[DecisionEntry]:
        """Parse the decisions document and directory, most recent first."""
        decisions = self.parse_path(decisions_file)
        if decisions_dir is not None:
            decisions.extend(self.parse_directory(decisions_dir))
        logger.debug(f"Parsed {len(decisions)} decisions")
        return sort_decisions(decisions)
