"""Date discovery for squad documents.

Log filenames carry their own date, but logs without the usual filename
convention, decision records and directory files only have dates in their
text. This module finds them in the order a human reader would look:

1. YAML front matter (``date``, ``updated``).
2. A labelled line such as ``**Date:** 2026-02-14`` or ``Updated: ...``.
3. The first valid ISO date, including timestamps like ``2026-02-13T14:15``.
4. A written-out date such as ``January 7, 2026`` or ``7 Jan 2026``.

Numeric dates with slashes are never read; ``03/04/2026`` is ambiguous.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import date, datetime

import yaml

FRONTMATTER_DATE_KEYS = ("date", "updated")
DATE_LABELS = ("date", "updated", "when")
WRITTEN_DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%d %b %Y")
SCAN_LINES = 40

ISO_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})(?!\d)")
LABELLED_LINE_RE = re.compile(
    rf"^[ \t]*(?:[-*][ \t]+)?(?:\*\*)?(?:{'|'.join(DATE_LABELS)})(?:\*\*)?[ \t]*:"
    r"[ \t]*(?:\*\*)?[ \t]*(\S.*)$",
    re.IGNORECASE | re.MULTILINE,
)
WRITTEN_DATE_RE = re.compile(
    r"\b(?:[A-Z][a-z]{2,8}\.?\s+\d{1,2},\s+\d{4}|\d{1,2}\s+[A-Z][a-z]{2,8}\.?\s+\d{4})\b"
)


def parse_iso_date(value: str) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` string, rejecting impossible dates."""
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def iso_dates(text: str) -> Iterator[tuple[str, date]]:
    """Yield each valid ISO date in text with its original spelling."""
    for match in ISO_DATE_RE.finditer(text):
        parsed = parse_iso_date(match.group(1))
        if parsed:
            yield match.group(1), parsed


def first_iso_date(text: str) -> str | None:
    """Return the first valid ``YYYY-MM-DD`` substring of text.

    For ranges such as ``2026-02-14/15`` this is the start of the range.
    """
    for raw, _ in iso_dates(text):
        return raw
    return None


def written_date(text: str) -> date | None:
    """Find a month-name date like ``January 7, 2026``."""
    for match in WRITTEN_DATE_RE.finditer(text):
        candidate = match.group(0).replace(".", "")
        for fmt in WRITTEN_DATE_FORMATS:
            try:
                return datetime.strptime(candidate, fmt).date()
            except ValueError:
                continue
    return None


def parse_date_value(value: str) -> date | None:
    """Read a date from a single field value, ISO first."""
    for _, parsed in iso_dates(value):
        return parsed
    return written_date(value)


def labelled_date(text: str) -> date | None:
    """Date from the first labelled line whose value holds a readable date."""
    for match in LABELLED_LINE_RE.finditer(text):
        parsed = parse_date_value(match.group(1))
        if parsed:
            return parsed
    return None


def frontmatter_date(content: str) -> date | None:
    """Date from YAML front matter, if the document has any."""
    lines = content.splitlines()
    if not lines or lines[0].strip() != "---":
        return None

    try:
        end = next(i for i in range(1, len(lines)) if lines[i].strip() == "---")
    except StopIteration:
        return None

    try:
        meta = yaml.safe_load("\n".join(lines[1:end])) or {}
    except yaml.YAMLError:
        return None
    if not isinstance(meta, dict):
        return None

    for key in FRONTMATTER_DATE_KEYS:
        value = meta.get(key)
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if value is not None:
            parsed = parse_date_value(str(value))
            if parsed:
                return parsed
    return None


def extract_date_from_content(content: str, scan_lines: int = SCAN_LINES) -> date | None:
    """Best date for a document, looking only at its opening lines."""
    if not content:
        return None

    found = frontmatter_date(content)
    if found:
        return found

    head = "\n".join(content.splitlines()[:scan_lines])
    found = labelled_date(head)
    if found:
        return found
    return parse_date_value(head)
