"""Text utilities for squadlens."""

from __future__ import annotations

import re

# Tried in order when a document is not valid UTF-8; latin-1 always succeeds.
FALLBACK_ENCODINGS = ("cp1252", "latin-1")

_EMPHASIS_RE = re.compile(r"(\*\*|__|`)")
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")


def normalize_eol(text: str) -> str:
    """Collapse CRLF and bare CR line endings to LF.

    Examples:
        >>> normalize_eol("a\\r\\nb\\rc\\n")
        'a\\nb\\nc\\n'
    """
    return text.replace("\r\n", "\n").replace("\r", "\n")


def normalize_text(raw: bytes | str) -> str:
    """Decode a raw document and normalize its line endings.

    Never fails: undecodable bytes fall through the fallback encodings, the last
    of which accepts any byte sequence. Idempotent on already-normalized text.
    """
    if isinstance(raw, str):
        return normalize_eol(raw)

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        for encoding in FALLBACK_ENCODINGS:
            try:
                text = raw.decode(encoding)
                break
            except UnicodeDecodeError:
                continue
        else:  # pragma: no cover - latin-1 decodes everything
            text = raw.decode("latin-1", errors="replace")
    return normalize_eol(text)


def slugify(value: str, fallback: str = "") -> str:
    """Normalize a string into a filesystem-safe slug.

    Converts text to lowercase, replaces non-alphanumeric characters with
    hyphens, and collapses multiple hyphens into single ones.

    Args:
        value: Text to slugify.
        fallback: Value to return if result would be empty.

    Returns:
        Slugified string or fallback if empty.

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("API v2.0 -- Beta")
        'api-v2-0-beta'
        >>> slugify("   ", fallback="untitled")
        'untitled'
    """
    normalized = value.strip().lower()
    slug = re.sub(r"[^a-z0-9]+", "-", normalized)
    slug = re.sub(r"-{2,}", "-", slug)
    result = slug.strip("-")
    return result or fallback


def strip_emphasis(text: str) -> str:
    """Remove bold, underscore-bold and code-span markers."""
    return _EMPHASIS_RE.sub("", text).strip()


def strip_markdown_links(text: str) -> str:
    """Replace ``[text](url)`` with ``text``."""
    return _MARKDOWN_LINK_RE.sub(r"\1", text)


def truncate_title(text: str, max_length: int = 60) -> str:
    """Shorten text for display, preferring a word boundary.

    Breaks at the last space when it falls in the second half of the allowed
    length, otherwise cuts hard. An ellipsis marks truncation.
    """
    if len(text) <= max_length:
        return text
    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.5:
        truncated = truncated[:last_space]
    return truncated + "…"
