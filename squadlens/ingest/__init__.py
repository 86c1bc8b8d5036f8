"""Read-only document access and markdown structure helpers."""

from squadlens.ingest.base import DirectoryEntry, DocumentSource, FileSystemSource
from squadlens.ingest.markdown import MarkdownDocument, MarkdownSection, parse_markdown

__all__ = [
    "DirectoryEntry",
    "DocumentSource",
    "FileSystemSource",
    "MarkdownDocument",
    "MarkdownSection",
    "parse_markdown",
]
