"""Read-only document access.

The engine never touches the filesystem directly; every read goes through a
``DocumentSource`` so missing and unreadable resources resolve to ``None``
instead of raising.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from squadlens.utils.text import normalize_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryEntry:
    """A name inside a listed directory."""

    name: str
    is_dir: bool


class DocumentSource(ABC):
    """Capability for reading documents and listing directories."""

    @abstractmethod
    def read_text(self, path: Path) -> str | None:
        """Read a document as normalized text.

        Args:
            path: Path to the document.

        Returns:
            Text with LF line endings, or None if missing or unreadable.
        """

    @abstractmethod
    def list_dir(self, path: Path) -> list[DirectoryEntry] | None:
        """List a directory.

        Args:
            path: Directory path.

        Returns:
            Entries sorted by name, or None if missing or unreadable.
        """

    @abstractmethod
    def modified_at(self, path: Path) -> datetime | None:
        """Get the modification time of a file.

        Args:
            path: Path to the file.

        Returns:
            Modification datetime or None.
        """

    def exists(self, path: Path) -> bool:
        """Check whether a document exists (readable or not)."""
        return self.modified_at(path) is not None


class FileSystemSource(DocumentSource):
    """DocumentSource backed by the local filesystem."""

    def read_text(self, path: Path) -> str | None:
        try:
            raw = path.read_bytes()
        except OSError as e:
            logger.debug(f"Cannot read {path}: {e}")
            return None
        return normalize_text(raw)

    def list_dir(self, path: Path) -> list[DirectoryEntry] | None:
        try:
            children = list(path.iterdir())
        except OSError as e:
            logger.debug(f"Cannot list {path}: {e}")
            return None

        entries: list[DirectoryEntry] = []
        for child in children:
            try:
                is_dir = child.is_dir()
            except OSError:
                continue
            entries.append(DirectoryEntry(name=child.name, is_dir=is_dir))
        return sorted(entries, key=lambda e: e.name)

    def modified_at(self, path: Path) -> datetime | None:
        try:
            stat = path.stat()
        except OSError:
            return None
        return datetime.fromtimestamp(stat.st_mtime)
