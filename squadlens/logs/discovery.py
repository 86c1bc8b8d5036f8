"""Log discovery over the squad's log directories.

Two modes exist. *Status-relevant* discovery reads only the orchestration
directory, because only those logs may say who is working right now.
*Display-all* discovery reads the union of that directory and every session log
directory, for history and reporting.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, time
from pathlib import Path

from squadlens.config import LogsConfig
from squadlens.ingest.base import DocumentSource, FileSystemSource

logger = logging.getLogger(__name__)

# YYYY-MM-DD[Thhmm]-topic.ext
LOG_FILENAME_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})(?:T(?P<hour>\d{2})(?P<minute>\d{2}))?"
    r"-(?P<topic>.+)\.(?P<ext>[A-Za-z0-9]+)$"
)


@dataclass(frozen=True)
class LogFilename:
    """Components encoded in a log filename."""

    date: date
    topic: str
    timestamp: time | None = None


def parse_log_filename(filename: str) -> LogFilename | None:
    """Split a log filename into date, optional time and topic.

    Returns None when the name does not follow the pattern or encodes an
    impossible date or time.
    """
    match = LOG_FILENAME_PATTERN.match(filename)
    if not match:
        return None

    try:
        parsed_date = date.fromisoformat(match.group("date"))
    except ValueError:
        return None

    timestamp = None
    if match.group("hour") is not None:
        try:
            timestamp = time(int(match.group("hour")), int(match.group("minute")))
        except ValueError:
            return None

    return LogFilename(date=parsed_date, topic=match.group("topic"), timestamp=timestamp)


class LogDiscovery:
    """Enumerates candidate log documents under a squad folder."""

    def __init__(
        self,
        squad_dir: Path,
        source: DocumentSource | None = None,
        config: LogsConfig | None = None,
    ) -> None:
        self.squad_dir = squad_dir
        self.source = source or FileSystemSource()
        self.config = config or LogsConfig()

    @property
    def status_directory(self) -> Path:
        return self.squad_dir / self.config.status_directory

    @property
    def directories(self) -> list[Path]:
        """Every configured log directory, status directory first."""
        dirs = [self.status_directory]
        for name in self.config.session_directories:
            path = self.squad_dir / name
            if path not in dirs:
                dirs.append(path)
        return dirs

    def status_relevant(self) -> list[Path]:
        """Log documents allowed to affect current member status."""
        return self._collect([self.status_directory])

    def display_all(self) -> list[Path]:
        """Log documents from every configured directory."""
        return self._collect(self.directories)

    def _collect(self, directories: list[Path]) -> list[Path]:
        seen: set[Path] = set()
        found: list[Path] = []
        for directory in directories:
            for path in self._scan(directory):
                key = path.resolve()
                if key in seen:
                    continue
                seen.add(key)
                found.append(path)
        return sorted(found, key=lambda p: (p.name, str(p)))

    def _scan(self, directory: Path) -> list[Path]:
        entries = self.source.list_dir(directory)
        if entries is None:
            logger.debug(f"Log directory {directory} missing or unreadable")
            return []

        extensions = tuple(ext.lower() for ext in self.config.extensions)
        prefixes = tuple(prefix.lower() for prefix in self.config.ignore_prefixes)

        paths: list[Path] = []
        for entry in entries:
            if entry.is_dir:
                continue
            lowered = entry.name.lower()
            if not lowered.endswith(extensions):
                continue
            if prefixes and lowered.startswith(prefixes):
                continue
            paths.append(directory / entry.name)
        return paths
