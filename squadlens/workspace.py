"""Squad folder detection and well-known paths inside it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from squadlens.config import Config, get_config
from squadlens.ingest.base import DocumentSource, FileSystemSource

logger = logging.getLogger(__name__)

SQUAD_FOLDER = ".squad"
LEGACY_SQUAD_FOLDER = ".ai-team"


def detect_squad_folder(root: Path, source: DocumentSource | None = None) -> str:
    """Pick the squad folder name for a workspace.

    ``.squad`` wins when present, the legacy ``.ai-team`` is used when it is the
    only one, and ``.squad`` is returned when neither exists.
    """
    source = source or FileSystemSource()
    for candidate in (SQUAD_FOLDER, LEGACY_SQUAD_FOLDER):
        if source.list_dir(root / candidate) is not None:
            return candidate
    return SQUAD_FOLDER


@dataclass(frozen=True)
class SquadWorkspace:
    """Resolved locations of every squad artifact."""

    root: Path
    squad_dir: Path
    config: Config

    @property
    def team_file(self) -> Path:
        return self.squad_dir / self.config.roster.team_file

    @property
    def agents_dir(self) -> Path:
        return self.squad_dir / self.config.roster.agents_directory

    @property
    def markers_dir(self) -> Path:
        return self.squad_dir / self.config.status.markers_directory

    @property
    def decisions_file(self) -> Path:
        return self.squad_dir / self.config.decisions.file

    @property
    def decisions_dir(self) -> Path:
        return self.squad_dir / self.config.decisions.directory


def resolve_workspace(
    root: Path | None = None,
    config: Config | None = None,
    source: DocumentSource | None = None,
) -> SquadWorkspace:
    """Build a SquadWorkspace from configuration.

    Args:
        root: Workspace root; defaults to ``config.workspace.root``.
        config: Configuration; defaults to the global config.
        source: Document source used for folder detection.

    Returns:
        The resolved workspace.
    """
    config = config or get_config()
    root = Path(root or config.workspace.root)
    folder = config.workspace.squad_folder or detect_squad_folder(root, source)
    logger.debug(f"Using squad folder {folder} under {root}")
    return SquadWorkspace(root=root, squad_dir=root / folder, config=config)
