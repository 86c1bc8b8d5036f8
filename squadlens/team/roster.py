"""Roster resolution.

Members come from the first tier that yields anyone:

1. The team document's ``Members``/``Roster`` table plus its ``Coding Agent``
   table. Coordinators route work and are left out.
2. Subdirectories of the agents folder, each with an optional charter.
3. Every participant named in display-all logs.

Badges in the team document describe configuration, not activity, so every
member starts ``idle``; the status engine supplies runtime status.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from squadlens.config import RosterConfig
from squadlens.ingest.base import DocumentSource, FileSystemSource
from squadlens.ingest.markdown import parse_markdown, parse_table
from squadlens.models import LogEntry, Member, MemberStatus, RosterSource, TeamRoster
from squadlens.utils.text import strip_emphasis, strip_markdown_links

logger = logging.getLogger(__name__)

ROSTER_SECTIONS = ("Members", "Roster")
CODING_AGENT_SECTION = "Coding Agent"

REPOSITORY_ROW_PATTERN = re.compile(r"\*\*Repository\*\*\s*\|\s*([^\n|]+)", re.IGNORECASE)
REPOSITORY_LABEL_PATTERN = re.compile(r"\*\*Repository:\*\*\s*(.+)", re.IGNORECASE)
OWNER_LABEL_PATTERN = re.compile(r"\*\*Owner:\*\*\s*([^(\n]+)", re.IGNORECASE)
CHARTER_ROLE_PATTERN = re.compile(
    r"^[ \t]*(?:[-*][ \t]*)?\*\*Role:\*\*[ \t]*(\S.*)$", re.IGNORECASE | re.MULTILINE
)


def _members_from_table(content: str, coordinator_role: str) -> list[Member]:
    members: list[Member] = []
    for row in parse_table(content):
        name = strip_emphasis(strip_markdown_links(row.get("name", "")))
        role = strip_emphasis(row.get("role", ""))
        if not name or not role:
            continue
        if role.lower() == coordinator_role.lower():
            continue
        members.append(Member(name=name, role=role, status=MemberStatus.IDLE))
    return members


def parse_team_document(text: str, config: RosterConfig | None = None) -> TeamRoster:
    """Parse a team document into a roster.

    Args:
        text: Normalized document text.
        config: Roster configuration (coordinator marker).

    Returns:
        TeamRoster; members may be empty.
    """
    config = config or RosterConfig()
    document = parse_markdown(text)

    members: list[Member] = []
    roster_table = document.section(*ROSTER_SECTIONS)
    if roster_table:
        members.extend(_members_from_table(roster_table, config.coordinator_role))
    coding_agents = document.section(CODING_AGENT_SECTION)
    if coding_agents:
        members.extend(_members_from_table(coding_agents, config.coordinator_role))

    repository = None
    match = REPOSITORY_ROW_PATTERN.search(text) or REPOSITORY_LABEL_PATTERN.search(text)
    if match:
        repository = strip_emphasis(match.group(1)) or None

    owner = None
    match = OWNER_LABEL_PATTERN.search(text)
    if match:
        owner = match.group(1).strip() or None

    return TeamRoster(members=members, repository=repository, owner=owner)


def parse_charter_role(text: str) -> str | None:
    """Return the ``**Role:**`` declared in a charter, if any."""
    match = CHARTER_ROLE_PATTERN.search(text)
    if not match:
        return None
    return strip_emphasis(match.group(1)) or None


@dataclass
class RosterResult:
    """Members plus the tier that produced them."""

    members: list[Member] = field(default_factory=list)
    source: RosterSource = RosterSource.NONE
    repository: str | None = None
    owner: str | None = None


class RosterResolver:
    """Resolves the canonical member list through the three tiers."""

    def __init__(
        self,
        team_file: Path,
        agents_dir: Path,
        source: DocumentSource | None = None,
        config: RosterConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.team_file = team_file
        self.agents_dir = agents_dir
        self.source = source or FileSystemSource()
        self.config = config or RosterConfig()
        self.sleep = sleep

    def resolve(self, display_entries: Iterable[LogEntry] = ()) -> RosterResult:
        """Resolve members, falling through tiers that yield nobody.

        Args:
            display_entries: Display-all log entries for the participant tier.

        Returns:
            RosterResult naming the tier used.
        """
        roster = self.read_team_file()
        if roster and roster.members:
            return RosterResult(
                members=roster.members,
                source=RosterSource.TEAM_FILE,
                repository=roster.repository,
                owner=roster.owner,
            )

        repository = roster.repository if roster else None
        owner = roster.owner if roster else None

        agents = self.from_agents_folder()
        if agents:
            logger.info(f"No members in {self.team_file.name}; using agents folder")
            return RosterResult(
                members=agents,
                source=RosterSource.AGENTS_FOLDER,
                repository=repository,
                owner=owner,
            )

        participants = self.from_participants(display_entries)
        if participants:
            logger.info("No roster or agents folder; using log participants")
            return RosterResult(
                members=participants,
                source=RosterSource.LOG_PARTICIPANTS,
                repository=repository,
                owner=owner,
            )

        return RosterResult(repository=repository, owner=owner)

    def read_team_file(self) -> TeamRoster | None:
        """Parse the team document, retrying once if it exists but is empty.

        An existing document with no members is usually still being written,
        so it is read a second time after ``retry_delay_seconds``.
        """
        roster = self._parse_team_file()
        if roster is not None and roster.members:
            return roster
        if not self.source.exists(self.team_file):
            return roster

        logger.debug(
            f"{self.team_file} has no members yet; retrying in "
            f"{self.config.retry_delay_seconds}s"
        )
        self.sleep(self.config.retry_delay_seconds)
        retried = self._parse_team_file()
        return retried if retried is not None else roster

    def _parse_team_file(self) -> TeamRoster | None:
        text = self.source.read_text(self.team_file)
        if text is None:
            return None
        return parse_team_document(text, self.config)

    def from_agents_folder(self) -> list[Member]:
        """One member per agent directory, role read from its charter."""
        entries = self.source.list_dir(self.agents_dir)
        if entries is None:
            return []

        reserved = {name.lower() for name in self.config.reserved_agent_directories}
        members: list[Member] = []
        for entry in entries:
            if not entry.is_dir or entry.name.lower() in reserved:
                continue
            role = None
            charter_path = self.agents_dir / entry.name / self.config.charter_file
            charter = self.source.read_text(charter_path)
            if charter is not None:
                role = parse_charter_role(charter)
            members.append(
                Member(
                    name=entry.name[:1].upper() + entry.name[1:],
                    role=role or self.config.default_role,
                )
            )
        return members

    def from_participants(self, entries: Iterable[LogEntry]) -> list[Member]:
        """Union of log participants in first-seen order."""
        seen: set[str] = set()
        members: list[Member] = []
        for entry in entries:
            for name in entry.participants:
                if name and name not in seen:
                    seen.add(name)
                    members.append(Member(name=name, role=self.config.default_role))
        return members
