"""Cached access to everything the engine derives from a squad folder.

The parsers and derivations are stateless; this provider owns the caches and
exposes ``refresh()`` for whatever watches the folder to call on change.
Status always comes from the status-relevant logs, while history views use
display-all discovery.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from squadlens.activity import (
    HeatmapPoint,
    VelocityPoint,
    participation_heatmap,
    velocity_timeline,
)
from squadlens.config import Config
from squadlens.decisions.parser import DecisionParser
from squadlens.errors import TaskNotFoundError
from squadlens.ingest.base import DocumentSource, FileSystemSource
from squadlens.logs.discovery import LogDiscovery
from squadlens.logs.parser import parse_all_logs
from squadlens.logs.tasks import DerivationResult, TaskDeriver
from squadlens.models import DecisionEntry, IssueRecord, LogEntry, Member, Task
from squadlens.team.roster import RosterResolver, RosterResult
from squadlens.team.status import StatusEngine
from squadlens.workspace import SquadWorkspace, resolve_workspace

logger = logging.getLogger(__name__)

PLACEHOLDER_ROLE = "Team Member"
UNKNOWN_MEMBER = "Unknown"
ISSUE_REF_PATTERN = re.compile(r"#(\d+)")


@dataclass
class WorkDetails:
    """A task with its member and the log entries that mention it."""

    task: Task
    member: Member
    log_entries: list[LogEntry] = field(default_factory=list)


class SquadDataProvider:
    """Caches log entries, tasks, members and decisions for one workspace."""

    def __init__(
        self,
        workspace: SquadWorkspace | None = None,
        source: DocumentSource | None = None,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.source = source or FileSystemSource()
        self.workspace = workspace or resolve_workspace(source=self.source)
        self.sleep = sleep
        self.now = now
        self._open_issues: dict[str, list[IssueRecord]] = {}
        self._clear()

    def _clear(self) -> None:
        self._log_entries: list[LogEntry] | None = None
        self._status_entries: list[LogEntry] | None = None
        self._derivation: DerivationResult | None = None
        self._history_tasks: list[Task] | None = None
        self._roster: RosterResult | None = None
        self._members: list[Member] | None = None
        self._decisions: list[DecisionEntry] | None = None

    def refresh(self) -> None:
        """Drop every cache so the next read goes back to the documents."""
        logger.debug("Squad data cache invalidated")
        self._clear()

    @property
    def config(self) -> Config:
        return self.workspace.config

    @property
    def discovery(self) -> LogDiscovery:
        return LogDiscovery(self.workspace.squad_dir, self.source, self.config.logs)

    # === Logs and tasks ===

    def get_log_entries(self) -> list[LogEntry]:
        """Display-all log entries, newest first."""
        if self._log_entries is None:
            self._log_entries = parse_all_logs(self.discovery.display_all(), self.source)
        return self._log_entries

    def get_status_entries(self) -> list[LogEntry]:
        """Status-relevant log entries, newest first."""
        if self._status_entries is None:
            self._status_entries = parse_all_logs(self.discovery.status_relevant(), self.source)
        return self._status_entries

    def get_derivation(self) -> DerivationResult:
        """Task derivation over status-relevant logs, collisions included."""
        if self._derivation is None:
            deriver = TaskDeriver(self.config.tasks)
            self._derivation = deriver.derive(self.get_status_entries())
        return self._derivation

    def get_tasks(self) -> list[Task]:
        """Tasks derived from status-relevant logs."""
        return self.get_derivation().tasks

    def get_history_tasks(self) -> list[Task]:
        """Tasks derived from display-all logs, for reporting."""
        if self._history_tasks is None:
            deriver = TaskDeriver(self.config.tasks)
            self._history_tasks = deriver.derive(self.get_log_entries()).tasks
        return self._history_tasks

    def get_tasks_for_member(self, name: str) -> list[Task]:
        """Status-relevant tasks assigned to a member, matched case-insensitively."""
        wanted = name.lower()
        return [task for task in self.get_tasks() if task.assignee.lower() == wanted]

    def get_task(self, task_id: str) -> Task:
        """Find a task by id, preferring status-relevant tasks.

        Raises:
            TaskNotFoundError: If no task has that id.
        """
        for tasks in (self.get_tasks(), self.get_history_tasks()):
            for task in tasks:
                if task.id == task_id:
                    return task
        raise TaskNotFoundError(task_id)

    # === Members ===

    def get_roster(self) -> RosterResult:
        """Roster resolved through the three tiers."""
        if self._roster is None:
            resolver = RosterResolver(
                self.workspace.team_file,
                self.workspace.agents_dir,
                source=self.source,
                config=self.config.roster,
                sleep=self.sleep,
            )
            self._roster = resolver.resolve(self.get_log_entries())
            logger.debug(
                f"Resolved {len(self._roster.members)} members from {self._roster.source.value}"
            )
        return self._roster

    def get_members(self) -> list[Member]:
        """Roster members with runtime status overlaid."""
        if self._members is None:
            engine = StatusEngine(
                self.workspace.markers_dir,
                source=self.source,
                config=self.config.status,
                now=self.now,
            )
            self._members = engine.apply(
                self.get_roster().members,
                self.get_tasks(),
                self.get_status_entries(),
                self._open_issues,
            )
        return self._members

    def find_member(self, name: str) -> Member | None:
        wanted = name.lower()
        for member in self.get_members():
            if member.name.lower() == wanted:
                return member
        return None

    def set_open_issues(self, issues: Mapping[str, Sequence[IssueRecord]]) -> None:
        """Merge externally fetched open issues, keyed by member name."""
        self._open_issues = {name: list(records) for name, records in issues.items()}
        self._members = None

    # === Work details ===

    def get_work_details(self, task_id: str) -> WorkDetails:
        """A task, its member (or a placeholder) and related log entries.

        Raises:
            TaskNotFoundError: If no task has that id.
        """
        task = self.get_task(task_id)
        member = self.find_member(task.assignee) if task.assignee else None
        if member is None:
            member = Member(name=task.assignee or UNKNOWN_MEMBER, role=PLACEHOLDER_ROLE)
        return WorkDetails(task=task, member=member, log_entries=self._related_entries(task))

    def _related_entries(self, task: Task) -> list[LogEntry]:
        if task.is_issue:
            number = task.id.lstrip("#")
            related = []
            for entry in self.get_log_entries():
                text = " ".join([*entry.related_issues, *entry.outcomes, entry.summary])
                if number in ISSUE_REF_PATTERN.findall(text):
                    related.append(entry)
            return related

        assignee = task.assignee.lower()
        related = []
        for entry in self.get_log_entries():
            if entry.date != task.started_at:
                continue
            names = [*entry.participants, *(item.agent for item in entry.what_was_done)]
            if assignee in (name.lower() for name in names):
                related.append(entry)
        return related

    # === Decisions and reports ===

    def get_decisions(self) -> list[DecisionEntry]:
        """Decisions from the decisions document and directory, most recent first."""
        if self._decisions is None:
            parser = DecisionParser(self.source, self.config.decisions)
            self._decisions = parser.load(
                self.workspace.decisions_file, self.workspace.decisions_dir
            )
        return self._decisions

    def get_velocity(self, days: int = 30) -> list[VelocityPoint]:
        return velocity_timeline(self.get_history_tasks(), today=self.now().date(), days=days)

    def get_heatmap(self, days: int = 7) -> list[HeatmapPoint]:
        return participation_heatmap(
            self.get_members(), self.get_log_entries(), today=self.now().date(), days=days
        )


# Global provider instance (lazy loaded)
_provider: SquadDataProvider | None = None


def get_provider() -> SquadDataProvider:
    """Get the global provider for the configured workspace."""
    global _provider
    if _provider is None:
        _provider = SquadDataProvider()
    return _provider


def reset_provider() -> None:
    """Reset the global provider (useful for testing)."""
    global _provider
    _provider = None
