"""Data model shared by the extraction engine.

Every record here is produced fresh by a parse or derivation call and is never
mutated afterwards; status overlays build new ``Member`` instances instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum


class TaskStatus(str, Enum):
    """Lifecycle of a derived task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MemberStatus(str, Enum):
    """Runtime activity of a squad member."""

    WORKING_ON_ISSUE = "working-on-issue"
    REVIEWING_PR = "reviewing-pr"
    WAITING_REVIEW = "waiting-review"
    WORKING = "working"
    IDLE = "idle"

    @property
    def is_active(self) -> bool:
        """Every status except idle counts as working."""
        return self is not MemberStatus.IDLE


class RosterSource(str, Enum):
    """Which resolution tier produced a roster."""

    TEAM_FILE = "team-file"
    AGENTS_FOLDER = "agents-folder"
    LOG_PARTICIPANTS = "log-participants"
    NONE = "none"


@dataclass(frozen=True)
class WorkItem:
    """One ``- **Agent:** description`` bullet from a log."""

    agent: str
    description: str


@dataclass
class LogEntry:
    """One parsed log document."""

    date: date
    topic: str
    participants: list[str] = field(default_factory=list)
    summary: str = ""
    decisions: list[str] = field(default_factory=list)
    outcomes: list[str] = field(default_factory=list)
    related_issues: list[str] = field(default_factory=list)
    what_was_done: list[WorkItem] = field(default_factory=list)
    timestamp: time | None = None
    source_path: str | None = None

    @property
    def sort_key(self) -> tuple[date, time]:
        """Chronological key; entries without a time sort first within a day."""
        return (self.date, self.timestamp or time.min)


@dataclass
class Task:
    """A unit of work inferred from one or more log entries."""

    id: str
    title: str
    status: TaskStatus
    assignee: str
    description: str | None = None
    started_at: date | None = None
    completed_at: date | None = None

    @property
    def is_issue(self) -> bool:
        """True when the id is a bare issue number (or ``#N`` from a tracker)."""
        return self.id.lstrip("#").isdigit()


@dataclass(frozen=True)
class ActivityContext:
    """Human-readable detail behind a rich member status."""

    description: str
    short_label: str
    number: int | None = None


@dataclass
class Member:
    """A team participant with overlaid runtime status."""

    name: str
    role: str
    status: MemberStatus = MemberStatus.IDLE
    activity: ActivityContext | None = None
    current_task: Task | None = None


@dataclass
class TeamRoster:
    """Parsed roster document."""

    members: list[Member] = field(default_factory=list)
    repository: str | None = None
    owner: str | None = None


@dataclass
class DecisionEntry:
    """One recorded decision."""

    title: str
    file_path: str
    line_number: int
    content: str = ""
    date: str | None = None  # YYYY-MM-DD
    author: str | None = None


@dataclass(frozen=True)
class IssueRecord:
    """An externally fetched issue, merged into status by the caller."""

    number: int
    title: str
    state: str = "open"
    labels: tuple[str, ...] = ()
    url: str | None = None
    updated_at: datetime | None = None
