"""Member status overlay.

Rules, in order of application:

1. A member with a non-completed task gets a status from the first such task
   (``reviewing-pr``, ``waiting-review``, ``working-on-issue`` or ``working``).
2. A member whose tasks are all completed is ``idle``.
3. A member with no tasks keeps the participation baseline: ``working`` if
   named in the most recent status-relevant log, else ``idle``.
4. A still-idle member with open issues from the tracker is
   ``working-on-issue`` on the most recently updated one.
5. A fresh marker file in the active-work directory makes a still-idle member
   ``working``.

Members are never mutated; new ``Member`` objects are returned.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path

from squadlens.config import StatusConfig
from squadlens.ingest.base import DocumentSource, FileSystemSource
from squadlens.models import (
    ActivityContext,
    IssueRecord,
    LogEntry,
    Member,
    MemberStatus,
    Task,
    TaskStatus,
)
from squadlens.utils.text import slugify, truncate_title

logger = logging.getLogger(__name__)

REVIEWING_PR_PATTERN = re.compile(
    r"\breview(?:ing)?\s+(?:PR|pull request)\s*#(\d+)", re.IGNORECASE
)
WAITING_REVIEW_PATTERN = re.compile(
    r"\b(?:awaiting|waiting\s+(?:for|on)|needs)\s+(?:code\s+)?review\b", re.IGNORECASE
)
ISSUE_NUMBER_PATTERN = re.compile(r"#(\d+)")
LABEL_MAX_LENGTH = 30


def classify_task(task: Task) -> tuple[MemberStatus, ActivityContext]:
    """Pick a rich status and activity context for an active task."""
    text = " ".join(part for part in (task.title, task.description) if part)

    match = REVIEWING_PR_PATTERN.search(text)
    if match:
        number = int(match.group(1))
        return MemberStatus.REVIEWING_PR, ActivityContext(
            description=f"Reviewing PR #{number}",
            short_label=f"PR #{number}",
            number=number,
        )

    if WAITING_REVIEW_PATTERN.search(text):
        ref = ISSUE_NUMBER_PATTERN.search(text)
        number = int(ref.group(1)) if ref else None
        return MemberStatus.WAITING_REVIEW, ActivityContext(
            description=f"Waiting for review: {task.title}",
            short_label=f"#{number} review" if number is not None else "review",
            number=number,
        )

    if task.is_issue:
        number = int(task.id.lstrip("#"))
        return MemberStatus.WORKING_ON_ISSUE, ActivityContext(
            description=f"Working on #{number}: {task.title}",
            short_label=f"#{number}",
            number=number,
        )

    return MemberStatus.WORKING, ActivityContext(
        description=task.title,
        short_label=truncate_title(task.title, LABEL_MAX_LENGTH),
    )


def participation_baseline(status_entries: Iterable[LogEntry]) -> set[str]:
    """Lowercased names of everyone in the most recent status-relevant entry."""
    entries = list(status_entries)
    if not entries:
        return set()
    latest = max(entries, key=lambda e: e.sort_key)
    return {name.lower() for name in latest.participants}


def _issue_task(member: Member, issue: IssueRecord) -> Task:
    return Task(
        id=f"#{issue.number}",
        title=issue.title,
        status=TaskStatus.IN_PROGRESS,
        assignee=member.name,
        started_at=issue.updated_at.date() if issue.updated_at else None,
    )


class StatusEngine:
    """Overlays runtime status onto roster members."""

    def __init__(
        self,
        markers_dir: Path | None = None,
        source: DocumentSource | None = None,
        config: StatusConfig | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.markers_dir = markers_dir
        self.source = source or FileSystemSource()
        self.config = config or StatusConfig()
        self.now = now

    def apply(
        self,
        members: Sequence[Member],
        tasks: Sequence[Task],
        status_entries: Iterable[LogEntry] = (),
        open_issues: Mapping[str, Sequence[IssueRecord]] | None = None,
    ) -> list[Member]:
        """Return members with status, activity and current task filled in.

        Args:
            members: Roster members.
            tasks: Tasks derived from status-relevant logs.
            status_entries: Status-relevant log entries for the baseline.
            open_issues: Open tracker issues keyed by member name.

        Returns:
            New Member objects in roster order.
        """
        baseline = participation_baseline(status_entries)
        issues_by_member = {
            name.lower(): list(records) for name, records in (open_issues or {}).items()
        }
        fresh = self.fresh_markers()

        result = []
        for member in members:
            updated = self._from_tasks(member, tasks, baseline)
            issues = issues_by_member.get(member.name.lower())
            if issues and not updated.status.is_active:
                updated = self._from_issues(updated, issues)
            if slugify(member.name) in fresh and not updated.status.is_active:
                updated = replace(
                    updated,
                    status=MemberStatus.WORKING,
                    activity=ActivityContext(description="Active session", short_label="active"),
                )
            result.append(updated)
        return result

    def _from_tasks(self, member: Member, tasks: Sequence[Task], baseline: set[str]) -> Member:
        name = member.name.lower()
        own = [task for task in tasks if task.assignee.lower() == name]
        active = [task for task in own if task.status is not TaskStatus.COMPLETED]

        if active:
            status, activity = classify_task(active[0])
            return replace(member, status=status, activity=activity, current_task=active[0])
        if own:
            return replace(member, status=MemberStatus.IDLE, activity=None, current_task=None)

        status = MemberStatus.WORKING if name in baseline else MemberStatus.IDLE
        return replace(member, status=status, activity=None, current_task=None)

    def _from_issues(self, member: Member, issues: Sequence[IssueRecord]) -> Member:
        latest = max(
            issues, key=lambda issue: issue.updated_at.timestamp() if issue.updated_at else 0.0
        )
        task = _issue_task(member, latest)
        return replace(
            member,
            status=MemberStatus.WORKING_ON_ISSUE,
            activity=ActivityContext(
                description=f"Working on #{latest.number}: {latest.title}",
                short_label=f"#{latest.number}",
                number=latest.number,
            ),
            current_task=task,
        )

    def fresh_markers(self) -> set[str]:
        """Slugs whose marker file was modified within the staleness window."""
        if self.markers_dir is None:
            return set()
        entries = self.source.list_dir(self.markers_dir)
        if entries is None:
            return set()

        window = timedelta(seconds=self.config.staleness_seconds)
        now = self.now()
        extension = self.config.marker_extension.lower()
        fresh: set[str] = set()
        for entry in entries:
            if entry.is_dir or not entry.name.lower().endswith(extension):
                continue
            modified = self.source.modified_at(self.markers_dir / entry.name)
            if modified is None:
                continue
            if now - modified <= window:
                fresh.add(entry.name[: len(entry.name) - len(extension)].lower())
            else:
                logger.debug(f"Ignoring stale marker {entry.name}")
        return fresh
