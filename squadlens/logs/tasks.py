"""Task derivation from parsed log entries.

Tasks come from two passes over the entries, newest first:

1. Issue references (related issues, outcomes, summary) claim their issue
   number as the task id.
2. Entries that claimed nothing in pass 1 and name at least one participant
   contribute prose tasks: first every ``What Was Done`` item across all such
   entries, then one synthetic task per remaining entry.

Ids are claimed through a ``TaskLedger``; the first writer wins and later
attempts are recorded as collisions and dropped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date

from squadlens.config import TasksConfig
from squadlens.models import LogEntry, Task, TaskStatus
from squadlens.utils.text import slugify, strip_emphasis, truncate_title

logger = logging.getLogger(__name__)

ISSUE_NUMBER_PATTERN = re.compile(r"#(\d+)")
# a reference plus the separator that ties it to its text, "#7 — login flake"
ISSUE_REF_WITH_SEPARATOR_PATTERN = re.compile(r"#\d+\s*(?:[-–—:|,;]\s+|:\s*)?")
BARE_NUMBER_PATTERN = re.compile(r"^\s*(\d+)\s*$")
CONTEXT_TRIM = " \t-–—:|,.;"
UNKNOWN_ASSIGNEE = "unknown"


@dataclass(frozen=True)
class TaskCollision:
    """A dropped attempt to claim an id that was already taken."""

    task_id: str
    origin: str


class TaskLedger:
    """Ordered id to task mapping where the first writer wins."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self.collisions: list[TaskCollision] = []

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def claim(self, task: Task, origin: str) -> bool:
        """Insert a task unless its id is taken.

        Returns:
            True if the task was inserted, False if it collided.
        """
        if task.id in self._tasks:
            self.collisions.append(TaskCollision(task_id=task.id, origin=origin))
            logger.debug(f"Dropped task {task.id} from {origin}: id already claimed")
            return False
        self._tasks[task.id] = task
        return True


@dataclass
class DerivationResult:
    """Derived tasks plus the collisions dropped along the way."""

    tasks: list[Task] = field(default_factory=list)
    collisions: list[TaskCollision] = field(default_factory=list)


def prose_task_id(entry_date: date, agent: str) -> str:
    """``{date}-{agent-slug}``, e.g. ``2026-02-10-banner``."""
    return f"{entry_date.isoformat()}-{slugify(agent)}"


def is_completion_signal(text: str, keywords: Iterable[str]) -> bool:
    """Case-insensitive substring test against the completion keywords."""
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def _issue_refs(line: str) -> list[str]:
    numbers = ISSUE_NUMBER_PATTERN.findall(line)
    if not numbers:
        bare = BARE_NUMBER_PATTERN.match(line)
        if bare:
            numbers = [bare.group(1)]
    return numbers


def _accompanying_text(line: str) -> str:
    """The text around an issue reference, with the reference removed."""
    without_refs = ISSUE_REF_WITH_SEPARATOR_PATTERN.sub(" ", line)
    if BARE_NUMBER_PATTERN.match(without_refs):
        return ""
    cleaned = re.sub(r"\s+", " ", strip_emphasis(without_refs))
    return cleaned.strip(CONTEXT_TRIM).strip()


class TaskDeriver:
    """Turns log entries into deduplicated tasks."""

    def __init__(self, config: TasksConfig | None = None) -> None:
        self.config = config or TasksConfig()

    def derive(self, entries: Iterable[LogEntry]) -> DerivationResult:
        """Derive tasks from entries.

        Args:
            entries: Parsed log entries in any order.

        Returns:
            DerivationResult with tasks in claim order.
        """
        ordered = sorted(entries, key=lambda e: e.sort_key, reverse=True)
        ledger = TaskLedger()

        prose_entries = [
            entry
            for entry in ordered
            if not self._claim_issue_tasks(entry, ledger) and entry.participants
        ]

        for entry in prose_entries:
            for item in entry.what_was_done:
                ledger.claim(
                    Task(
                        id=prose_task_id(entry.date, item.agent),
                        title=self._title(item.description),
                        description=item.description,
                        status=TaskStatus.COMPLETED,
                        assignee=item.agent,
                        started_at=entry.date,
                        completed_at=entry.date,
                    ),
                    origin=f"what-was-done:{entry.topic}",
                )

        for entry in prose_entries:
            if entry.what_was_done or not entry.summary:
                continue
            assignee = entry.participants[0]
            combined = " ".join([entry.summary, *entry.outcomes])
            completed = is_completion_signal(combined, self.config.completion_keywords)
            ledger.claim(
                Task(
                    id=prose_task_id(entry.date, assignee),
                    title=self._title(entry.summary),
                    description=entry.summary,
                    status=TaskStatus.COMPLETED if completed else TaskStatus.IN_PROGRESS,
                    assignee=assignee,
                    started_at=entry.date,
                    completed_at=entry.date if completed else None,
                ),
                origin=f"summary:{entry.topic}",
            )

        tasks = list(ledger)
        logger.debug(
            f"Derived {len(tasks)} tasks from {len(ordered)} entries "
            f"({len(ledger.collisions)} collisions)"
        )
        return DerivationResult(tasks=tasks, collisions=ledger.collisions)

    def _claim_issue_tasks(self, entry: LogEntry, ledger: TaskLedger) -> bool:
        """Claim one task per issue reference in the entry.

        Returns:
            True if the entry claimed at least one new id.
        """
        assignee = entry.participants[0] if entry.participants else UNKNOWN_ASSIGNEE
        sources = [
            *(("related-issues", line) for line in entry.related_issues),
            *(("outcomes", line) for line in entry.outcomes),
            ("summary", entry.summary),
        ]

        claimed = False
        for origin, line in sources:
            for number in _issue_refs(line):
                context = " ".join([line, entry.summary]) if origin != "summary" else line
                completed = is_completion_signal(context, self.config.completion_keywords)
                accompanying = _accompanying_text(line)
                task = Task(
                    id=number,
                    title=self._title(accompanying) if accompanying else f"Issue #{number}",
                    description=entry.summary,
                    status=TaskStatus.COMPLETED if completed else TaskStatus.IN_PROGRESS,
                    assignee=assignee,
                    started_at=entry.date,
                    completed_at=entry.date if completed else None,
                )
                if ledger.claim(task, origin=f"{origin}:{entry.topic}"):
                    claimed = True
        return claimed

    def _title(self, text: str) -> str:
        return truncate_title(text, self.config.title_max_length)


def derive_tasks(
    entries: Iterable[LogEntry], config: TasksConfig | None = None
) -> list[Task]:
    """Convenience wrapper returning only the tasks."""
    return TaskDeriver(config).derive(entries).tasks
