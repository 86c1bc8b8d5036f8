"""Activity reporting over display-all history.

Both reports are computed from historical data, so they must be fed
display-all log entries and the tasks derived from them, never the
status-relevant subset.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from squadlens.models import LogEntry, Member, Task, TaskStatus

VELOCITY_DAYS = 30
HEATMAP_DAYS = 7


@dataclass(frozen=True)
class VelocityPoint:
    """Completed tasks on one day."""

    date: date
    completed_tasks: int


@dataclass(frozen=True)
class HeatmapPoint:
    """Relative participation of one member (0.0 idle, 1.0 most active)."""

    member: str
    activity_level: float


def velocity_timeline(
    tasks: Iterable[Task], today: date | None = None, days: int = VELOCITY_DAYS
) -> list[VelocityPoint]:
    """Completed tasks per day from ``today - days`` through ``today``, zero-filled."""
    today = today or date.today()
    start = today - timedelta(days=days)

    counts: Counter[date] = Counter()
    for task in tasks:
        if task.status is not TaskStatus.COMPLETED or task.completed_at is None:
            continue
        if start <= task.completed_at <= today:
            counts[task.completed_at] += 1

    return [
        VelocityPoint(date=day, completed_tasks=counts[day])
        for day in (start + timedelta(days=offset) for offset in range(days + 1))
    ]


def participation_heatmap(
    members: Sequence[Member],
    entries: Iterable[LogEntry],
    today: date | None = None,
    days: int = HEATMAP_DAYS,
) -> list[HeatmapPoint]:
    """Participation in recent logs, normalized to the busiest participant."""
    today = today or date.today()
    since = today - timedelta(days=days)

    counts: Counter[str] = Counter()
    for entry in entries:
        if entry.date < since:
            continue
        for participant in entry.participants:
            counts[participant.lower()] += 1

    busiest = max(counts.values(), default=0)
    return [
        HeatmapPoint(
            member=member.name,
            activity_level=counts[member.name.lower()] / busiest if busiest else 0.0,
        )
        for member in members
    ]
