"""Tests for activity reporting."""

from datetime import date

from squadlens.activity import participation_heatmap, velocity_timeline
from squadlens.models import LogEntry, Member, Task, TaskStatus

TODAY = date(2026, 2, 12)


def _completed(day: date) -> Task:
    return Task(
        id=f"{day}-x",
        title="x",
        status=TaskStatus.COMPLETED,
        assignee="x",
        started_at=day,
        completed_at=day,
    )


class TestVelocityTimeline:
    def test_zero_filled_window(self):
        points = velocity_timeline([], today=TODAY, days=7)
        assert len(points) == 8
        assert points[0].date == date(2026, 2, 5)
        assert points[-1].date == TODAY
        assert all(p.completed_tasks == 0 for p in points)

    def test_counts_completed_in_window(self):
        tasks = [
            _completed(date(2026, 2, 10)),
            _completed(date(2026, 2, 10)),
            _completed(date(2026, 1, 1)),
            Task(id="1", title="open", status=TaskStatus.IN_PROGRESS, assignee="x"),
        ]
        points = {p.date: p.completed_tasks for p in velocity_timeline(tasks, today=TODAY)}

        assert points[date(2026, 2, 10)] == 2
        assert sum(points.values()) == 2


class TestParticipationHeatmap:
    def test_normalized_to_busiest(self):
        members = [Member(name="Banner", role="Dev"), Member(name="Stark", role="Lead")]
        entries = [
            LogEntry(date=date(2026, 2, 11), topic="a", participants=["banner"]),
            LogEntry(date=date(2026, 2, 10), topic="b", participants=["Banner", "Stark"]),
            LogEntry(date=date(2026, 1, 1), topic="old", participants=["Stark", "Stark"]),
        ]
        points = participation_heatmap(members, entries, today=TODAY)
        assert [(p.member, p.activity_level) for p in points] == [("Banner", 1.0), ("Stark", 0.5)]

    def test_no_activity(self):
        points = participation_heatmap([Member(name="Banner", role="Dev")], [], today=TODAY)
        assert points[0].activity_level == 0.0
