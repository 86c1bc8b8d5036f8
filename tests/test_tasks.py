"""Tests for task derivation."""

from datetime import date, time

from squadlens.config import TasksConfig
from squadlens.logs.parser import parse_log
from squadlens.logs.tasks import (
    TaskDeriver,
    TaskLedger,
    derive_tasks,
    is_completion_signal,
    prose_task_id,
)
from squadlens.models import LogEntry, Task, TaskStatus, WorkItem


def _entry(**kwargs) -> LogEntry:
    defaults = {"date": date(2026, 2, 10), "topic": "work"}
    defaults.update(kwargs)
    return LogEntry(**defaults)


class TestTaskLedger:
    def test_first_writer_wins(self):
        ledger = TaskLedger()
        first = Task(id="1", title="a", status=TaskStatus.IN_PROGRESS, assignee="x")
        second = Task(id="1", title="b", status=TaskStatus.COMPLETED, assignee="y")

        assert ledger.claim(first, origin="one")
        assert not ledger.claim(second, origin="two")
        assert list(ledger) == [first]
        assert len(ledger.collisions) == 1
        assert ledger.collisions[0].origin == "two"
        assert "1" in ledger


class TestHelpers:
    def test_prose_task_id(self):
        assert prose_task_id(date(2026, 2, 10), "Banner Bruce") == "2026-02-10-banner-bruce"

    def test_completion_signal_case_insensitive(self):
        keywords = TasksConfig().completion_keywords
        assert is_completion_signal("Tests PASS now", keywords)
        assert is_completion_signal("✅ shipped", keywords)
        assert not is_completion_signal("still investigating", keywords)


class TestTaskDeriver:
    """Tests for the two derivation passes."""

    def test_what_was_done_scenario(self):
        text = "**Participants:** Alice, Bob\n\n## What Was Done\n- **Alice:** Fixed the parser\n"
        entry = parse_log(text, "2026-02-10-parser.md")

        tasks = derive_tasks([entry])

        assert len(tasks) == 1
        task = tasks[0]
        assert task.id == "2026-02-10-alice"
        assert task.title == "Fixed the parser"
        assert task.assignee == "Alice"
        assert task.status is TaskStatus.COMPLETED
        assert task.completed_at == date(2026, 2, 10)

    def test_issue_reference_claims_issue_id(self):
        entry = _entry(
            participants=["Banner"],
            summary="Working through the backlog",
            related_issues=["#42 Add pagination"],
        )
        tasks = derive_tasks([entry])

        assert [t.id for t in tasks] == ["42"]
        assert tasks[0].title == "Add pagination"
        assert tasks[0].status is TaskStatus.IN_PROGRESS
        assert tasks[0].assignee == "Banner"
        assert tasks[0].completed_at is None

    def test_issue_completed_from_summary_context(self):
        entry = _entry(
            participants=["Banner"], summary="All done.", related_issues=["#42"]
        )
        task = derive_tasks([entry])[0]
        assert task.title == "Issue #42"
        assert task.status is TaskStatus.COMPLETED

    def test_issue_from_outcomes(self):
        entry = _entry(participants=["Banner"], outcomes=["Closed #7 — login flake"])
        task = derive_tasks([entry])[0]
        assert task.id == "7"
        assert task.title == "Closed login flake"

    def test_issue_without_participants_is_unknown(self):
        task = derive_tasks([_entry(related_issues=["#3"])])[0]
        assert task.assignee == "unknown"

    def test_issue_entries_skip_prose_tasks(self):
        entry = _entry(
            participants=["Banner"],
            summary="Fixed #42",
            what_was_done=[WorkItem(agent="Banner", description="Fixed it")],
        )
        tasks = derive_tasks([entry])
        assert [t.id for t in tasks] == ["42"]

    def test_synthetic_task_from_summary(self):
        entry = _entry(
            participants=["Romanoff", "Banner"], summary="Exploring test harness options"
        )
        tasks = derive_tasks([entry])

        assert len(tasks) == 1
        assert tasks[0].id == "2026-02-10-romanoff"
        assert tasks[0].assignee == "Romanoff"
        assert tasks[0].status is TaskStatus.IN_PROGRESS

    def test_synthetic_task_completed_by_outcome(self):
        entry = _entry(participants=["Romanoff"], summary="Suite run", outcomes=["All green, done"])
        assert derive_tasks([entry])[0].status is TaskStatus.COMPLETED

    def test_no_participants_no_prose_tasks(self):
        entry = _entry(summary="Something happened")
        assert derive_tasks([entry]) == []

    def test_newest_entry_wins_issue_id(self):
        older = _entry(
            date=date(2026, 2, 9), participants=["Banner"], related_issues=["#5 Old title"]
        )
        newer = _entry(
            date=date(2026, 2, 10), participants=["Romanoff"], related_issues=["#5 New title"]
        )

        result = TaskDeriver().derive([older, newer])

        assert len(result.tasks) == 1
        assert result.tasks[0].assignee == "Romanoff"
        assert result.tasks[0].title == "New title"
        assert len(result.collisions) == 1

    def test_entry_whose_issues_were_all_taken_yields_prose(self):
        newer = _entry(
            date=date(2026, 2, 10), participants=["Romanoff"], related_issues=["#5"]
        )
        older = _entry(
            date=date(2026, 2, 9),
            participants=["Banner"],
            summary="Touched #5 again",
            related_issues=["#5"],
        )
        ids = [t.id for t in derive_tasks([older, newer])]
        assert ids == ["5", "2026-02-09-banner"]

    def test_what_was_done_before_synthetic(self):
        synthetic = _entry(
            date=date(2026, 2, 10),
            timestamp=time(9, 0),
            participants=["Banner"],
            summary="Planning the API",
        )
        worked = _entry(
            date=date(2026, 2, 10),
            participants=["Banner"],
            what_was_done=[WorkItem(agent="Banner", description="Built the API")],
        )
        result = TaskDeriver().derive([worked, synthetic])

        assert len(result.tasks) == 1
        assert result.tasks[0].title == "Built the API"
        assert len(result.collisions) == 1

    def test_deterministic(self):
        entries = [
            _entry(date=date(2026, 2, 8), participants=["A"], summary="one"),
            _entry(date=date(2026, 2, 9), participants=["B"], related_issues=["#1", "#2"]),
            _entry(
                date=date(2026, 2, 10),
                participants=["C"],
                what_was_done=[WorkItem(agent="C", description="three")],
            ),
        ]
        first = [(t.id, t.status) for t in derive_tasks(entries)]
        second = [(t.id, t.status) for t in derive_tasks(list(reversed(entries)))]
        assert first == second
        assert [task_id for task_id, _ in first] == ["1", "2", "2026-02-10-c", "2026-02-08-a"]

    def test_title_truncated(self):
        entry = _entry(participants=["A"], summary="word " * 30)
        task = derive_tasks([entry], TasksConfig(title_max_length=20))[0]
        assert task.title.endswith("…")
        assert len(task.title) <= 21
