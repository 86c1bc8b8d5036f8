"""Tests for decision record parsing."""

from squadlens.decisions.parser import (
    DecisionParser,
    clean_title,
    read_metadata,
    sort_decisions,
)
from squadlens.decisions.search import search
from squadlens.models import DecisionEntry


class TestParseDocument:
    """Tests for the heading conventions."""

    def test_h1_decision_with_subsections_is_one_entry(self):
        text = """# Decision: Adopt X

**Date:** 2026-02-01
**Author:** Banner

## Context

We needed something.

## Rationale

X is simpler.
"""
        entries = DecisionParser().parse_document(text, "decisions.md")

        assert len(entries) == 1
        entry = entries[0]
        assert entry.title == "Adopt X"
        assert entry.date == "2026-02-01"
        assert entry.author == "Banner"
        assert "We needed something." in entry.content
        assert "X is simpler." in entry.content
        assert entry.line_number == 1

    def test_h2_and_dated_h3(self):
        text = "## Some Heading\n\nBody.\n\n### 2026-02-01: Detail\n\nMore.\n"
        entries = DecisionParser().parse_document(text, "decisions.md")

        assert [(e.title, e.date) for e in entries] == [
            ("Some Heading", None),
            ("Detail", "2026-02-01"),
        ]
        assert entries[1].line_number == 5

    def test_dated_h3_ends_h2_content(self):
        text = "## Some Heading\nbody a\n### 2026-02-01: Detail\nzebra crossing\n"
        entries = DecisionParser().parse_document(text, "decisions.md")

        assert [(e.title, e.content) for e in entries] == [
            ("Some Heading", "body a"),
            ("Detail", "zebra crossing"),
        ]
        assert search(entries, "zebra") == [entries[1]]

    def test_undated_h3_before_dated_h3_stays_in_h2(self):
        text = "## Main\n\n### Notes\n\ny\n\n### 2026-02-01: Detail\n\nx\n"
        entries = DecisionParser().parse_document(text, "decisions.md")

        assert [e.title for e in entries] == ["Main", "Detail"]
        assert entries[0].content == "### Notes\n\ny"
        assert entries[1].content == "x"

    def test_undated_h3_is_content(self):
        text = "## Use Postgres\n\n### Consequences\n\nMigrations needed.\n"
        entries = DecisionParser().parse_document(text, "decisions.md")

        assert len(entries) == 1
        assert "Migrations needed." in entries[0].content

    def test_other_h1_headings_skipped(self):
        text = "# Decisions Log\n\n## First\n\nA.\n\n## Second\n\nB.\n"
        titles = [e.title for e in DecisionParser().parse_document(text, "d.md")]
        assert titles == ["First", "Second"]

    def test_second_h1_decision(self):
        text = "# Decision: One\n\n## Context\n\nx\n\n# Decision: Two\n\ny\n"
        titles = [e.title for e in DecisionParser().parse_document(text, "d.md")]
        assert titles == ["One", "Two"]

    def test_content_excludes_heading(self):
        entries = DecisionParser().parse_document("## Title\n\nBody text.\n", "d.md")
        assert entries[0].content == "Body text."

    def test_heading_date_wins_over_metadata(self):
        text = "## 2026-02-03: Cache tokens\n\n**Date:** 2026-01-01\n"
        entry = DecisionParser().parse_document(text, "d.md")[0]
        assert entry.date == "2026-02-03"
        assert entry.title == "Cache tokens"

    def test_metadata_window(self):
        text = "## Late metadata\n" + "filler\n" * 25 + "**Date:** 2026-02-03\n"
        entry = DecisionParser().parse_document(text, "d.md")[0]
        assert entry.date is None

    def test_empty_document(self):
        assert DecisionParser().parse_document("", "d.md") == []


class TestHelpers:
    def test_read_metadata_author_beats_by(self):
        meta = read_metadata(["**By:** Stark", "- **Author:** Banner", "Date: 2026-02-14/15"])
        assert meta.author == "Banner"
        assert meta.date == "2026-02-14"

    def test_read_metadata_by_fallback(self):
        assert read_metadata(["By: Stark"]).author == "Stark"

    def test_clean_title_prefixes(self):
        assert clean_title("2026-02-01/2: User directive — Ship weekly") == (
            "Ship weekly",
            "2026-02-01",
        )
        assert clean_title("**Decision: Use tabs**") == ("Use tabs", None)
        assert clean_title("## Malformed") == ("Malformed", None)
        assert clean_title("Decision:") == ("Untitled Decision", None)

    def test_clean_title_date_anywhere(self):
        assert clean_title("Freeze API (2026-03-01)") == ("Freeze API (2026-03-01)", "2026-03-01")

    def test_sort_decisions(self):
        entries = [
            DecisionEntry(title="u1", file_path="f", line_number=1),
            DecisionEntry(title="old", file_path="f", line_number=2, date="2026-01-01"),
            DecisionEntry(title="u2", file_path="f", line_number=3),
            DecisionEntry(title="new", file_path="f", line_number=4, date="2026-02-01"),
        ]
        assert [e.title for e in sort_decisions(entries)] == ["new", "old", "u1", "u2"]


class TestLoad:
    """Tests for reading the decision record from disk."""

    def test_missing_file_yields_nothing(self, temp_dir):
        assert DecisionParser().load(temp_dir / "decisions.md", temp_dir / "decisions") == []

    def test_directory_files_and_fallback(self, temp_dir):
        (temp_dir / "decisions.md").write_text("## 2026-01-10: Main file decision\n\nx\n")
        inbox = temp_dir / "decisions" / "inbox"
        inbox.mkdir(parents=True)
        (inbox / "copilot-tabs.md").write_text(
            "# Design Decision: Use tabs\n\n**By:** Copilot\n**Date:** 2026-02-02\n\nBecause.\n"
        )
        (temp_dir / "decisions" / "notes.txt").write_text("## Ignored\n")
        (temp_dir / "decisions" / "2026-02-05-conventions.md").write_text(
            "## Naming conventions\n\n**Date:** 2026-02-05\n"
        )

        entries = DecisionParser().load(temp_dir / "decisions.md", temp_dir / "decisions")

        assert [(e.title, e.date) for e in entries] == [
            ("Naming conventions", "2026-02-05"),
            ("Use tabs", "2026-02-02"),
            ("Main file decision", "2026-01-10"),
        ]
        fallback = entries[1]
        assert fallback.author == "Copilot"
        assert fallback.file_path == str(inbox / "copilot-tabs.md")
        assert "Because." in fallback.content
