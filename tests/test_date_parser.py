"""Tests for date discovery in squad documents."""

from datetime import date

from squadlens.ingest.date_parser import (
    extract_date_from_content,
    first_iso_date,
    frontmatter_date,
    labelled_date,
    parse_date_value,
    parse_iso_date,
    written_date,
)


def test_extract_date_from_frontmatter():
    content = """---
title: Sprint review
date: 2026-02-01
---
# Sprint review

**Date:** 2026-03-01
"""
    assert extract_date_from_content(content) == date(2026, 2, 1)


def test_frontmatter_without_date_key():
    assert frontmatter_date("---\ntitle: x\n---\nbody\n") is None


def test_frontmatter_unterminated():
    assert frontmatter_date("---\ndate: 2026-02-01\n") is None


def test_labelled_line_beats_earlier_iso_mention():
    content = "# Triage\n\nFollow-up from 2026-01-30.\n\n- **Date:** 2026-02-03\n"
    assert extract_date_from_content(content) == date(2026, 2, 3)


def test_labelled_date_skips_unreadable_values():
    assert labelled_date("Date: TBD\nUpdated: 2026-02-09") == date(2026, 2, 9)


def test_extract_date_from_iso_timestamp():
    assert extract_date_from_content("### 2026-02-13T14:15 Architecture") == date(2026, 2, 13)


def test_extract_date_from_written_dates():
    assert extract_date_from_content("Written on January 7, 2026.") == date(2026, 1, 7)
    assert extract_date_from_content("Signed off 15 Feb 2026.") == date(2026, 2, 15)


def test_written_date_ignores_unknown_month_words():
    assert written_date("Sprint 3, 2026") is None


def test_ambiguous_numeric_dates_are_not_read():
    assert parse_date_value("03/04/2026") is None


def test_scan_window():
    content = "filler\n" * 5 + "Date: 2026-02-01\n"
    assert extract_date_from_content(content, scan_lines=3) is None


def test_parse_iso_date_rejects_impossible_dates():
    assert parse_iso_date("2026-02-30") is None
    assert parse_iso_date("2026-02-28") == date(2026, 2, 28)


def test_first_iso_date_takes_range_start():
    assert first_iso_date("2026-02-14/15") == "2026-02-14"


def test_first_iso_date_skips_invalid():
    assert first_iso_date("2026-13-01 then 2026-01-02") == "2026-01-02"


def test_no_date_returns_none():
    assert extract_date_from_content("") is None
    assert extract_date_from_content("No dates here.") is None
