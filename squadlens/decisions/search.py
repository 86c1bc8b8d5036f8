"""Ranked search and filtering over decision entries.

Pure functions over in-memory lists; nothing here reads files.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from squadlens.models import DecisionEntry

TITLE_WEIGHT = 10
AUTHOR_WEIGHT = 5
CONTENT_WEIGHT = 3

# Bounds used when only one side of a date range is given
MIN_DATE_KEY = "0000-00-00"
MAX_DATE_KEY = "9999-99-99"


@dataclass
class SearchCriteria:
    """Combined query and filters; empty fields are not applied."""

    query: str | None = None
    start_date: str | None = None  # inclusive, YYYY-MM-DD
    end_date: str | None = None  # inclusive, YYYY-MM-DD
    author: str | None = None


@dataclass
class ScoredDecision:
    """A decision with its relevance score."""

    decision: DecisionEntry
    score: int


def score_decision(decision: DecisionEntry, terms: Sequence[str]) -> int:
    """Sum title, author and content hits for every term.

    Args:
        decision: Entry to score.
        terms: Lowercased query terms.

    Returns:
        The relevance score, 0 when nothing matches.
    """
    title = (decision.title or "").lower()
    author = (decision.author or "").lower()
    content = (decision.content or "").lower()

    score = 0
    for term in terms:
        if term in title:
            score += TITLE_WEIGHT
        if term in author:
            score += AUTHOR_WEIGHT
        if term in content:
            score += CONTENT_WEIGHT
    return score


def score_all(entries: Sequence[DecisionEntry], query: str) -> list[ScoredDecision]:
    """Score every entry with a non-zero match, best first."""
    terms = query.lower().split()
    if not terms:
        return []

    scored = [
        ScoredDecision(decision=entry, score=score_decision(entry, terms)) for entry in entries
    ]
    # ties keep the incoming most-recent-first order
    return sorted((s for s in scored if s.score > 0), key=lambda s: s.score, reverse=True)


def search(entries: Sequence[DecisionEntry], query: str) -> list[DecisionEntry]:
    """Full-text search ranked by relevance.

    An empty or whitespace-only query has no terms to score and returns [].
    """
    return [scored.decision for scored in score_all(entries, query)]


def filter_by_date(
    entries: Sequence[DecisionEntry],
    start: str | None = None,
    end: str | None = None,
) -> list[DecisionEntry]:
    """Inclusive date range filter on ``YYYY-MM-DD`` strings.

    Comparison is lexical. Undated entries are dropped whenever a bound is set.
    """
    if not start and not end:
        return list(entries)

    low = start or MIN_DATE_KEY
    high = end or MAX_DATE_KEY
    return [entry for entry in entries if entry.date and low <= entry.date <= high]


def filter_by_author(entries: Sequence[DecisionEntry], author: str) -> list[DecisionEntry]:
    """Case-insensitive substring match on the author.

    A blank author returns every entry; entries without an author never match.
    """
    needle = (author or "").strip().lower()
    if not needle:
        return list(entries)
    return [entry for entry in entries if entry.author and needle in entry.author.lower()]


def filter_decisions(
    entries: Sequence[DecisionEntry], criteria: SearchCriteria
) -> list[DecisionEntry]:
    """Search first to establish ranking, then narrow by date and author."""
    results = list(entries)
    if criteria.query and criteria.query.strip():
        results = search(results, criteria.query)
    if criteria.start_date or criteria.end_date:
        results = filter_by_date(results, criteria.start_date, criteria.end_date)
    if criteria.author and criteria.author.strip():
        results = filter_by_author(results, criteria.author)
    return results
