"""Decision record parsing and search."""

from squadlens.decisions.parser import DecisionParser, sort_decisions
from squadlens.decisions.search import (
    SearchCriteria,
    filter_by_author,
    filter_by_date,
    filter_decisions,
    search,
)

__all__ = [
    "DecisionParser",
    "SearchCriteria",
    "filter_by_author",
    "filter_by_date",
    "filter_decisions",
    "search",
    "sort_decisions",
]
