"""Decisions endpoint for searching and filtering the decision record."""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from squadlens.decisions.search import SearchCriteria, filter_decisions
from squadlens.models import DecisionEntry
from squadlens.provider import get_provider

router = APIRouter()


class DecisionDetail(BaseModel):
    """API representation of a recorded decision."""

    title: str
    date: str | None = None
    author: str | None = None
    content: str
    file_path: str
    line_number: int


class DecisionListResponse(BaseModel):
    """Response for GET /decisions."""

    decisions: list[DecisionDetail]
    total: int
    filters: dict[str, str | None] = Field(
        default_factory=dict,
        description="Applied filters for reference",
    )


def _to_detail(entry: DecisionEntry) -> DecisionDetail:
    return DecisionDetail(
        title=entry.title,
        date=entry.date,
        author=entry.author,
        content=entry.content,
        file_path=entry.file_path,
        line_number=entry.line_number,
    )


@router.get("/decisions", response_model=DecisionListResponse)
def list_decisions(
    query: str | None = Query(None, description="Full-text query, ranked by relevance"),
    start_date: str | None = Query(
        None, pattern=r"^\d{4}-\d{2}-\d{2}$", description="Inclusive start (YYYY-MM-DD)"
    ),
    end_date: str | None = Query(
        None, pattern=r"^\d{4}-\d{2}-\d{2}$", description="Inclusive end (YYYY-MM-DD)"
    ),
    author: str | None = Query(None, description="Case-insensitive author substring"),
) -> DecisionListResponse:
    """Decisions, most recent first unless a query ranks them.

    Undated decisions are excluded whenever a date bound is given.
    """
    criteria = SearchCriteria(
        query=query, start_date=start_date, end_date=end_date, author=author
    )
    results = filter_decisions(get_provider().get_decisions(), criteria)
    return DecisionListResponse(
        decisions=[_to_detail(entry) for entry in results],
        total=len(results),
        filters={
            "query": query,
            "start_date": start_date,
            "end_date": end_date,
            "author": author,
        },
    )
