"""Log entry endpoint."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from squadlens.api.schemas import LogEntryResponse, LogListResponse
from squadlens.provider import get_provider

router = APIRouter()


@router.get("/logs", response_model=LogListResponse)
def list_logs(
    participant: str | None = Query(None, description="Only entries with this participant"),
    since: date | None = Query(None, description="Only entries on or after this date"),
    limit: int = Query(50, ge=1, le=500),
) -> LogListResponse:
    """Parsed log entries from every log directory, newest first."""
    entries = get_provider().get_log_entries()
    if participant:
        wanted = participant.lower()
        entries = [e for e in entries if wanted in (p.lower() for p in e.participants)]
    if since:
        entries = [e for e in entries if e.date >= since]

    items = [LogEntryResponse.from_entry(entry) for entry in entries[:limit]]
    return LogListResponse(entries=items, total=len(entries))
