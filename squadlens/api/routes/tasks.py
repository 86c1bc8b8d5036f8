"""Task endpoints."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, HTTPException, Query

from squadlens.api.schemas import (
    LogEntryResponse,
    MemberResponse,
    TaskListResponse,
    TaskResponse,
    WorkDetailsResponse,
)
from squadlens.errors import TaskNotFoundError
from squadlens.provider import get_provider

router = APIRouter()


@router.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    scope: Literal["status", "history"] = Query(
        "status", description="status: orchestration logs only; history: every log directory"
    ),
    status: str | None = Query(None, description="Filter by task status"),
) -> TaskListResponse:
    """Derived tasks, optionally filtered by status."""
    provider = get_provider()
    tasks = provider.get_tasks() if scope == "status" else provider.get_history_tasks()
    if status:
        tasks = [task for task in tasks if task.status.value == status]
    items = [TaskResponse.from_task(task) for task in tasks]
    return TaskListResponse(tasks=items, total=len(items))


@router.get("/tasks/{task_id}", response_model=WorkDetailsResponse)
def get_task(task_id: str) -> WorkDetailsResponse:
    """A task with its member and the log entries that mention it.

    Raises:
        HTTPException: 404 if no task has that id.
    """
    try:
        details = get_provider().get_work_details(task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return WorkDetailsResponse(
        task=TaskResponse.from_task(details.task),
        member=MemberResponse.from_member(details.member),
        log_entries=[LogEntryResponse.from_entry(entry) for entry in details.log_entries],
    )
