"""Member endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from squadlens.api.schemas import (
    MemberListResponse,
    MemberResponse,
    TaskListResponse,
    TaskResponse,
)
from squadlens.provider import get_provider

router = APIRouter()


@router.get("/members", response_model=MemberListResponse)
def list_members() -> MemberListResponse:
    """Roster members with their current status."""
    provider = get_provider()
    roster = provider.get_roster()
    members = [MemberResponse.from_member(member) for member in provider.get_members()]
    return MemberListResponse(
        members=members,
        total=len(members),
        source=roster.source.value,
        repository=roster.repository,
        owner=roster.owner,
    )


@router.get("/members/{name}", response_model=MemberResponse)
def get_member(name: str) -> MemberResponse:
    """A single member, matched case-insensitively."""
    member = get_provider().find_member(name)
    if member is None:
        raise HTTPException(status_code=404, detail=f"Member not found: {name}")
    return MemberResponse.from_member(member)


@router.get("/members/{name}/tasks", response_model=TaskListResponse)
def get_member_tasks(name: str) -> TaskListResponse:
    """Status-relevant tasks assigned to a member."""
    tasks = [TaskResponse.from_task(task) for task in get_provider().get_tasks_for_member(name)]
    return TaskListResponse(tasks=tasks, total=len(tasks))
