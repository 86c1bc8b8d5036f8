"""Pydantic models for API responses."""

from __future__ import annotations

from datetime import date, time

from pydantic import BaseModel, Field

from squadlens.models import LogEntry, Member, Task

# === Task Models ===


class TaskResponse(BaseModel):
    """A derived task."""

    id: str
    title: str
    status: str
    assignee: str
    description: str | None = None
    started_at: date | None = None
    completed_at: date | None = None

    @classmethod
    def from_task(cls, task: Task) -> TaskResponse:
        return cls(
            id=task.id,
            title=task.title,
            status=task.status.value,
            assignee=task.assignee,
            description=task.description,
            started_at=task.started_at,
            completed_at=task.completed_at,
        )


class TaskListResponse(BaseModel):
    """Response for GET /tasks."""

    tasks: list[TaskResponse]
    total: int


# === Member Models ===


class ActivityResponse(BaseModel):
    """Detail behind a rich member status."""

    description: str
    short_label: str
    number: int | None = None


class MemberResponse(BaseModel):
    """A roster member with runtime status."""

    name: str
    role: str
    status: str
    activity: ActivityResponse | None = None
    current_task: TaskResponse | None = None

    @classmethod
    def from_member(cls, member: Member) -> MemberResponse:
        activity = None
        if member.activity is not None:
            activity = ActivityResponse(
                description=member.activity.description,
                short_label=member.activity.short_label,
                number=member.activity.number,
            )
        return cls(
            name=member.name,
            role=member.role,
            status=member.status.value,
            activity=activity,
            current_task=TaskResponse.from_task(member.current_task)
            if member.current_task
            else None,
        )


class MemberListResponse(BaseModel):
    """Response for GET /members."""

    members: list[MemberResponse]
    total: int
    source: str = Field(description="Roster tier that produced the member list")
    repository: str | None = None
    owner: str | None = None


# === Log Models ===


class WorkItemResponse(BaseModel):
    """One agent work item from a log."""

    agent: str
    description: str


class LogEntryResponse(BaseModel):
    """A parsed log document."""

    date: date
    timestamp: time | None = None
    topic: str
    participants: list[str] = Field(default_factory=list)
    summary: str = ""
    decisions: list[str] = Field(default_factory=list)
    outcomes: list[str] = Field(default_factory=list)
    related_issues: list[str] = Field(default_factory=list)
    what_was_done: list[WorkItemResponse] = Field(default_factory=list)
    source_path: str | None = None

    @classmethod
    def from_entry(cls, entry: LogEntry) -> LogEntryResponse:
        return cls(
            date=entry.date,
            timestamp=entry.timestamp,
            topic=entry.topic,
            participants=list(entry.participants),
            summary=entry.summary,
            decisions=list(entry.decisions),
            outcomes=list(entry.outcomes),
            related_issues=list(entry.related_issues),
            what_was_done=[
                WorkItemResponse(agent=item.agent, description=item.description)
                for item in entry.what_was_done
            ],
            source_path=entry.source_path,
        )


class LogListResponse(BaseModel):
    """Response for GET /logs."""

    entries: list[LogEntryResponse]
    total: int


class WorkDetailsResponse(BaseModel):
    """Response for GET /tasks/{task_id}."""

    task: TaskResponse
    member: MemberResponse
    log_entries: list[LogEntryResponse]


# === Health Models ===


class HealthCheckItem(BaseModel):
    """One diagnostic check."""

    name: str
    status: str
    message: str
    fix: str | None = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: str
    version: str
    squad_dir: str
    checks: list[HealthCheckItem]


# === Activity Models ===


class VelocityPointResponse(BaseModel):
    date: date
    completed_tasks: int


class HeatmapPointResponse(BaseModel):
    member: str
    activity_level: float


class ActivityReportResponse(BaseModel):
    """Response for GET /activity."""

    velocity: list[VelocityPointResponse]
    heatmap: list[HeatmapPointResponse]
