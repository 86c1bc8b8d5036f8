"""Activity report endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Query

from squadlens.activity import HEATMAP_DAYS, VELOCITY_DAYS
from squadlens.api.schemas import (
    ActivityReportResponse,
    HeatmapPointResponse,
    VelocityPointResponse,
)
from squadlens.provider import get_provider

router = APIRouter()


@router.get("/activity", response_model=ActivityReportResponse)
def activity_report(
    velocity_days: int = Query(VELOCITY_DAYS, ge=1, le=365),
    heatmap_days: int = Query(HEATMAP_DAYS, ge=1, le=90),
) -> ActivityReportResponse:
    """Velocity timeline and participation heatmap over every log directory."""
    provider = get_provider()
    return ActivityReportResponse(
        velocity=[
            VelocityPointResponse(date=point.date, completed_tasks=point.completed_tasks)
            for point in provider.get_velocity(velocity_days)
        ],
        heatmap=[
            HeatmapPointResponse(member=point.member, activity_level=point.activity_level)
            for point in provider.get_heatmap(heatmap_days)
        ],
    )
