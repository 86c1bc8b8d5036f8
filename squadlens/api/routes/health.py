"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from squadlens import __version__
from squadlens.api.schemas import HealthCheckItem, HealthResponse
from squadlens.health.checks import CheckStatus, run_all
from squadlens.provider import get_provider

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Server status plus the squad folder diagnostics.

    Overall status is ``unhealthy`` when any check failed, ``degraded`` when
    any check warned, else ``healthy``.
    """
    provider = get_provider()
    results = run_all(provider.workspace, provider.source)

    statuses = {result.status for result in results}
    if CheckStatus.FAIL in statuses:
        overall = "unhealthy"
    elif CheckStatus.WARN in statuses:
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        version=__version__,
        squad_dir=str(provider.workspace.squad_dir),
        checks=[
            HealthCheckItem(
                name=result.name,
                status=result.status.value,
                message=result.message,
                fix=result.fix,
            )
            for result in results
        ],
    )
