"""Diagnostic health checks for a squad folder."""

from squadlens.health.checks import (
    CheckStatus,
    HealthCheckResult,
    format_results,
    run_all,
)

__all__ = [
    "CheckStatus",
    "HealthCheckResult",
    "format_results",
    "run_all",
]
