"""FastAPI application factory for the squadlens API server."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from squadlens import __version__
from squadlens.api.routes import activity, decisions, health, logs, members, tasks


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance.
    """
    app = FastAPI(
        title="squadlens API",
        description="Local-only, read-only API over a squad's markdown artifacts",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS configuration for local dashboards
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:8080",
            "http://127.0.0.1:8080",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(members.router, tags=["Members"])
    app.include_router(tasks.router, tags=["Tasks"])
    app.include_router(logs.router, tags=["Logs"])
    app.include_router(decisions.router, tags=["Decisions"])
    app.include_router(activity.router, tags=["Activity"])

    return app
