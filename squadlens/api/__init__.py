"""Read-only HTTP API over the squad data provider."""

from squadlens.api.app import create_app

__all__ = ["create_app"]
