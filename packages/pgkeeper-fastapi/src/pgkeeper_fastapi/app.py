"""Standalone FastAPI application serving the admin router."""

from typing import Any

from fastapi import FastAPI

from pgkeeper.factories import create_cluster_admin
from pgkeeper.usecases.cluster_admin import ClusterAdmin
from pgkeeper_fastapi.routes import create_admin_router
from pgkeeper_fastapi.settings import get_keeper_settings


def create_admin_app(
    admin: ClusterAdmin | None = None,
    settings: dict[str, Any] | None = None,
    registry_target: str | None = None,
) -> FastAPI:
    """Create a FastAPI app exposing the pgkeeper admin API.

    Either pass a ready ClusterAdmin, or a settings dict from which one is
    built against the PostgreSQL registry.

    Args:
        admin: ClusterAdmin to serve.
        settings: Settings dict used when ``admin`` is not given.
        registry_target: Server holding the registry, with ``settings``.

    Raises:
        ValueError: If neither ``admin`` nor ``settings`` is given.
    """
    if admin is None:
        if settings is None:
            raise ValueError("either admin or settings is required")
        admin = create_cluster_admin(
            get_keeper_settings(settings), registry_target=registry_target
        )

    app = FastAPI(title="pgkeeper admin")
    app.include_router(create_admin_router(admin))
    return app
