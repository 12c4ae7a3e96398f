"""FastAPI adapter for the pgkeeper failover coordinator."""

from pgkeeper_fastapi.app import create_admin_app
from pgkeeper_fastapi.routes import create_admin_router
from pgkeeper_fastapi.settings import get_keeper_settings

__all__ = ["create_admin_app", "create_admin_router", "get_keeper_settings"]
