"""FastAPI surface for the session engine."""

from detective_core.api.routes import create_app, create_router, error_status

__all__ = ["create_app", "create_router", "error_status"]
