"""API endpoints."""

from pulse_app.api.routes import router

__all__ = [
    "router",
]
