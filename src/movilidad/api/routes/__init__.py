"""API routes."""

from movilidad.api.routes.health import router as health_router
from movilidad.api.routes.submissions import router as submissions_router

__all__ = ["health_router", "submissions_router"]
