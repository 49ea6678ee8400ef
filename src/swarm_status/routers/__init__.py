"""API routers."""

from swarm_status.routers.health import router as health_router
from swarm_status.routers.status import router as status_router

__all__ = ["health_router", "status_router"]
