"""FastAPI dependencies for the Docker gateway and status service."""

from functools import lru_cache

from fastapi import Depends

from swarm_status.config import settings
from swarm_status.services.status_service import StatusService
from swarm_status.services.swarm_gateway import SwarmGateway


@lru_cache(maxsize=1)
def get_gateway() -> SwarmGateway:
    """
    Dependency for FastAPI routes to get the shared Docker gateway.

    The client is created on first use so the app starts without a daemon.
    """
    return SwarmGateway(settings.gateway_config())


def get_status_service(gateway: SwarmGateway = Depends(get_gateway)) -> StatusService:
    return StatusService(gateway)
