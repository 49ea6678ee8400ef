"""Health check endpoints."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from swarm_status.dependencies import get_gateway
from swarm_status.services.swarm_gateway import SwarmGateway

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    """Liveness probe. Does not touch the Docker daemon."""
    return {"status": "OK"}


@router.get("/ready")
def readiness_check(gateway: SwarmGateway = Depends(get_gateway)):
    """
    Readiness probe.

    Returns 503 while the Docker daemon cannot be reached.
    """
    docker_healthy = gateway.ping()

    return JSONResponse(
        status_code=status.HTTP_200_OK if docker_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "OK" if docker_healthy else "UNAVAILABLE",
            "docker": "connected" if docker_healthy else "disconnected",
        },
    )
