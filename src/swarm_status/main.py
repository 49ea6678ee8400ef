"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from swarm_status import __version__
from swarm_status.config import settings
from swarm_status.errors import SwarmStatusError
from swarm_status.routers import health_router, status_router

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Docker Swarm Deployment Status",
    description="Reports whether a swarm service is healthy and whether an image version is running",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Include routers
app.include_router(health_router)
app.include_router(status_router)


@app.exception_handler(SwarmStatusError)
async def swarm_status_error_handler(request: Request, exc: SwarmStatusError):
    """Turn control-plane failures into a 500 with an ``error`` payload."""
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


@app.on_event("startup")
async def startup_event():
    logger.info("Docker Deployment Status Starting")
    logger.info(f"Docker Host: {settings.docker_host}")
    logger.info(f"Docker API Version: {settings.docker_api_version}")
    logger.info(f"API Port: {settings.api_port}")
    logger.info("Docker Deployment Status Started")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Docker Deployment Status...")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "docker-swarm-deployment-status",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
    }


def run():
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "swarm_status.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
