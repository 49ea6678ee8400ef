"""Deployment-status and service-status endpoints."""

import base64
import binascii
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from swarm_status.dependencies import get_status_service
from swarm_status.services.status_service import StatusService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/docker-swarm-service-status", tags=["status"])

INVALID_IMAGE_ERROR = "Invalid base64 encode for the image parameter."


def decode_image(encoded: str) -> str:
    """
    Decode the URL-safe base64 image path parameter.

    Missing ``=`` padding is tolerated. Only the URL-safe alphabet is
    accepted; ``+`` and ``/`` are rejected.

    Raises:
        ValueError: If the value is not valid base64 or not UTF-8
    """
    if "+" in encoded or "/" in encoded:
        raise ValueError(INVALID_IMAGE_ERROR)

    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(INVALID_IMAGE_ERROR) from e


@router.get("/deployment-status/{service}/{image}")
def deployment_status(
    service: str,
    image: str,
    status_service: StatusService = Depends(get_status_service),
):
    """
    Report whether an image is deployed to a service and how its replicas are doing.

    The image is passed URL-safe base64 encoded, e.g. ``bXlhcHA6MS4wLjA=``
    for ``myapp:1.0.0``. A diagnostic in ``Err`` still returns 200; only
    daemon failures return 500.
    """
    try:
        image_ref = decode_image(image)
    except ValueError:
        logger.warning(f"Rejected image parameter '{image}'")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": INVALID_IMAGE_ERROR},
        )

    result = status_service.get_deployment_status(service, image_ref)
    return JSONResponse(status_code=status.HTTP_200_OK, content=result.to_wire())


@router.get("/service-status/{service}")
def service_status(
    service: str,
    status_service: StatusService = Depends(get_status_service),
):
    """Report running and failed replicas of a service across all images."""
    result = status_service.get_service_status(service)
    return JSONResponse(status_code=status.HTTP_200_OK, content=result.to_wire())
