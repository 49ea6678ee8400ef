"""HTTP client for the deployment status API."""

import base64
import logging

import requests

from swarm_status.models import StatusAggregate

logger = logging.getLogger(__name__)

API_PREFIX = "/v1/docker-swarm-service-status"


class StatusAPIError(Exception):
    """The status API could not answer (transport error or non-2xx)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


def encode_image(image: str) -> str:
    """Encode an image reference for the deployment-status path."""
    return base64.urlsafe_b64encode(image.encode("utf-8")).decode("ascii")


class StatusClient:
    """Client used by deployment pipelines to ask for rollout status."""

    def __init__(self, base_url: str = "http://localhost:8080", timeout: float = 30):
        """
        Initialize status client.

        Args:
            base_url: Root URL of the status API
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def deployment_status(self, service: str, image: str) -> StatusAggregate:
        """
        Get the rollout status of ``image`` for a service.

        Raises:
            StatusAPIError: If the API is unreachable or answers with an error
        """
        return self._get(f"{API_PREFIX}/deployment-status/{service}/{encode_image(image)}")

    def service_status(self, service: str) -> StatusAggregate:
        """
        Get the replica status of a service.

        Raises:
            StatusAPIError: If the API is unreachable or answers with an error
        """
        return self._get(f"{API_PREFIX}/service-status/{service}")

    def _get(self, path: str) -> StatusAggregate:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Status API request to {url} failed: {e}")
            raise StatusAPIError(str(e)) from e

        if not response.ok:
            message = response.text
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict) and payload.get("error"):
                message = payload["error"]
            logger.error(f"Status API returned {response.status_code}: {message}")
            raise StatusAPIError(message, status_code=response.status_code)

        return StatusAggregate.model_validate(response.json())
