"""Docker Swarm gateway using Docker SDK."""

import logging
from typing import Any, Dict, List, Optional

import docker
import requests
from docker.errors import DockerException

from swarm_status.config import GatewayConfig
from swarm_status.errors import GatewayError
from swarm_status.models import (
    ServiceDescriptor,
    TaskRecord,
    TaskState,
    UpdateState,
    UpdateStatus,
)

logger = logging.getLogger(__name__)


class SwarmGateway:
    """
    Reads services and tasks from the Docker Swarm control plane.

    Only listing calls are made; nothing here changes cluster state.
    Every daemon failure is re-raised as ``GatewayError``.
    """

    def __init__(self, config: GatewayConfig, client: Optional[docker.DockerClient] = None):
        """
        Initialize gateway.

        Args:
            config: Connection parameters for the daemon
            client: Pre-built client (tests); created from ``config`` on first use when omitted
        """
        self.config = config
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        """
        Docker client, created on first access.

        Raises:
            GatewayError: If the client cannot be built from ``config``
        """
        if self._client is None:
            try:
                client = docker.DockerClient(
                    base_url=self.config.host,
                    version=self.config.api_version,
                    timeout=self.config.timeout,
                )
            except DockerException as e:
                logger.error(f"Cannot create Docker client for {self.config.host}: {e}")
                raise GatewayError(str(e)) from e
            client.api.headers.update(self.config.headers)
            self._client = client
        return self._client

    def lookup_service(self, name: str) -> ServiceDescriptor:
        """
        Find a service by name.

        The daemon's ``name`` filter also matches services whose name merely
        starts with ``name``, so an exact match wins when there is one.

        Args:
            name: Service name to look up

        Returns:
            ServiceDescriptor; ``id`` is empty when nothing matched

        Raises:
            GatewayError: If the Docker API call fails
            UnknownStateError: If the update state is one we do not model
        """
        try:
            services = self.client.api.services(filters={"name": name})
        except (DockerException, requests.RequestException) as e:
            logger.error(f"Failed to list services matching '{name}': {e}")
            raise GatewayError(str(e)) from e

        if not services:
            logger.info(f"No service matches '{name}'")
            return ServiceDescriptor(name=name)

        chosen = services[-1]
        for service in services:
            if service.get("Spec", {}).get("Name") == name:
                chosen = service
                break

        return self._parse_service(name, chosen)

    def list_tasks(self, service_id: str, desired_state: Optional[str] = None) -> List[TaskRecord]:
        """
        List the tasks of a service.

        Args:
            service_id: Docker service ID
            desired_state: Optional ``desired-state`` filter (e.g. "running")

        Returns:
            Task records in the order the daemon listed them

        Raises:
            GatewayError: If the Docker API call fails or a task reports no state
            UnknownStateError: If a task reports a state we do not model
        """
        filters: Dict[str, Any] = {"service": service_id}
        if desired_state:
            filters["desired-state"] = desired_state

        try:
            tasks = self.client.api.tasks(filters=filters)
        except (DockerException, requests.RequestException) as e:
            logger.error(f"Failed to list tasks for service {service_id}: {e}")
            raise GatewayError(str(e)) from e

        return [self._parse_task(task) for task in tasks]

    def ping(self) -> bool:
        """
        Check if Docker daemon is reachable.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self.client.ping())
        except (GatewayError, DockerException, requests.RequestException) as e:
            logger.error(f"Docker health check failed: {e}")
            return False

    @staticmethod
    def _parse_service(name: str, raw: Dict[str, Any]) -> ServiceDescriptor:
        spec = raw.get("Spec") or {}
        replicated = (spec.get("Mode") or {}).get("Replicated")
        desired_replicas = None
        if replicated is not None:
            desired_replicas = int(replicated.get("Replicas", 0))

        update_state = None
        raw_update = raw.get("UpdateStatus")
        if raw_update and raw_update.get("State"):
            update_state = UpdateStatus(
                state=UpdateState.parse(raw_update["State"]),
                message=raw_update.get("Message", ""),
            )

        return ServiceDescriptor(
            id=raw.get("ID", ""),
            name=name,
            desired_replicas=desired_replicas,
            update_state=update_state,
        )

    @staticmethod
    def _parse_task(raw: Dict[str, Any]) -> TaskRecord:
        status = raw.get("Status") or {}
        container_spec = (raw.get("Spec") or {}).get("ContainerSpec") or {}
        task_id = raw.get("ID", "")

        desired_state = raw.get("DesiredState")
        observed_state = status.get("State")
        if not desired_state or not observed_state:
            logger.error(f"Task {task_id} reported no state (desired={desired_state!r}, observed={observed_state!r})")
            raise GatewayError(f"Task {task_id} reported no state")

        return TaskRecord(
            task_id=task_id,
            timestamp=status.get("Timestamp", ""),
            desired_state=TaskState.parse(desired_state),
            observed_state=TaskState.parse(observed_state),
            message=status.get("Message", ""),
            error=status.get("Err", ""),
            image=container_spec.get("Image", ""),
        )
