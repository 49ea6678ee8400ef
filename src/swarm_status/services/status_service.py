"""Deployment-status and service-status queries."""

import logging

from swarm_status.models import StatusAggregate, TaskState
from swarm_status.services import reconciler
from swarm_status.services.swarm_gateway import SwarmGateway

logger = logging.getLogger(__name__)


class StatusService:
    """
    Answers status queries by fetching from the gateway and reconciling.

    Gateway failures propagate unchanged; diagnostic findings come back as
    ``StatusAggregate.error``.
    """

    def __init__(self, gateway: SwarmGateway):
        self.gateway = gateway

    def get_deployment_status(self, service_name: str, image: str) -> StatusAggregate:
        """
        Check whether ``image`` was rolled out successfully to a service.

        Args:
            service_name: Swarm service name
            image: Image reference, usually without digest

        Returns:
            StatusAggregate for the image

        Raises:
            GatewayError: If the Docker daemon cannot be queried
        """
        logger.info(f"Deployment status requested for '{service_name}' with image '{image}'")

        service = self.gateway.lookup_service(service_name)
        if not service.exists:
            status = reconciler.service_not_found(service_name)
        else:
            tasks = self.gateway.list_tasks(service.id)
            status = reconciler.reconcile_deployment(service_name, service, tasks, image)

        self._log_result(status)
        return status

    def get_service_status(self, service_name: str) -> StatusAggregate:
        """
        Report running and failed replicas of a service, whatever the image.

        Raises:
            GatewayError: If the Docker daemon cannot be queried
        """
        logger.info(f"Service status requested for '{service_name}'")

        service = self.gateway.lookup_service(service_name)
        if not service.exists:
            status = reconciler.service_not_found(service_name)
        else:
            tasks = self.gateway.list_tasks(service.id, desired_state=TaskState.RUNNING.value)
            status = reconciler.reconcile_service(service_name, service, tasks)

        self._log_result(status)
        return status

    @staticmethod
    def _log_result(status: StatusAggregate) -> None:
        if status.error:
            logger.warning(f"Service '{status.name}': {status.error}")
        else:
            logger.info(
                f"Service '{status.name}': {status.running_replicas} running, "
                f"{status.failed_replicas} failed, desired {status.desired_replicas}"
            )
