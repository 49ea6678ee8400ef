"""Gateway, reconciliation and client services."""

from swarm_status.services.status_service import StatusService
from swarm_status.services.swarm_gateway import SwarmGateway

__all__ = ["StatusService", "SwarmGateway"]
