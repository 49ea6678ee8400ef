"""
Pytest configuration and shared fixtures.

No Docker daemon is needed: the gateway is replaced by an in-memory fake or
driven through a ``MagicMock`` Docker client.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from swarm_status.config import GatewayConfig
from swarm_status.dependencies import get_gateway
from swarm_status.main import app
from swarm_status.models import (
    ServiceDescriptor,
    TaskRecord,
    TaskState,
    UpdateState,
    UpdateStatus,
)
from swarm_status.services.swarm_gateway import SwarmGateway


def make_task(
    observed: str = "running",
    desired: str = "running",
    image: str = "app:1.0.0@sha256:abc",
    task_id: str = "task-1",
) -> TaskRecord:
    return TaskRecord(
        task_id=task_id,
        timestamp="2024-01-01T00:00:00.000000000Z",
        desired_state=TaskState(desired),
        observed_state=TaskState(observed),
        message="started" if observed == "running" else observed,
        image=image,
    )


def make_service(
    replicas: int | None = 1,
    update_state: str | None = None,
    update_message: str = "",
    service_id: str = "svc-1",
    name: str = "my-service",
) -> ServiceDescriptor:
    update = None
    if update_state is not None:
        update = UpdateStatus(state=UpdateState(update_state), message=update_message)
    return ServiceDescriptor(
        id=service_id,
        name=name,
        desired_replicas=replicas,
        update_state=update,
    )


class FakeGateway:
    """In-memory stand-in for SwarmGateway."""

    def __init__(self, service: ServiceDescriptor | None = None, tasks=None, error: Exception | None = None):
        self.service = service
        self.tasks = list(tasks or [])
        self.error = error
        self.task_calls = []

    def lookup_service(self, name):
        if self.error:
            raise self.error
        if self.service is None:
            return ServiceDescriptor(name=name)
        return self.service

    def list_tasks(self, service_id, desired_state=None):
        self.task_calls.append((service_id, desired_state))
        if self.error:
            raise self.error
        if desired_state:
            return [t for t in self.tasks if t.desired_state.value == desired_state]
        return list(self.tasks)

    def ping(self):
        return self.error is None


@pytest.fixture
def docker_client():
    """MagicMock shaped like docker.DockerClient."""
    client = MagicMock()
    client.api.services.return_value = []
    client.api.tasks.return_value = []
    client.ping.return_value = True
    return client


@pytest.fixture
def gateway(docker_client):
    return SwarmGateway(GatewayConfig(headers={"User-Agent": "test"}), client=docker_client)


@pytest.fixture
def api_client():
    """TestClient whose gateway dependency can be swapped per test."""

    def _make(fake_gateway):
        app.dependency_overrides[get_gateway] = lambda: fake_gateway
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()
