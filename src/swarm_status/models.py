"""Domain models for Docker Swarm services, tasks and status aggregates.

The aggregate serializes with the PascalCase keys deployment pipelines
already parse (``ID``, ``Err``, ``RunningReplicas``...). Python code uses the
snake_case field names.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from swarm_status.errors import UnknownStateError


class TaskState(str, Enum):
    """Task states as reported by the Docker engine."""

    NEW = "new"
    ALLOCATED = "allocated"
    PENDING = "pending"
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    STARTING = "starting"
    RUNNING = "running"
    COMPLETE = "complete"
    SHUTDOWN = "shutdown"
    FAILED = "failed"
    REJECTED = "rejected"
    REMOVE = "remove"
    ORPHANED = "orphaned"

    @classmethod
    def parse(cls, value: str) -> "TaskState":
        try:
            return cls(value)
        except ValueError:
            raise UnknownStateError("task", value) from None


class UpdateState(str, Enum):
    """Rolling update states of a service."""

    UPDATING = "updating"
    PAUSED = "paused"
    COMPLETED = "completed"
    ROLLBACK_STARTED = "rollback_started"
    ROLLBACK_PAUSED = "rollback_paused"
    ROLLBACK_COMPLETED = "rollback_completed"

    @classmethod
    def parse(cls, value: str) -> "UpdateState":
        try:
            return cls(value)
        except ValueError:
            raise UnknownStateError("update", value) from None


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        """Serialize with wire keys, dropping absent optional values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UpdateStatus(_WireModel):
    """Record of the last rolling update of a service."""

    state: UpdateState = Field(..., alias="State")
    message: str = Field(default="", alias="Message")


class ServiceDescriptor(_WireModel):
    """Declared state of a swarm service.

    ``id`` is empty when no service matched the lookup.
    """

    id: str = Field(default="", alias="ID")
    name: str = Field(..., alias="Name")
    desired_replicas: int | None = Field(default=None, ge=0, alias="Replicas")
    update_state: UpdateStatus | None = Field(default=None, alias="UpdateStatus")

    @property
    def exists(self) -> bool:
        return bool(self.id)


class TaskRecord(_WireModel):
    """One scheduled container instance belonging to a service."""

    task_id: str = Field(default="", alias="TaskID")
    timestamp: str = Field(default="", alias="Timestamp")
    desired_state: TaskState = Field(..., alias="DesiredState")
    observed_state: TaskState = Field(..., alias="State")
    message: str = Field(default="", alias="Message")
    error: str = Field(default="", alias="Err")
    image: str = Field(default="", alias="Image")


class StatusAggregate(_WireModel):
    """Result of a deployment-status or service-status query."""

    id: str | None = Field(default=None, alias="ID")
    name: str = Field(..., alias="Name")
    error: str | None = Field(default=None, alias="Err")
    task_history: list[TaskRecord] | None = Field(default=None, alias="TaskStatus")
    desired_replicas: int | None = Field(default=None, ge=0, alias="Replicas")
    running_replicas: int = Field(default=0, ge=0, alias="RunningReplicas")
    failed_replicas: int = Field(default=0, ge=0, alias="FailedReplicas")
    update_status: UpdateStatus | None = Field(default=None, alias="UpdateStatus")

    @property
    def healthy(self) -> bool:
        """True when no known failure pattern matched."""
        return self.error is None
