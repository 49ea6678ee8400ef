"""Status reconciliation between a service's declared and observed state.

Everything in this module is pure: it takes the service descriptor and task
list fetched by the gateway and returns a ``StatusAggregate``. No I/O.
"""

from enum import Enum
from typing import Iterable, Optional

from swarm_status.errors import UnknownStateError
from swarm_status.models import (
    ServiceDescriptor,
    StatusAggregate,
    TaskRecord,
    TaskState,
    UpdateState,
    UpdateStatus,
)


class _Observed(Enum):
    RUNNING = "running"
    FAILED = "failed"
    REJECTED = "rejected"
    OTHER = "other"


# Every TaskState must appear here; see _observed_kind.
_OBSERVED_KIND = {
    TaskState.NEW: _Observed.OTHER,
    TaskState.ALLOCATED: _Observed.OTHER,
    TaskState.PENDING: _Observed.OTHER,
    TaskState.ASSIGNED: _Observed.OTHER,
    TaskState.ACCEPTED: _Observed.OTHER,
    TaskState.PREPARING: _Observed.OTHER,
    TaskState.READY: _Observed.OTHER,
    TaskState.STARTING: _Observed.OTHER,
    TaskState.RUNNING: _Observed.RUNNING,
    TaskState.COMPLETE: _Observed.OTHER,
    TaskState.SHUTDOWN: _Observed.OTHER,
    TaskState.FAILED: _Observed.FAILED,
    TaskState.REJECTED: _Observed.REJECTED,
    TaskState.REMOVE: _Observed.OTHER,
    TaskState.ORPHANED: _Observed.OTHER,
}

FAILED_UPDATE_STATES = frozenset(
    {UpdateState.PAUSED, UpdateState.ROLLBACK_COMPLETED, UpdateState.ROLLBACK_PAUSED}
)


def normalize_image(ref: str) -> str:
    """Strip the ``@digest`` suffix from an image reference.

    >>> normalize_image("app:1.0.0@sha256:abc")
    'app:1.0.0'
    """
    return ref.split("@", 1)[0]


def is_image_deployed(tasks: Iterable[TaskRecord], image: str) -> bool:
    """Return True if any task runs ``image`` (digest ignored)."""
    return any(normalize_image(task.image) == image for task in tasks)


def _observed_kind(state: TaskState) -> _Observed:
    try:
        return _OBSERVED_KIND[state]
    except KeyError:
        raise UnknownStateError("task", state.value) from None


def _matches_image(task: TaskRecord, image: Optional[str]) -> bool:
    if not image:
        return True
    return normalize_image(task.image) == image


def is_running(task: TaskRecord) -> bool:
    return (
        _observed_kind(task.observed_state) is _Observed.RUNNING
        and task.desired_state == TaskState.RUNNING
    )


def is_failed(task: TaskRecord) -> bool:
    kind = _observed_kind(task.observed_state)
    if kind is _Observed.FAILED:
        return True
    return kind is _Observed.REJECTED and task.desired_state == TaskState.SHUTDOWN


def count_replicas(tasks: Iterable[TaskRecord], image: Optional[str] = None) -> tuple[int, int]:
    """
    Count running and failed replicas.

    A task is counted at most once. When ``image`` is given, only tasks whose
    normalized image equals it are eligible for either bucket; when it is
    empty every task is eligible.

    Args:
        tasks: Task records of one service
        image: Image reference without digest, or None/"" for all images

    Returns:
        Tuple of (running, failed)
    """
    running = 0
    failed = 0

    for task in tasks:
        if not _matches_image(task, image):
            continue
        if is_running(task):
            running += 1
        elif is_failed(task):
            failed += 1

    return running, failed


def diagnose(
    service_name: str,
    desired_replicas: Optional[int],
    failed: int,
    running: int,
    update_status: Optional[UpdateStatus],
) -> Optional[str]:
    """
    Explain a failed rollout, or return None if nothing matched.

    The update-state rule is evaluated last and wins over the replica rule.
    """
    error = None

    if desired_replicas is not None and failed > running and running < desired_replicas:
        error = (
            f"Looks like something went wrong during the deployment, because the "
            f"{service_name} service failed {failed} time(s) since last deployment"
        )

    if update_status is not None and update_status.state in FAILED_UPDATE_STATES:
        error = (
            f"Something went wrong during the deployment of the {service_name} service. "
            f"The error message is: {update_status.message}"
        )

    return error


def service_not_found(service_name: str) -> StatusAggregate:
    return StatusAggregate(
        name=service_name,
        error=f"The {service_name} service was not found in the cluster.",
    )


def reconcile_deployment(
    service_name: str,
    service: ServiceDescriptor,
    tasks: list[TaskRecord],
    image: str,
) -> StatusAggregate:
    """
    Build the deployment status of ``image`` for a service.

    Args:
        service_name: Name the caller asked for
        service: Descriptor returned by the gateway (may be empty)
        tasks: All tasks of the service, in listing order
        image: Requested image reference, usually without digest

    Returns:
        StatusAggregate with ``error`` set when a failure pattern matched
    """
    if not service.exists:
        return service_not_found(service_name)

    if not is_image_deployed(tasks, image):
        return StatusAggregate(
            id=service.id,
            name=service_name,
            error=(
                f"The {image} image was not deployed or not found in the current tasks running."
            ),
        )

    running, failed = count_replicas(tasks, image)

    return StatusAggregate(
        id=service.id,
        name=service_name,
        task_history=list(tasks),
        desired_replicas=service.desired_replicas,
        running_replicas=running,
        failed_replicas=failed,
        update_status=service.update_state,
        error=diagnose(service_name, service.desired_replicas, failed, running, service.update_state),
    )


def reconcile_service(
    service_name: str,
    service: ServiceDescriptor,
    tasks: list[TaskRecord],
) -> StatusAggregate:
    """Build the image-agnostic status of a service.

    Only the not-found diagnosis applies here.
    """
    if not service.exists:
        return service_not_found(service_name)

    running, failed = count_replicas(tasks)

    return StatusAggregate(
        id=service.id,
        name=service_name,
        task_history=list(tasks),
        desired_replicas=service.desired_replicas,
        running_replicas=running,
        failed_replicas=failed,
        update_status=service.update_state,
    )
