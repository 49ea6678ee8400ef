"""Tests for the pure status reconciliation logic."""

import pytest

from conftest import make_service, make_task
from swarm_status.errors import UnknownStateError
from swarm_status.models import ServiceDescriptor, TaskState
from swarm_status.services import reconciler
from swarm_status.services.reconciler import (
    count_replicas,
    diagnose,
    is_image_deployed,
    normalize_image,
    reconcile_deployment,
    reconcile_service,
)

IMAGE = "app:1.0.0"


class TestNormalizeImage:
    @pytest.mark.parametrize(
        "ref,expected",
        [
            ("app:1.0.0@sha256:abc", "app:1.0.0"),
            ("app:1.0.0", "app:1.0.0"),
            ("registry:5000/app:1.0.0@sha256:abc", "registry:5000/app:1.0.0"),
            ("app@sha256:abc@extra", "app"),
            ("", ""),
        ],
    )
    def test_strips_from_first_at(self, ref, expected):
        assert normalize_image(ref) == expected

    @pytest.mark.parametrize("ref", ["app:1.0.0@sha256:abc", "a@b@c", "plain", "@digest"])
    def test_idempotent(self, ref):
        assert normalize_image(normalize_image(ref)) == normalize_image(ref)


class TestIsImageDeployed:
    def test_matches_ignoring_digest(self):
        assert is_image_deployed([make_task(image="app:1.0.0@sha256:abc")], IMAGE)

    def test_any_task_is_enough(self):
        tasks = [make_task(image="app:0.9.0"), make_task(image="app:1.0.0", observed="shutdown", desired="shutdown")]
        assert is_image_deployed(tasks, IMAGE)

    def test_no_match(self):
        assert not is_image_deployed([make_task(image="app:0.9.0@sha256:def")], IMAGE)

    def test_empty_task_list(self):
        assert not is_image_deployed([], IMAGE)


class TestCountReplicas:
    def test_running_requires_both_states(self):
        tasks = [
            make_task(observed="running", desired="running"),
            make_task(observed="running", desired="shutdown"),
            make_task(observed="starting", desired="running"),
        ]
        assert count_replicas(tasks, IMAGE) == (1, 0)

    def test_failed_and_rejected(self):
        tasks = [
            make_task(observed="failed", desired="shutdown"),
            make_task(observed="failed", desired="running"),
            make_task(observed="rejected", desired="shutdown"),
            make_task(observed="rejected", desired="running"),
        ]
        assert count_replicas(tasks, IMAGE) == (0, 3)

    def test_failed_task_counted_once(self):
        # Image-scoped and image-agnostic predicates are one rule; a failed
        # task must not be counted twice.
        assert count_replicas([make_task(observed="failed")], IMAGE) == (0, 1)

    def test_failed_task_of_other_image_is_not_counted(self):
        # Behavior change from the historical predicate, which counted every
        # failed task regardless of image.
        tasks = [make_task(observed="failed", desired="shutdown", image="app:0.9.0")]
        assert count_replicas(tasks, IMAGE) == (0, 0)

    def test_image_scoping_for_running(self):
        tasks = [make_task(image="app:1.0.0@sha256:abc"), make_task(image="app:0.9.0@sha256:def")]
        assert count_replicas(tasks, IMAGE) == (1, 0)

    @pytest.mark.parametrize("image", [None, ""])
    def test_image_agnostic(self, image):
        tasks = [
            make_task(image="app:1.0.0"),
            make_task(image="app:0.9.0"),
            make_task(observed="failed", desired="shutdown", image="other:2"),
        ]
        assert count_replicas(tasks, image) == (2, 1)

    def test_transient_states_count_in_neither(self):
        transient = ["new", "allocated", "pending", "assigned", "accepted", "preparing", "ready", "starting"]
        tasks = [make_task(observed=state) for state in transient]
        assert count_replicas(tasks, IMAGE) == (0, 0)

    def test_totals_never_exceed_task_count(self):
        tasks = [
            make_task(observed=observed.value, desired=desired.value)
            for observed in TaskState
            for desired in (TaskState.RUNNING, TaskState.SHUTDOWN)
        ]
        running, failed = count_replicas(tasks)
        assert running + failed <= len(tasks)

    def test_every_task_state_is_classified(self):
        assert set(reconciler._OBSERVED_KIND) == set(TaskState)

    def test_unclassified_state_fails_loudly(self, monkeypatch):
        table = dict(reconciler._OBSERVED_KIND)
        del table[TaskState.ORPHANED]
        monkeypatch.setattr(reconciler, "_OBSERVED_KIND", table)

        with pytest.raises(UnknownStateError):
            count_replicas([make_task(observed="orphaned")])


class TestDiagnose:
    def test_no_error_when_healthy(self):
        assert diagnose("web", 2, failed=0, running=2, update_status=None) is None

    def test_rollout_failure(self):
        error = diagnose("web", 2, failed=3, running=1, update_status=None)
        assert error == (
            "Looks like something went wrong during the deployment, because the "
            "web service failed 3 time(s) since last deployment"
        )

    def test_failed_equal_running_does_not_fire(self):
        assert diagnose("web", 2, failed=1, running=1, update_status=None) is None

    def test_fully_running_does_not_fire(self):
        assert diagnose("web", 1, failed=5, running=1, update_status=None) is None

    def test_global_service_skips_replica_rule(self):
        assert diagnose("web", None, failed=5, running=0, update_status=None) is None

    @pytest.mark.parametrize("state", ["paused", "rollback_paused", "rollback_completed"])
    def test_failed_update_states(self, state):
        update = make_service(update_state=state, update_message="boom").update_state
        error = diagnose("web", 1, failed=0, running=1, update_status=update)
        assert error == (
            "Something went wrong during the deployment of the web service. "
            "The error message is: boom"
        )

    @pytest.mark.parametrize("state", ["updating", "completed", "rollback_started"])
    def test_other_update_states_are_fine(self, state):
        update = make_service(update_state=state).update_state
        assert diagnose("web", 1, failed=0, running=1, update_status=update) is None

    def test_update_rule_overrides_replica_rule(self):
        update = make_service(update_state="rollback_completed", update_message="rolled back").update_state
        error = diagnose("web", 3, failed=4, running=0, update_status=update)
        assert error.startswith("Something went wrong during the deployment of the web service.")


class TestReconcileDeployment:
    def test_service_not_found(self):
        result = reconcile_deployment("my-service", ServiceDescriptor(name="my-service"), [make_task()], IMAGE)

        assert result.error == "The my-service service was not found in the cluster."
        assert result.id is None
        assert result.task_history is None
        assert result.running_replicas == 0
        assert result.failed_replicas == 0

    def test_single_running_replica(self):
        service = make_service(replicas=1)
        result = reconcile_deployment("my-service", service, [make_task()], IMAGE)

        assert result.error is None
        assert result.id == "svc-1"
        assert result.desired_replicas == 1
        assert result.running_replicas == 1
        assert result.failed_replicas == 0
        assert result.update_status is None
        assert len(result.task_history) == 1

    def test_scaled_with_one_failure_is_not_an_error(self):
        service = make_service(replicas=2)
        tasks = [
            make_task(task_id="t1"),
            make_task(task_id="t2", observed="failed", desired="shutdown"),
        ]
        result = reconcile_deployment("my-service", service, tasks, IMAGE)

        assert result.running_replicas == 1
        assert result.running_replicas < result.desired_replicas
        assert result.failed_replicas == 1
        assert result.error is None

    def test_rollout_failure_reported(self):
        service = make_service(replicas=2)
        tasks = [
            make_task(task_id="t1", observed="failed", desired="shutdown"),
            make_task(task_id="t2", observed="failed", desired="shutdown"),
            make_task(task_id="t3", observed="starting"),
        ]
        result = reconcile_deployment("my-service", service, tasks, IMAGE)

        assert result.failed_replicas == 2
        assert result.error == (
            "Looks like something went wrong during the deployment, because the "
            "my-service service failed 2 time(s) since last deployment"
        )

    def test_paused_update_overrides_clean_counts(self):
        service = make_service(replicas=1, update_state="paused", update_message="update completed")
        result = reconcile_deployment("my-service", service, [make_task()], IMAGE)

        assert result.running_replicas == 1
        assert result.error == (
            "Something went wrong during the deployment of the my-service service. "
            "The error message is: update completed"
        )
        assert result.update_status.message == "update completed"

    def test_image_not_deployed(self):
        service = make_service(replicas=1)
        result = reconcile_deployment("my-service", service, [make_task(image="app:0.9.0")], IMAGE)

        assert result.error == (
            "The app:1.0.0 image was not deployed or not found in the current tasks running."
        )
        assert result.id == "svc-1"
        assert result.task_history is None
        assert result.desired_replicas is None
        assert result.running_replicas == 0
        assert result.failed_replicas == 0

    def test_task_history_keeps_listing_order(self):
        tasks = [make_task(task_id=f"t{i}") for i in range(3)]
        result = reconcile_deployment("my-service", make_service(replicas=3), tasks, IMAGE)
        assert [t.task_id for t in result.task_history] == ["t0", "t1", "t2"]


class TestReconcileService:
    def test_service_not_found(self):
        result = reconcile_service("ghost", ServiceDescriptor(name="ghost"), [])
        assert result.error == "The ghost service was not found in the cluster."
        assert result.task_history is None

    def test_counts_all_images_and_never_diagnoses(self):
        service = make_service(replicas=3, update_state="paused", update_message="paused")
        tasks = [
            make_task(image="app:1.0.0"),
            make_task(image="app:2.0.0"),
            make_task(observed="failed", desired="running", image="app:2.0.0"),
        ]
        result = reconcile_service("my-service", service, tasks)

        assert result.running_replicas == 2
        assert result.failed_replicas == 1
        assert result.error is None
        assert result.update_status.state.value == "paused"
