"""
Tests for the workload status evaluator.

Exercises the per-kind check precedence, the availability gate fold and
the handling of workloads that cannot be fetched.
"""

import pytest

from opstatus.core.settings import DEFAULT_VERSION_ANNOTATION
from opstatus.status.evaluator import WorkloadStatusEvaluator
from opstatus.store.memory import InMemoryWorkloadInspector
from tests._support.workloads import (
    RELEASE,
    daemon_set,
    deployment,
    ready_daemon_set,
    ready_deployment,
)


@pytest.fixture()
def evaluator(inspector):
    return WorkloadStatusEvaluator(inspector)


class TestEmptyAndReady:
    def test_no_workloads_is_not_available(self, evaluator):
        result = evaluator.evaluate([], [], RELEASE)

        assert result.reached_available_level is False
        assert result.progressing == []

    def test_one_ready_daemon_set(self, evaluator, inspector):
        inspector.set(daemon_set(), ready_daemon_set())

        result = evaluator.evaluate([daemon_set()], [], RELEASE)

        assert result.reached_available_level is True
        assert result.progressing == []

    def test_one_ready_deployment(self, evaluator, inspector):
        inspector.set(deployment(), ready_deployment())

        result = evaluator.evaluate([], [deployment()], RELEASE)

        assert result.reached_available_level is True
        assert result.progressing == []

    def test_mixed_ready_workloads(self, evaluator, inspector):
        inspector.set(daemon_set(), ready_daemon_set())
        inspector.set(deployment(), ready_deployment())

        result = evaluator.evaluate([daemon_set()], [deployment()], RELEASE)

        assert result.reached_available_level is True
        assert result.message == ""


class TestDaemonSetPrecedence:
    def test_rollout_in_progress_wins_over_everything(self, evaluator, inspector):
        inspector.set(
            daemon_set(),
            ready_daemon_set(
                updated_number_scheduled=1,
                number_unavailable=2,
                number_available=0,
                generation=5,
                observed_generation=4,
            ),
        )

        result = evaluator.evaluate([daemon_set()], [], RELEASE)

        assert result.progressing == [
            'DaemonSet "openshift-sdn/sdn" update is rolling out (1 out of 3 updated)'
        ]
        assert result.reached_available_level is False

    def test_unavailable_nodes(self, evaluator, inspector):
        inspector.set(daemon_set(), ready_daemon_set(number_unavailable=2, number_available=1))

        result = evaluator.evaluate([daemon_set()], [], RELEASE)

        assert result.progressing == [
            'DaemonSet "openshift-sdn/sdn" is not available (awaiting 2 nodes)'
        ]
        assert result.reached_available_level is False

    def test_unscheduled(self, evaluator, inspector):
        inspector.set(
            daemon_set(),
            ready_daemon_set(
                desired_number_scheduled=0,
                updated_number_scheduled=0,
                number_available=0,
            ),
        )

        result = evaluator.evaluate([daemon_set()], [], RELEASE)

        assert result.progressing == [
            'DaemonSet "openshift-sdn/sdn" is not yet scheduled on any nodes'
        ]
        # Unscheduled alone does not hold the gate down.
        assert result.reached_available_level is True

    def test_generation_lag(self, evaluator, inspector):
        inspector.set(daemon_set(), ready_daemon_set(generation=3, observed_generation=2))

        result = evaluator.evaluate([daemon_set()], [], RELEASE)

        assert result.progressing == [
            'DaemonSet "openshift-sdn/sdn" update is being processed '
            "(generation 3, observed generation 2)"
        ]
        assert result.reached_available_level is False

    def test_version_mismatch_is_silent_but_blocks_gate(self, evaluator, inspector):
        inspector.set(daemon_set(), ready_daemon_set(version="4.1.0"))

        result = evaluator.evaluate([daemon_set()], [], RELEASE)

        assert result.progressing == []
        assert result.reached_available_level is False

    def test_missing_annotation_blocks_gate(self, evaluator, inspector):
        inspector.set(daemon_set(), ready_daemon_set(annotations={}))

        result = evaluator.evaluate([daemon_set()], [], RELEASE)

        assert result.reached_available_level is False


class TestDeploymentPrecedence:
    def test_unavailable_replicas(self, evaluator, inspector):
        inspector.set(deployment(), ready_deployment(unavailable_replicas=1, available_replicas=0))

        result = evaluator.evaluate([], [deployment()], RELEASE)

        assert result.progressing == [
            'Deployment "openshift-sdn/controller" is not available (awaiting 1 nodes)'
        ]

    def test_no_available_replicas(self, evaluator, inspector):
        inspector.set(deployment(), ready_deployment(available_replicas=0))

        result = evaluator.evaluate([], [deployment()], RELEASE)

        assert result.progressing == [
            'Deployment "openshift-sdn/controller" is not yet scheduled on any nodes'
        ]
        assert result.reached_available_level is False

    def test_generation_lag(self, evaluator, inspector):
        inspector.set(deployment(), ready_deployment(generation=4, observed_generation=3))

        result = evaluator.evaluate([], [deployment()], RELEASE)

        assert result.progressing == [
            'Deployment "openshift-sdn/controller" update is being processed '
            "(generation 4, observed generation 3)"
        ]
        assert result.reached_available_level is False

    def test_partial_update_blocks_gate_silently(self, evaluator, inspector):
        inspector.set(deployment(), ready_deployment(updated_replicas=1))

        result = evaluator.evaluate([], [deployment()], RELEASE)

        assert result.progressing == []
        assert result.reached_available_level is False


class TestFold:
    def test_every_workload_contributes_messages(self, evaluator, inspector):
        first, second = daemon_set("a"), daemon_set("b")
        inspector.set(first, ready_daemon_set(number_unavailable=1))
        inspector.set(second, ready_daemon_set(generation=9, observed_generation=8))
        inspector.set(deployment(), ready_deployment(available_replicas=0))

        result = evaluator.evaluate([first, second], [deployment()], RELEASE)

        assert result.reached_available_level is False
        assert len(result.progressing) == 3
        assert result.progressing[0].startswith('DaemonSet "openshift-sdn/a"')
        assert result.progressing[1].startswith('DaemonSet "openshift-sdn/b"')
        assert result.progressing[2].startswith('Deployment "openshift-sdn/controller"')

    def test_false_is_never_reset_by_later_ready_workload(self, evaluator, inspector):
        lagging, ready = daemon_set("lagging"), daemon_set("ready")
        inspector.set(lagging, ready_daemon_set(version="old"))
        inspector.set(ready, ready_daemon_set())

        result = evaluator.evaluate([lagging, ready], [], RELEASE)

        assert result.reached_available_level is False

    def test_message_joins_with_newline(self, evaluator, inspector):
        inspector.set(daemon_set("a"), ready_daemon_set(number_unavailable=1))
        inspector.set(daemon_set("b"), ready_daemon_set(number_unavailable=2))

        result = evaluator.evaluate([daemon_set("a"), daemon_set("b")], [], RELEASE)

        assert result.message == (
            'DaemonSet "openshift-sdn/a" is not available (awaiting 1 nodes)\n'
            'DaemonSet "openshift-sdn/b" is not available (awaiting 2 nodes)'
        )


class TestFetchFailures:
    def test_missing_daemon_set_adds_waiting_message(self, evaluator):
        result = evaluator.evaluate([daemon_set()], [], RELEASE)

        assert result.progressing == ['Waiting for DaemonSet "openshift-sdn/sdn" to be created']

    def test_missing_deployment_adds_waiting_message(self, evaluator):
        result = evaluator.evaluate([], [deployment()], RELEASE)

        assert result.progressing == [
            'Waiting for Deployment "openshift-sdn/controller" to be created'
        ]

    def test_sole_missing_workload_does_not_reach_available(self, evaluator):
        result = evaluator.evaluate([daemon_set()], [], RELEASE)

        assert result.reached_available_level is False

    def test_missing_workload_does_not_force_gate_false(self, evaluator, inspector):
        inspector.set(deployment(), ready_deployment())

        result = evaluator.evaluate([daemon_set("missing")], [deployment()], RELEASE)

        assert result.reached_available_level is True
        assert result.progressing == [
            'Waiting for DaemonSet "openshift-sdn/missing" to be created'
        ]

    def test_missing_workload_does_not_excuse_later_failure(self, evaluator, inspector):
        inspector.set(deployment(), ready_deployment(version="old"))

        result = evaluator.evaluate([daemon_set("missing")], [deployment()], RELEASE)

        assert result.reached_available_level is False

    def test_evaluation_continues_after_failure(self, evaluator, inspector):
        inspector.set(daemon_set("b"), ready_daemon_set(number_unavailable=1))

        result = evaluator.evaluate([daemon_set("a"), daemon_set("b")], [], RELEASE)

        assert len(result.progressing) == 2


class TestVersionAnnotation:
    def test_custom_annotation_key(self):
        inspector = InMemoryWorkloadInspector()
        inspector.set(
            daemon_set(),
            ready_daemon_set(annotations={"example.com/version": RELEASE}),
        )
        evaluator = WorkloadStatusEvaluator(inspector, version_annotation="example.com/version")

        assert evaluator.evaluate([daemon_set()], [], RELEASE).reached_available_level is True

    def test_default_annotation_key(self):
        assert DEFAULT_VERSION_ANNOTATION == "release.openshift.io/version"

    def test_empty_target_matches_missing_annotation(self, evaluator, inspector):
        inspector.set(daemon_set(), ready_daemon_set(annotations={}))

        assert evaluator.evaluate([daemon_set()], [], "").reached_available_level is True
