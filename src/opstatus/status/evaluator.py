"""Translate observed workload state into an availability verdict.

``WorkloadStatusEvaluator.evaluate`` walks every tracked DaemonSet and
Deployment, collects a human-readable message for each one that is still
rolling out, and folds an "all workloads at the target version and fully
available" gate across the whole set.

Per-workload checks use a fixed precedence and stop at the first match,
so each workload contributes at most one message. The availability gate
is computed independently of the message: a workload can be silent and
still hold the gate down (for example when its version annotation lags).

Example:
    >>> evaluator = WorkloadStatusEvaluator(inspector)
    >>> result = evaluator.evaluate(daemon_sets, deployments, "4.2.0")
    >>> result.reached_available_level, result.progressing
    (False, ['DaemonSet "ns/sdn" is not available (awaiting 2 nodes)'])
"""

from __future__ import annotations

from collections.abc import Sequence

from opstatus.core.errors import WorkloadFetchError
from opstatus.core.logging import get_logger
from opstatus.core.protocols import WorkloadInspector
from opstatus.core.settings import DEFAULT_VERSION_ANNOTATION
from opstatus.status.models import (
    DaemonSetState,
    DeploymentState,
    Evaluation,
    WorkloadKind,
    WorkloadRef,
)

logger = get_logger(__name__)


class WorkloadStatusEvaluator:
    """Inspects tracked workloads through a ``WorkloadInspector``."""

    def __init__(
        self,
        inspector: WorkloadInspector,
        version_annotation: str = DEFAULT_VERSION_ANNOTATION,
    ):
        self._inspector = inspector
        self._version_annotation = version_annotation

    def evaluate(
        self,
        daemon_sets: Sequence[WorkloadRef],
        deployments: Sequence[WorkloadRef],
        target_version: str,
    ) -> Evaluation:
        """Inspect every workload and return the combined verdict.

        The gate starts true when at least one workload is tracked and only
        ever moves to false. A workload that cannot be fetched adds a
        "Waiting for" message but does not touch the gate; the gate does
        require at least one workload to have been observed.
        """
        reached = (len(daemon_sets) + len(deployments)) > 0
        observed = 0
        progressing: list[str] = []

        for ref in daemon_sets:
            state = self._fetch(ref, WorkloadKind.DAEMON_SET, progressing)
            if state is None:
                continue
            observed += 1
            message = self._daemon_set_message(ref, state)
            if message:
                progressing.append(message)
            if not self._daemon_set_ready(state, target_version):
                reached = False

        for ref in deployments:
            state = self._fetch(ref, WorkloadKind.DEPLOYMENT, progressing)
            if state is None:
                continue
            observed += 1
            message = self._deployment_message(ref, state)
            if message:
                progressing.append(message)
            if not self._deployment_ready(state, target_version):
                reached = False

        return Evaluation(
            reached_available_level=reached and observed > 0,
            progressing=progressing,
        )

    # ------------------------------------------------------------------ #
    # Fetching
    # ------------------------------------------------------------------ #

    def _fetch(self, ref: WorkloadRef, kind: WorkloadKind, progressing: list[str]):
        try:
            return self._inspector.get(ref)
        except WorkloadFetchError as exc:
            logger.warning(
                "workload_fetch_failed",
                kind=kind.value,
                workload=str(ref),
                error=str(exc),
            )
            # The config controller sets Degraded if it fails to create it.
            progressing.append(f'Waiting for {kind.value} "{ref}" to be created')
            return None

    def _version_of(self, annotations: dict[str, str]) -> str:
        return annotations.get(self._version_annotation, "")

    # ------------------------------------------------------------------ #
    # DaemonSets
    # ------------------------------------------------------------------ #

    @staticmethod
    def _daemon_set_message(ref: WorkloadRef, ds: DaemonSetState) -> str | None:
        if ds.updated_number_scheduled < ds.desired_number_scheduled:
            return (
                f'DaemonSet "{ref}" update is rolling out '
                f"({ds.updated_number_scheduled} out of {ds.desired_number_scheduled} updated)"
            )
        if ds.number_unavailable > 0:
            return f'DaemonSet "{ref}" is not available (awaiting {ds.number_unavailable} nodes)'
        if ds.number_available == 0:
            # An empty DaemonSet is treated as not yet scheduled.
            return f'DaemonSet "{ref}" is not yet scheduled on any nodes'
        if ds.generation > ds.observed_generation:
            return (
                f'DaemonSet "{ref}" update is being processed '
                f"(generation {ds.generation}, observed generation {ds.observed_generation})"
            )
        return None

    def _daemon_set_ready(self, ds: DaemonSetState, target_version: str) -> bool:
        return (
            ds.generation <= ds.observed_generation
            and ds.updated_number_scheduled == ds.desired_number_scheduled
            and ds.number_unavailable == 0
            and self._version_of(ds.annotations) == target_version
        )

    # ------------------------------------------------------------------ #
    # Deployments
    # ------------------------------------------------------------------ #

    @staticmethod
    def _deployment_message(ref: WorkloadRef, dep: DeploymentState) -> str | None:
        if dep.unavailable_replicas > 0:
            return f'Deployment "{ref}" is not available (awaiting {dep.unavailable_replicas} nodes)'
        if dep.available_replicas == 0:
            return f'Deployment "{ref}" is not yet scheduled on any nodes'
        if dep.observed_generation < dep.generation:
            return (
                f'Deployment "{ref}" update is being processed '
                f"(generation {dep.generation}, observed generation {dep.observed_generation})"
            )
        return None

    def _deployment_ready(self, dep: DeploymentState, target_version: str) -> bool:
        return (
            dep.generation <= dep.observed_generation
            and dep.updated_replicas == dep.replicas
            and dep.available_replicas > 0
            and self._version_of(dep.annotations) == target_version
        )
