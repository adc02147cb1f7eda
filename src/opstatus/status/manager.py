"""StatusManager: the entry point reconcilers use to report component health.

One manager exists per managed component. It owns the degraded-level
tracker, the workload evaluator and the publisher, and turns level-scoped
set/clear calls into ``Status`` values on the publish queue.

Usage::

    manager = StatusManager.from_settings(settings, store, inspector)
    with manager:
        manager.set_daemon_sets([WorkloadRef("openshift-sdn", "sdn", WorkloadKind.DAEMON_SET)])
        manager.set_degraded(StatusLevel.OPERATOR_CONFIG, "InvalidConfig", "bad MTU")
        manager.set_not_degraded(StatusLevel.OPERATOR_CONFIG)
        manager.set_from_pods()
"""

from __future__ import annotations

from collections.abc import Iterable

from opstatus.core.logging import configure_from_settings, get_logger
from opstatus.core.protocols import ObjectStore, WorkloadInspector
from opstatus.core.settings import DEFAULT_VERSION_ANNOTATION, StatusSettings, load_settings
from opstatus.status.degraded import DegradedLevelTracker
from opstatus.status.evaluator import WorkloadStatusEvaluator
from opstatus.status.models import (
    Condition,
    ConditionStatus,
    ConditionType,
    ObjectReference,
    Status,
    StatusLevel,
    WorkloadRef,
)
from opstatus.status.publisher import DEFAULT_QUEUE_SIZE, StatusPublisher

logger = get_logger(__name__)


class StatusManager:
    """Coordinates changes to the status of one managed component."""

    def __init__(
        self,
        store: ObjectStore,
        inspector: WorkloadInspector,
        name: str,
        release_version: str = "",
        version_annotation: str = DEFAULT_VERSION_ANNOTATION,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        startup_message: str = "The component is starting up",
    ):
        self._name = name
        self._release_version = release_version

        self._daemon_sets: list[WorkloadRef] = []
        self._deployments: list[WorkloadRef] = []
        self._related_objects: list[ObjectReference] = []

        self.degraded = DegradedLevelTracker()
        self.evaluator = WorkloadStatusEvaluator(inspector, version_annotation)
        self.publisher = StatusPublisher(
            store,
            name,
            release_version=release_version,
            related_objects=lambda: self._related_objects,
            queue_size=queue_size,
            startup_message=startup_message,
        )

    @classmethod
    def from_settings(
        cls,
        settings: StatusSettings | None,
        store: ObjectStore,
        inspector: WorkloadInspector,
    ) -> StatusManager:
        """Build a manager from ``settings`` and apply its logging configuration.

        With ``settings=None`` they are loaded from the environment; invalid
        values raise ``ConfigError``.
        """
        if settings is None:
            settings = load_settings()
        configure_from_settings(settings)
        return cls(
            store,
            inspector,
            name=settings.operator_name,
            release_version=settings.release_version,
            version_annotation=settings.version_annotation,
            queue_size=settings.queue_size,
            startup_message=settings.startup_message,
        )

    @property
    def name(self) -> str:
        return self._name

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def start(self) -> StatusManager:
        self.publisher.start()
        return self

    def stop(self, timeout: float | None = None) -> None:
        self.publisher.stop(timeout)

    def flush(self) -> None:
        self.publisher.flush()

    def __enter__(self) -> StatusManager:
        return self.start()

    def __exit__(self, *args) -> None:
        self.stop()

    # ------------------------------------------------------------------ #
    # Degraded levels
    # ------------------------------------------------------------------ #

    def set_degraded(self, level: StatusLevel, reason: str, message: str) -> None:
        """Mark the component Degraded at ``level``.

        The published Degraded condition only changes if no higher priority
        level is already degraded.
        """
        logger.debug("degraded_set", operator=self._name, level=StatusLevel(level).name, reason=reason)
        self.degraded.set_degraded(level, reason, message)
        self._sync_degraded()

    def set_not_degraded(self, level: StatusLevel) -> None:
        """Clear ``level``; the next lower-priority failure (if any) is surfaced."""
        self.degraded.clear(level)
        self._sync_degraded()

    def _sync_degraded(self) -> None:
        # Degraded syncs carry no version intent.
        self.publisher.submit(
            Status(conditions=[self.degraded.resolve()], reached_available_level=None)
        )

    # ------------------------------------------------------------------ #
    # Tracked objects
    # ------------------------------------------------------------------ #

    def set_daemon_sets(self, daemon_sets: Iterable[WorkloadRef]) -> None:
        self._daemon_sets = list(daemon_sets)

    def set_deployments(self, deployments: Iterable[WorkloadRef]) -> None:
        self._deployments = list(deployments)

    def set_related_objects(self, related_objects: Iterable[ObjectReference]) -> None:
        self._related_objects = list(related_objects)

    # ------------------------------------------------------------------ #
    # Pods
    # ------------------------------------------------------------------ #

    def set_from_pods(self) -> Status:
        """Set Progressing/Available from the tracked DaemonSets and Deployments.

        Workload fetch errors count as progressing, never as degraded, so the
        POD_DEPLOYMENT level is cleared first. Returns the enqueued status.
        """
        self.set_not_degraded(StatusLevel.POD_DEPLOYMENT)

        result = self.evaluator.evaluate(
            self._daemon_sets, self._deployments, self._release_version
        )

        if result.progressing:
            status = Status(
                conditions=[
                    Condition(
                        type=ConditionType.PROGRESSING,
                        status=ConditionStatus.TRUE,
                        reason="Deploying",
                        message=result.message,
                    ),
                ],
                reached_available_level=result.reached_available_level,
            )
        else:
            status = Status(
                conditions=[
                    Condition(type=ConditionType.PROGRESSING, status=ConditionStatus.FALSE),
                    Condition(type=ConditionType.AVAILABLE, status=ConditionStatus.TRUE),
                ],
                reached_available_level=result.reached_available_level,
            )

        self.publisher.submit(status)
        return status
