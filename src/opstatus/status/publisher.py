"""Single-writer publisher for the persisted status resource.

The StatusPublisher owns all writes to the status resource. Producers hand
it ``Status`` values through a small bounded FIFO queue; one daemon thread
drains the queue and runs a full read-modify-write cycle per value:

    1. fetch the resource by name (NotFound routes to the create path)
    2. snapshot its status
    3. replace related objects with the current list
    4. publish, clear or keep versions depending on the availability gate
    5. merge the supplied conditions by type
    6. synthesize Available=False/Startup when Progressing=True has no Available
    7. force Upgradeable=True
    8. skip the write when the result equals the snapshot
    9. create or update the status subresource and log the outcome

Write failures are logged and dropped. There is no retry: the next
enqueued status is evaluated against fresh in-memory state and converges.

Usage::

    publisher = StatusPublisher(store, "network", release_version="4.2.0")
    publisher.start()
    publisher.submit(Status(conditions=[...]))
    publisher.flush()
    publisher.stop()
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from opstatus.core.errors import NotFoundError, StoreError
from opstatus.core.logging import LogContext, get_logger
from opstatus.core.protocols import ObjectStore
from opstatus.status.conditions import (
    find_status_condition,
    is_condition_true,
    render_conditions,
    set_status_condition,
    status_equal,
    utcnow,
)
from opstatus.status.models import (
    ClusterOperator,
    Condition,
    ConditionStatus,
    ConditionType,
    ObjectReference,
    OperandVersion,
    Status,
)

logger = get_logger(__name__)

OPERATOR_VERSION_NAME = "operator"
DEFAULT_QUEUE_SIZE = 5

_STOP = object()


class PublishOutcome(str, Enum):
    """What one publish cycle did."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass
class PublisherStats:
    """Aggregate statistics for a publisher."""

    processed: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    last_published_at: datetime | None = None

    def record(self, outcome: PublishOutcome) -> None:
        self.processed += 1
        if outcome is PublishOutcome.CREATED:
            self.created += 1
        elif outcome is PublishOutcome.UPDATED:
            self.updated += 1
        elif outcome is PublishOutcome.UNCHANGED:
            self.unchanged += 1
        else:
            self.failed += 1
        if outcome in (PublishOutcome.CREATED, PublishOutcome.UPDATED):
            self.last_published_at = utcnow()

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "failed": self.failed,
            "last_published_at": (
                self.last_published_at.isoformat() if self.last_published_at else None
            ),
        }


class StatusPublisher:
    """Drains ``Status`` values and persists them one at a time.

    Thread-safety:
        ``submit`` may be called from any thread and blocks while the queue
        is full. ``publish`` holds a lock for the whole read-modify-write
        cycle, so at most one cycle runs against the store at a time even
        when it is called directly.
    """

    def __init__(
        self,
        store: ObjectStore,
        name: str,
        release_version: str = "",
        related_objects: Callable[[], Sequence[ObjectReference]] | None = None,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        startup_message: str = "The component is starting up",
    ):
        """
        Args:
            store: Backing store of the status resource.
            name: Name of the status resource.
            release_version: Version published once the availability gate is reached.
            related_objects: Returns the related objects to attach on each cycle.
            queue_size: Capacity of the publish queue.
            startup_message: Message of the synthesized Available=False condition.
        """
        if queue_size < 1:
            raise ValueError("queue_size must be at least 1")

        self._store = store
        self._name = name
        self._release_version = release_version
        self._related_objects = related_objects or (lambda: [])
        self._startup_message = startup_message

        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._publish_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._stats = PublisherStats()

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def start(self) -> threading.Thread:
        """Start the worker in a daemon thread. Returns the thread."""
        if self.running:
            return self._thread
        self._thread = threading.Thread(
            target=self._run,
            name=f"status-publisher-{self._name}",
            daemon=True,
        )
        self._thread.start()
        logger.debug("publisher_started", operator=self._name)
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        """Drain everything already queued, then stop the worker."""
        if not self.running:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        logger.debug("publisher_stopped", operator=self._name, **self._stats.to_dict())

    def submit(self, status: Status) -> None:
        """Enqueue a status. Blocks while the queue is full."""
        self._queue.put(status)

    def flush(self) -> None:
        """Block until every status enqueued so far has been processed."""
        self._queue.join()

    def get_stats(self) -> PublisherStats:
        return self._stats

    # ------------------------------------------------------------------ #
    # Main loop
    # ------------------------------------------------------------------ #

    def _run(self) -> None:
        with LogContext(operator=self._name):
            while True:
                item = self._queue.get()
                try:
                    if item is _STOP:
                        return
                    self.publish(item)
                except Exception:
                    logger.exception("publish_cycle_crashed")
                finally:
                    self._queue.task_done()

    # ------------------------------------------------------------------ #
    # Publish cycle
    # ------------------------------------------------------------------ #

    def publish(self, status: Status) -> PublishOutcome:
        """Run one fetch, merge, diff, write cycle for ``status``."""
        with self._publish_lock, LogContext(operator=self._name):
            outcome = self._publish(status)
            self._stats.record(outcome)
        return outcome

    def _publish(self, status: Status) -> PublishOutcome:
        try:
            resource = self._store.get(self._name)
            exists = True
        except NotFoundError:
            resource = ClusterOperator(name=self._name)
            exists = False
        except StoreError as exc:
            logger.error("status_fetch_failed", error=exc.to_dict())
            return PublishOutcome.FAILED

        old_status = resource.status.model_copy(deep=True)
        new_status = resource.status.model_copy(deep=True)

        new_status.related_objects = list(self._related_objects())

        if status.reached_available_level is True:
            if self._release_version:
                new_status.versions = [
                    OperandVersion(name=OPERATOR_VERSION_NAME, version=self._release_version)
                ]
            else:
                new_status.versions = []
        elif status.reached_available_level is False:
            new_status.versions = []

        for condition in status.conditions:
            set_status_condition(new_status.conditions, condition)

        if find_status_condition(
            new_status.conditions, ConditionType.AVAILABLE
        ) is None and is_condition_true(new_status.conditions, ConditionType.PROGRESSING):
            set_status_condition(
                new_status.conditions,
                Condition(
                    type=ConditionType.AVAILABLE,
                    status=ConditionStatus.FALSE,
                    reason="Startup",
                    message=self._startup_message,
                ),
            )

        set_status_condition(
            new_status.conditions,
            Condition(type=ConditionType.UPGRADEABLE, status=ConditionStatus.TRUE),
        )

        if status_equal(old_status, new_status):
            return PublishOutcome.UNCHANGED

        resource.status = new_status
        rendered = render_conditions(new_status.conditions)

        if not exists:
            try:
                self._store.create(resource)
            except StoreError as exc:
                logger.error("status_create_failed", error=exc.to_dict())
                return PublishOutcome.FAILED
            logger.info("status_created", conditions=rendered)
            return PublishOutcome.CREATED

        try:
            self._store.update_status(resource)
        except StoreError as exc:
            logger.error("status_update_failed", error=exc.to_dict())
            return PublishOutcome.FAILED
        logger.info("status_updated", conditions=rendered)
        return PublishOutcome.UPDATED
