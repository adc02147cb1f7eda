"""In-memory ObjectStore and WorkloadInspector.

Useful for local runs and tests. Both keep deep copies so callers can never
mutate stored state by accident, and both are safe to use from several
threads.

Example:
    >>> store = InMemoryObjectStore()
    >>> _ = store.create(ClusterOperator(name="network"))
    >>> store.get("network").resource_version
    '1'
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from opstatus.core.errors import (
    NotFoundError,
    StoreError,
    TransientStoreError,
    WorkloadFetchError,
)
from opstatus.status.models import ClusterOperator, WorkloadRef, WorkloadState


@dataclass(frozen=True)
class StoreWrite:
    """One successful write recorded by ``InMemoryObjectStore``."""

    operation: str  # "create" | "update_status"
    resource: ClusterOperator


class InMemoryObjectStore:
    """Dict-backed store of status resources."""

    def __init__(self) -> None:
        self._objects: dict[str, ClusterOperator] = {}
        self._failures: dict[str, list[StoreError]] = {}
        self._writes: list[StoreWrite] = []
        self._version = 0
        self._lock = threading.Lock()

    # ── Fault injection ──────────────────────────────────────────

    def fail_next(self, operation: str, error: StoreError | None = None) -> None:
        """Make the next call of ``operation`` ("get", "create", "update_status") fail."""
        with self._lock:
            self._failures.setdefault(operation, []).append(
                error or TransientStoreError(f"injected {operation} failure")
            )

    def _maybe_fail(self, operation: str) -> None:
        pending = self._failures.get(operation)
        if pending:
            raise pending.pop(0)

    # ── ObjectStore ──────────────────────────────────────────────

    def get(self, name: str) -> ClusterOperator:
        with self._lock:
            self._maybe_fail("get")
            if name not in self._objects:
                raise NotFoundError(f"clusteroperator {name!r} not found").with_context(resource=name)
            return self._objects[name].model_copy(deep=True)

    def create(self, resource: ClusterOperator) -> ClusterOperator:
        with self._lock:
            self._maybe_fail("create")
            if resource.name in self._objects:
                raise TransientStoreError(
                    f"clusteroperator {resource.name!r} already exists"
                ).with_context(resource=resource.name)
            return self._store("create", resource)

    def update_status(self, resource: ClusterOperator) -> ClusterOperator:
        with self._lock:
            self._maybe_fail("update_status")
            current = self._objects.get(resource.name)
            if current is None:
                raise NotFoundError(
                    f"clusteroperator {resource.name!r} not found"
                ).with_context(resource=resource.name)
            if (
                resource.resource_version is not None
                and resource.resource_version != current.resource_version
            ):
                raise TransientStoreError(
                    f"conflict updating clusteroperator {resource.name!r}"
                ).with_context(resource=resource.name)
            return self._store("update_status", resource)

    def _store(self, operation: str, resource: ClusterOperator) -> ClusterOperator:
        self._version += 1
        stored = resource.model_copy(deep=True, update={"resource_version": str(self._version)})
        self._objects[resource.name] = stored
        self._writes.append(StoreWrite(operation, stored.model_copy(deep=True)))
        return stored.model_copy(deep=True)

    # ── Inspection ───────────────────────────────────────────────

    @property
    def writes(self) -> list[StoreWrite]:
        with self._lock:
            return list(self._writes)

    def put(self, resource: ClusterOperator) -> ClusterOperator:
        """Store ``resource`` as an external writer would, bypassing fault injection."""
        with self._lock:
            self._version += 1
            stored = resource.model_copy(deep=True, update={"resource_version": str(self._version)})
            self._objects[resource.name] = stored
            return stored.model_copy(deep=True)


class InMemoryWorkloadInspector:
    """Dict-backed workload states; unknown workloads fail to fetch."""

    def __init__(self, states: dict[WorkloadRef, WorkloadState] | None = None) -> None:
        self._states: dict[WorkloadRef, WorkloadState] = dict(states or {})
        self._lock = threading.Lock()

    def set(self, ref: WorkloadRef, state: WorkloadState) -> None:
        with self._lock:
            self._states[ref] = state

    def remove(self, ref: WorkloadRef) -> None:
        with self._lock:
            self._states.pop(ref, None)

    def get(self, ref: WorkloadRef) -> WorkloadState:
        with self._lock:
            try:
                return self._states[ref]
            except KeyError:
                raise WorkloadFetchError(
                    f"{ref.kind.value} {ref} not found"
                ).with_context(workload=str(ref), namespace=ref.namespace, kind=ref.kind.value) from None
