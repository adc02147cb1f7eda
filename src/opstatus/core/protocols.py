"""
Protocols for the collaborators of the status engine.

The engine never talks to an API server directly. It reads and writes the
status resource through an ``ObjectStore`` and reads workloads through a
``WorkloadInspector``; ``opstatus.store`` ships in-memory and Kubernetes
implementations.

Architecture:
    ::

        protocols.py
        ├── ObjectStore       : get / create / update_status of the status resource
        └── WorkloadInspector : get observed state of a DaemonSet or Deployment

Guardrails:
    ❌ DON'T: Raise client library exceptions from an implementation
    ✅ DO: Translate 404 to NotFoundError, everything else to TransientStoreError
           (or WorkloadFetchError for inspectors)

Tags:
    protocol, store, inspector, opstatus, contracts
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from opstatus.status.models import ClusterOperator, WorkloadRef, WorkloadState


@runtime_checkable
class ObjectStore(Protocol):
    """Backing store of the persisted status resource."""

    def get(self, name: str) -> ClusterOperator:
        """Fetch by name. Raises ``NotFoundError`` if it does not exist."""
        ...

    def create(self, resource: ClusterOperator) -> ClusterOperator:
        """Create the resource, status included."""
        ...

    def update_status(self, resource: ClusterOperator) -> ClusterOperator:
        """Write the status subresource of an existing resource."""
        ...


@runtime_checkable
class WorkloadInspector(Protocol):
    """Read-only view of the workloads whose rollout is tracked."""

    def get(self, ref: WorkloadRef) -> WorkloadState:
        """Return the observed state. Raises ``WorkloadFetchError`` on failure."""
        ...


__all__ = ["ObjectStore", "WorkloadInspector"]
