"""ObjectStore and WorkloadInspector implementations.

The Kubernetes adapters live in ``opstatus.store.kubernetes`` and are not
imported here, so the in-memory store works without a kubeconfig.
"""

from opstatus.store.memory import InMemoryObjectStore, InMemoryWorkloadInspector, StoreWrite

__all__ = ["InMemoryObjectStore", "InMemoryWorkloadInspector", "StoreWrite"]
