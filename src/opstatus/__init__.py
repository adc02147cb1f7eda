"""
opstatus - Status reconciliation for managed components.

Reconciles the observed state of a component's workloads into the
Available, Progressing, Degraded and Upgradeable conditions of its status
resource, and publishes them through a single writer.

Architecture::

    core/      errors, logging, settings, collaborator protocols
    status/    models, condition helpers, degraded tracker, evaluator,
               publisher, manager
    store/     in-memory and Kubernetes ObjectStore / WorkloadInspector
"""

__version__ = "0.1.0"

from opstatus.status import (  # noqa: F401
    Condition,
    ConditionStatus,
    ConditionType,
    DegradedLevelTracker,
    ObjectReference,
    Status,
    StatusLevel,
    StatusManager,
    StatusPublisher,
    WorkloadKind,
    WorkloadRef,
    WorkloadStatusEvaluator,
)
