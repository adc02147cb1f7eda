"""Status reconciliation engine."""

from opstatus.status.degraded import DegradedLevelTracker
from opstatus.status.evaluator import WorkloadStatusEvaluator
from opstatus.status.manager import StatusManager
from opstatus.status.models import (
    ClusterOperator,
    Condition,
    ConditionStatus,
    ConditionType,
    DaemonSetState,
    DeploymentState,
    Evaluation,
    ObjectReference,
    OperandVersion,
    OperatorStatus,
    Status,
    StatusLevel,
    WorkloadKind,
    WorkloadRef,
)
from opstatus.status.publisher import PublisherStats, PublishOutcome, StatusPublisher

__all__ = [
    "DegradedLevelTracker",
    "WorkloadStatusEvaluator",
    "StatusManager",
    "StatusPublisher",
    "PublisherStats",
    "PublishOutcome",
    "ClusterOperator",
    "Condition",
    "ConditionStatus",
    "ConditionType",
    "DaemonSetState",
    "DeploymentState",
    "Evaluation",
    "ObjectReference",
    "OperandVersion",
    "OperatorStatus",
    "Status",
    "StatusLevel",
    "WorkloadKind",
    "WorkloadRef",
]
