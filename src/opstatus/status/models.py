"""
Data model for the status engine.

Two families of types live here:

- **Persisted shapes** (pydantic): ``Condition``, ``OperandVersion``,
  ``ObjectReference``, ``OperatorStatus`` and ``ClusterOperator``. They
  mirror the schema of the external status resource and serialize with
  camelCase aliases so a store adapter can hand them to the API server as-is.
- **Transient values** (dataclasses): ``WorkloadRef``, the workload state
  snapshots returned by an inspector, ``Status`` (one unit of publish work)
  and ``Evaluation`` (the evaluator's verdict).

STDLIB DATACLASSES FOR TRANSIENT VALUES, PYDANTIC FOR PERSISTED SHAPES.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConditionType(str, Enum):
    """Standard condition flags published on the status resource."""

    AVAILABLE = "Available"
    PROGRESSING = "Progressing"
    DEGRADED = "Degraded"
    UPGRADEABLE = "Upgradeable"


class ConditionStatus(str, Enum):
    """Tri-state value of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class StatusLevel(IntEnum):
    """
    Priority tier of a Degraded cause.

    Lower value = higher priority: a cluster configuration problem hides
    an operator configuration problem, which hides a pod rollout problem.
    """

    CLUSTER_CONFIG = 0
    OPERATOR_CONFIG = 1
    POD_DEPLOYMENT = 2


class WorkloadKind(str, Enum):
    """Kinds of workload the evaluator knows how to inspect."""

    DAEMON_SET = "DaemonSet"
    DEPLOYMENT = "Deployment"


# =============================================================================
# PERSISTED SHAPES
# =============================================================================


class _ApiModel(BaseModel):
    # Fields this package does not model are kept so writes round-trip them.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Condition(_ApiModel):
    """A named health signal, unique per ``type`` within a condition set.

    Types written by this package are ``ConditionType`` members; types set by
    other writers are kept as plain strings.
    """

    type: ConditionType | str = Field(union_mode="left_to_right")
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    last_transition_time: datetime | None = None


class OperandVersion(_ApiModel):
    """A version entry published once the component reached its target."""

    name: str
    version: str


class ObjectReference(_ApiModel):
    """Auxiliary resource reference attached for diagnostics."""

    group: str = ""
    resource: str
    namespace: str = ""
    name: str


class OperatorStatus(_ApiModel):
    """The ``status`` block of the persisted resource."""

    conditions: list[Condition] = Field(default_factory=list)
    versions: list[OperandVersion] = Field(default_factory=list)
    related_objects: list[ObjectReference] = Field(default_factory=list)


class ClusterOperator(_ApiModel):
    """The persisted status resource, addressed by name only."""

    name: str
    resource_version: str | None = None
    status: OperatorStatus = Field(default_factory=OperatorStatus)


# =============================================================================
# TRANSIENT VALUES
# =============================================================================


@dataclass(frozen=True)
class WorkloadRef:
    """Identity of a tracked workload."""

    namespace: str
    name: str
    kind: WorkloadKind

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class DaemonSetState:
    """Observed state of a daemon-like workload."""

    generation: int = 0
    observed_generation: int = 0
    desired_number_scheduled: int = 0
    updated_number_scheduled: int = 0
    number_available: int = 0
    number_unavailable: int = 0
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DeploymentState:
    """Observed state of a deployment-like workload."""

    generation: int = 0
    observed_generation: int = 0
    replicas: int = 0
    updated_replicas: int = 0
    available_replicas: int = 0
    unavailable_replicas: int = 0
    annotations: dict[str, str] = field(default_factory=dict)


WorkloadState = Union[DaemonSetState, DeploymentState]


@dataclass
class Status:
    """
    One unit of publish work.

    ``reached_available_level`` drives the versions list: ``True`` publishes
    the release version, ``False`` clears versions, ``None`` leaves them as
    they are.
    """

    conditions: list[Condition] = field(default_factory=list)
    # Degraded-only publishes pass None: a Degraded change says nothing about
    # rollout progress, so it must not clear versions published earlier.
    reached_available_level: bool | None = False


@dataclass
class Evaluation:
    """Verdict of one pass over the tracked workloads."""

    reached_available_level: bool = False
    progressing: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return "\n".join(self.progressing)


__all__ = [
    "ConditionType",
    "ConditionStatus",
    "StatusLevel",
    "WorkloadKind",
    "Condition",
    "OperandVersion",
    "ObjectReference",
    "OperatorStatus",
    "ClusterOperator",
    "WorkloadRef",
    "DaemonSetState",
    "DeploymentState",
    "WorkloadState",
    "Status",
    "Evaluation",
]
