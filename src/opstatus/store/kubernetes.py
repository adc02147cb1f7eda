"""Kubernetes-backed ObjectStore and WorkloadInspector.

``KubernetesObjectStore`` persists the status as a cluster-scoped
``ClusterOperator`` (``config.openshift.io/v1``) through
``CustomObjectsApi``; ``KubernetesWorkloadInspector`` reads DaemonSets and
Deployments through ``AppsV1Api``.

``ApiException`` never leaves this module: a 404 becomes ``NotFoundError``
and every other failure ``TransientStoreError`` (or ``WorkloadFetchError``
for the inspector).

Example::

    from opstatus.store.kubernetes import load_client_config, KubernetesObjectStore

    load_client_config()
    store = KubernetesObjectStore()
    store.get("network")
"""

from __future__ import annotations

from typing import Any

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from pydantic import ValidationError

from opstatus.core.errors import NotFoundError, TransientStoreError, WorkloadFetchError
from opstatus.core.logging import get_logger
from opstatus.status.models import (
    ClusterOperator,
    DaemonSetState,
    DeploymentState,
    OperatorStatus,
    WorkloadKind,
    WorkloadRef,
    WorkloadState,
)

logger = get_logger(__name__)

CLUSTER_OPERATOR_GROUP = "config.openshift.io"
CLUSTER_OPERATOR_VERSION = "v1"
CLUSTER_OPERATOR_PLURAL = "clusteroperators"
CLUSTER_OPERATOR_KIND = "ClusterOperator"


def load_client_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        logger.debug("incluster_config_unavailable")
        config.load_kube_config()


# ── Conversion ───────────────────────────────────────────────────────────


def to_body(resource: ClusterOperator) -> dict[str, Any]:
    """Render a ``ClusterOperator`` as an API request body."""
    metadata: dict[str, Any] = {"name": resource.name}
    if resource.resource_version:
        metadata["resourceVersion"] = resource.resource_version
    return {
        "apiVersion": f"{CLUSTER_OPERATOR_GROUP}/{CLUSTER_OPERATOR_VERSION}",
        "kind": CLUSTER_OPERATOR_KIND,
        "metadata": metadata,
        "status": resource.status.model_dump(mode="json", by_alias=True, exclude_none=True),
    }


def from_body(body: dict[str, Any]) -> ClusterOperator:
    """Parse an API response body into a ``ClusterOperator``."""
    metadata = body.get("metadata") or {}
    return ClusterOperator(
        name=metadata["name"],
        resource_version=metadata.get("resourceVersion"),
        status=OperatorStatus.model_validate(body.get("status") or {}),
    )


# ── ObjectStore ──────────────────────────────────────────────────────────


class KubernetesObjectStore:
    """ClusterOperator store on top of ``CustomObjectsApi``."""

    def __init__(self, api: client.CustomObjectsApi | None = None):
        self.api = api or client.CustomObjectsApi()

    def get(self, name: str) -> ClusterOperator:
        try:
            body = self.api.get_cluster_custom_object(
                group=CLUSTER_OPERATOR_GROUP,
                version=CLUSTER_OPERATOR_VERSION,
                plural=CLUSTER_OPERATOR_PLURAL,
                name=name,
            )
        except ApiException as e:
            raise _store_error("get", name, e) from e
        return _parse("get", name, body)

    def create(self, resource: ClusterOperator) -> ClusterOperator:
        try:
            created = self.api.create_cluster_custom_object(
                group=CLUSTER_OPERATOR_GROUP,
                version=CLUSTER_OPERATOR_VERSION,
                plural=CLUSTER_OPERATOR_PLURAL,
                body=to_body(resource),
            )
        except ApiException as e:
            raise _store_error("create", resource.name, e) from e

        # The status subresource is ignored on create; write it separately.
        stored = _parse("create", resource.name, created)
        if stored.status == resource.status:
            return stored
        logger.debug("status_subresource_write", name=resource.name)
        return self.update_status(
            resource.model_copy(update={"resource_version": stored.resource_version})
        )

    def update_status(self, resource: ClusterOperator) -> ClusterOperator:
        try:
            body = self.api.replace_cluster_custom_object_status(
                group=CLUSTER_OPERATOR_GROUP,
                version=CLUSTER_OPERATOR_VERSION,
                plural=CLUSTER_OPERATOR_PLURAL,
                name=resource.name,
                body=to_body(resource),
            )
        except ApiException as e:
            raise _store_error("update_status", resource.name, e) from e
        return _parse("update_status", resource.name, body)


def _parse(operation: str, name: str, body: dict[str, Any]) -> ClusterOperator:
    try:
        return from_body(body)
    except (KeyError, ValidationError) as e:
        raise TransientStoreError(
            f"{operation} clusteroperator {name!r} returned an unreadable body: {e}", cause=e
        ).with_context(resource=name) from e


def _store_error(operation: str, name: str, exc: ApiException):
    if exc.status == 404:
        return NotFoundError(
            f"clusteroperator {name!r} not found", cause=exc
        ).with_context(resource=name, http_status=exc.status)
    return TransientStoreError(
        f"{operation} clusteroperator {name!r} failed: {exc.reason}", cause=exc
    ).with_context(resource=name, http_status=exc.status)


# ── WorkloadInspector ────────────────────────────────────────────────────


class KubernetesWorkloadInspector:
    """Reads DaemonSets and Deployments through ``AppsV1Api``."""

    def __init__(self, api: client.AppsV1Api | None = None):
        self.api = api or client.AppsV1Api()

    def get(self, ref: WorkloadRef) -> WorkloadState:
        try:
            if ref.kind is WorkloadKind.DAEMON_SET:
                obj = self.api.read_namespaced_daemon_set(name=ref.name, namespace=ref.namespace)
                return daemon_set_state(obj)
            obj = self.api.read_namespaced_deployment(name=ref.name, namespace=ref.namespace)
            return deployment_state(obj)
        except ApiException as e:
            raise WorkloadFetchError(
                f"reading {ref.kind.value} {ref} failed: {e.reason}", cause=e
            ).with_context(
                workload=str(ref),
                namespace=ref.namespace,
                kind=ref.kind.value,
                http_status=e.status,
            ) from e


def daemon_set_state(obj: client.V1DaemonSet) -> DaemonSetState:
    status = obj.status or client.V1DaemonSetStatus(
        current_number_scheduled=0,
        desired_number_scheduled=0,
        number_misscheduled=0,
        number_ready=0,
    )
    return DaemonSetState(
        generation=obj.metadata.generation or 0,
        observed_generation=status.observed_generation or 0,
        desired_number_scheduled=status.desired_number_scheduled or 0,
        updated_number_scheduled=status.updated_number_scheduled or 0,
        number_available=status.number_available or 0,
        number_unavailable=status.number_unavailable or 0,
        annotations=dict(obj.metadata.annotations or {}),
    )


def deployment_state(obj: client.V1Deployment) -> DeploymentState:
    status = obj.status or client.V1DeploymentStatus()
    return DeploymentState(
        generation=obj.metadata.generation or 0,
        observed_generation=status.observed_generation or 0,
        replicas=status.replicas or 0,
        updated_replicas=status.updated_replicas or 0,
        available_replicas=status.available_replicas or 0,
        unavailable_replicas=status.unavailable_replicas or 0,
        annotations=dict(obj.metadata.annotations or {}),
    )
