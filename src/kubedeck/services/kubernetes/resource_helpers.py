"""Per-resource-type dispatch for the Kubernetes API.

Maps resource types to their corresponding API methods so list, watch,
read, delete, patch and replace can be issued uniformly for any browsable type,
and converts between API objects and editable YAML manifests.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, NamedTuple

from kubedeck.session.types import ResourceType
from kubedeck.utils.manifest import dump_manifest

if TYPE_CHECKING:
    from collections.abc import Callable

    from kubedeck.integrations.kubernetes.client import KubernetesClient


class ResourceApi(NamedTuple):
    """API group accessor and method names for one resource type."""

    api_attr: str
    list_namespaced: str
    list_all: str
    read: str
    delete: str
    patch: str
    replace: str


RESOURCE_API_MAP: dict[ResourceType, ResourceApi] = {
    ResourceType.PODS: ResourceApi(
        "core_v1",
        "list_namespaced_pod",
        "list_pod_for_all_namespaces",
        "read_namespaced_pod",
        "delete_namespaced_pod",
        "patch_namespaced_pod",
        "replace_namespaced_pod",
    ),
    ResourceType.PERSISTENT_VOLUME_CLAIMS: ResourceApi(
        "core_v1",
        "list_namespaced_persistent_volume_claim",
        "list_persistent_volume_claim_for_all_namespaces",
        "read_namespaced_persistent_volume_claim",
        "delete_namespaced_persistent_volume_claim",
        "patch_namespaced_persistent_volume_claim",
        "replace_namespaced_persistent_volume_claim",
    ),
    ResourceType.STATEFULSETS: ResourceApi(
        "apps_v1",
        "list_namespaced_stateful_set",
        "list_stateful_set_for_all_namespaces",
        "read_namespaced_stateful_set",
        "delete_namespaced_stateful_set",
        "patch_namespaced_stateful_set",
        "replace_namespaced_stateful_set",
    ),
}

RESTARTED_AT_ANNOTATION = "kubectl.kubernetes.io/restartedAt"

# Metadata fields managed by the server that should not be shown in the editor
STRIP_METADATA_KEYS = frozenset(
    {
        "managedFields",
        "resourceVersion",
        "uid",
        "creationTimestamp",
        "generation",
        "selfLink",
        "deletionTimestamp",
        "deletionGracePeriodSeconds",
    }
)


def _api(client: KubernetesClient, context: str, resource_type: ResourceType) -> Any:
    spec = RESOURCE_API_MAP[resource_type]
    return getattr(client, spec.api_attr)(context)


def list_function(
    client: KubernetesClient,
    context: str,
    resource_type: ResourceType,
    namespace: str | None,
) -> tuple[Callable[..., Any], dict[str, Any]]:
    """Return the list method and its scoping kwargs.

    The same pair drives both a plain list and a ``Watch.stream``.

    Args:
        client: Kubernetes API client.
        context: Context to issue the call against.
        resource_type: Type of resource to list.
        namespace: Namespace to scope to, or None for all namespaces.
    """
    spec = RESOURCE_API_MAP[resource_type]
    api = _api(client, context, resource_type)
    if namespace is None:
        return getattr(api, spec.list_all), {}
    return getattr(api, spec.list_namespaced), {"namespace": namespace}


def read_resource(
    client: KubernetesClient,
    context: str,
    resource_type: ResourceType,
    name: str,
    namespace: str,
) -> Any:
    """Read a single resource object."""
    spec = RESOURCE_API_MAP[resource_type]
    read_fn = getattr(_api(client, context, resource_type), spec.read)
    return read_fn(name=name, namespace=namespace, _request_timeout=client.timeout)


def delete_resource(
    client: KubernetesClient,
    context: str,
    resource_type: ResourceType,
    name: str,
    namespace: str,
) -> None:
    """Delete a Kubernetes resource.

    Raises:
        KeyError: If the resource type does not support deletion.
        ApiException: If the API call fails.
    """
    spec = RESOURCE_API_MAP[resource_type]
    delete_fn = getattr(_api(client, context, resource_type), spec.delete)
    delete_fn(name=name, namespace=namespace, _request_timeout=client.timeout)


def patch_resource(
    client: KubernetesClient,
    context: str,
    resource_type: ResourceType,
    name: str,
    namespace: str,
    patch_body: dict[str, Any],
) -> None:
    """Apply a strategic merge patch to a Kubernetes resource.

    Args:
        client: Kubernetes API client.
        context: Context to issue the call against.
        resource_type: Type of resource to patch.
        name: Resource name.
        namespace: Resource namespace.
        patch_body: camelCase dict to apply as a strategic merge patch.
    """
    spec = RESOURCE_API_MAP[resource_type]
    patch_fn = getattr(_api(client, context, resource_type), spec.patch)
    patch_fn(name=name, namespace=namespace, body=patch_body, _request_timeout=client.timeout)


def replace_resource(
    client: KubernetesClient,
    context: str,
    resource_type: ResourceType,
    name: str,
    namespace: str,
    body: dict[str, Any],
) -> None:
    """Replace a resource with ``body``, as ``kubectl replace`` does.

    Unlike a patch, fields missing from ``body`` are removed from the
    object. Without ``metadata.resourceVersion`` the update is
    unconditional.
    """
    spec = RESOURCE_API_MAP[resource_type]
    replace_fn = getattr(_api(client, context, resource_type), spec.replace)
    replace_fn(name=name, namespace=namespace, body=body, _request_timeout=client.timeout)


def restart_patch_body(now: datetime | None = None) -> dict[str, Any]:
    """Build the rollout-restart patch, as ``kubectl rollout restart`` does.

    Changing the pod template annotation makes the controller recreate
    every pod without altering the workload's spec otherwise.
    """
    stamp = (now or datetime.now(UTC)).strftime("%Y-%m-%dT%H:%M:%SZ")
    return {
        "spec": {
            "template": {
                "metadata": {
                    "annotations": {RESTARTED_AT_ANNOTATION: stamp},
                },
            },
        },
    }


def _strip_server_fields(obj_dict: dict[str, Any]) -> dict[str, Any]:
    """Remove server-managed fields from a resource dict.

    Strips the ``status`` block and server-managed metadata keys so the
    user sees only the editable portion of the resource.
    """
    obj_dict.pop("status", None)
    metadata = obj_dict.get("metadata", {})
    if isinstance(metadata, dict):
        for key in STRIP_METADATA_KEYS:
            metadata.pop(key, None)
    return obj_dict


def manifest_yaml(raw: Any) -> str:
    """Serialize an API object to editable YAML with server fields stripped."""
    from kubernetes.client import ApiClient

    # sanitize_for_serialization returns camelCase dict matching the K8s API
    obj_dict = ApiClient().sanitize_for_serialization(raw)
    return dump_manifest(_strip_server_fields(obj_dict))

