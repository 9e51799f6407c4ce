"""Display models for the Kubernetes resources the session browses.

Each variant is tagged by its ``kind`` field so a cached item can be
rebuilt from a plain dict with :data:`ResourceItem`.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field, TypeAdapter

from kubedeck.integrations.kubernetes.models.base import (
    NONE_VALUE,
    ResourceItemBase,
    format_age,
)
from kubedeck.integrations.kubernetes.models.storage import PersistentVolumeClaimItem
from kubedeck.integrations.kubernetes.models.workloads import (
    ContainerStatus,
    PodItem,
    StatefulSetItem,
)

ResourceItem = Annotated[
    PodItem | PersistentVolumeClaimItem | StatefulSetItem,
    Field(discriminator="kind"),
]

_ITEM_ADAPTER: TypeAdapter[Any] = TypeAdapter(ResourceItem)

_FACTORIES = {
    "Pod": PodItem.from_k8s_object,
    "PersistentVolumeClaim": PersistentVolumeClaimItem.from_k8s_object,
    "StatefulSet": StatefulSetItem.from_k8s_object,
}


def item_from_k8s_object(kind: str, obj: Any) -> ResourceItemBase:
    """Build the display item for a kubernetes SDK object of ``kind``.

    Raises:
        ValueError: If ``kind`` is not a supported resource kind.
    """
    factory = _FACTORIES.get(kind)
    if factory is None:
        raise ValueError(f"Unsupported resource kind: {kind}")
    return factory(obj)


def item_from_dict(data: dict[str, Any]) -> ResourceItemBase:
    """Validate a plain dict into the variant named by its ``kind`` key."""
    result: ResourceItemBase = _ITEM_ADAPTER.validate_python(data)
    return result


__all__ = [
    "NONE_VALUE",
    "ContainerStatus",
    "PersistentVolumeClaimItem",
    "PodItem",
    "ResourceItem",
    "ResourceItemBase",
    "StatefulSetItem",
    "format_age",
    "item_from_dict",
    "item_from_k8s_object",
]
