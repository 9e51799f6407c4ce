"""Kubernetes storage resource display models."""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import Field

from kubedeck.integrations.kubernetes.models.base import (
    NONE_VALUE,
    ResourceItemBase,
    _common_fields,
    _safe_get,
)


class PersistentVolumeClaimItem(ResourceItemBase):
    """PersistentVolumeClaim display model."""

    _entity_name: ClassVar[str] = "persistentvolumeclaim"

    kind: Literal["PersistentVolumeClaim"] = "PersistentVolumeClaim"
    volume: str | None = Field(default=None, description="Bound volume name")
    capacity: str | None = Field(default=None, description="Allocated capacity")
    access_modes: list[str] = Field(default_factory=list, description="Access modes")
    storage_class: str | None = Field(default=None, description="Storage class name")

    @classmethod
    def from_k8s_object(cls, obj: Any) -> PersistentVolumeClaimItem:
        """Create from a kubernetes V1PersistentVolumeClaim object."""
        # Capacity from status (actual allocation)
        status_capacity = _safe_get(obj, "status", "capacity") or {}
        capacity = status_capacity.get("storage") if isinstance(status_capacity, dict) else None

        return cls(
            **_common_fields(obj),
            status=_safe_get(obj, "status", "phase", default="Unknown"),
            volume=_safe_get(obj, "spec", "volume_name"),
            capacity=str(capacity) if capacity else None,
            access_modes=list(_safe_get(obj, "spec", "access_modes") or []),
            storage_class=_safe_get(obj, "spec", "storage_class_name"),
        )

    def columns(self) -> tuple[str, ...]:
        return (
            self.name,
            self.status,
            self.volume or NONE_VALUE,
            self.capacity or NONE_VALUE,
            self.age,
        )

    def describe(self) -> list[str]:
        return [
            f"Capacity:     {self.capacity or NONE_VALUE}",
            f"Volume:       {self.volume or NONE_VALUE}",
            f"StorageClass: {self.storage_class or NONE_VALUE}",
            f"AccessModes:  {', '.join(self.access_modes) or NONE_VALUE}",
        ]
