"""Kubernetes workload resource display models."""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from kubedeck.integrations.kubernetes.models.base import (
    NONE_VALUE,
    ResourceItemBase,
    _common_fields,
    _safe_get,
)


class ContainerStatus(BaseModel):
    """Container status within a pod."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(default="", description="Container name")
    image: str | None = Field(default=None, description="Container image")
    ready: bool = Field(default=False, description="Whether container is ready")
    restart_count: int = Field(default=0, description="Number of restarts")
    state: str = Field(default="unknown", description="Current state")

    @classmethod
    def from_k8s_object(cls, obj: Any) -> ContainerStatus:
        """Create from a kubernetes V1ContainerStatus object."""
        state = "unknown"
        if obj_state := getattr(obj, "state", None):
            if getattr(obj_state, "running", None):
                state = "running"
            elif getattr(obj_state, "waiting", None):
                state = str(_safe_get(obj_state, "waiting", "reason", default="Waiting"))
            elif getattr(obj_state, "terminated", None):
                state = str(_safe_get(obj_state, "terminated", "reason", default="Terminated"))

        return cls(
            name=getattr(obj, "name", "") or "",
            image=getattr(obj, "image", None),
            ready=getattr(obj, "ready", False) or False,
            restart_count=getattr(obj, "restart_count", 0) or 0,
            state=state,
        )


def _pod_status(obj: Any) -> str:
    """Pick the most telling status for a pod.

    A waiting container's reason (CrashLoopBackOff, ImagePullBackOff, ...)
    wins over the phase, then any terminated container, then the phase.
    """
    phase = _safe_get(obj, "status", "phase", default="Unknown")
    for cs in _safe_get(obj, "status", "container_statuses") or []:
        state = getattr(cs, "state", None)
        if state is None:
            continue
        if getattr(state, "waiting", None) is not None:
            return str(_safe_get(state, "waiting", "reason", default="Waiting"))
        if getattr(state, "terminated", None) is not None:
            return "Terminated"
    return str(phase)


class PodItem(ResourceItemBase):
    """Pod display model."""

    _entity_name: ClassVar[str] = "pod"

    kind: Literal["Pod"] = "Pod"
    node_name: str | None = Field(default=None, description="Node the pod is running on")
    pod_ip: str | None = Field(default=None, description="Pod IP address")
    restarts: int = Field(default=0, description="Total container restarts")
    containers: list[ContainerStatus] = Field(
        default_factory=list, description="Container statuses"
    )
    container_names: list[str] = Field(
        default_factory=list, description="Container names from the pod spec"
    )

    @classmethod
    def from_k8s_object(cls, obj: Any) -> PodItem:
        """Create from a kubernetes V1Pod object."""
        container_statuses = _safe_get(obj, "status", "container_statuses") or []
        containers = [ContainerStatus.from_k8s_object(cs) for cs in container_statuses]
        spec_containers = _safe_get(obj, "spec", "containers") or []

        return cls(
            **_common_fields(obj),
            status=_pod_status(obj),
            node_name=_safe_get(obj, "spec", "node_name"),
            pod_ip=_safe_get(obj, "status", "pod_ip"),
            restarts=sum(c.restart_count for c in containers),
            containers=containers,
            container_names=[c.name for c in spec_containers if getattr(c, "name", None)],
        )

    @property
    def ready_count(self) -> int:
        return sum(1 for c in self.containers if c.ready)

    def columns(self) -> tuple[str, ...]:
        return (self.name, self.status, self.age, str(self.restarts), self.node_name or NONE_VALUE)

    def describe(self) -> list[str]:
        lines = [
            f"IP:           {self.pod_ip or NONE_VALUE}",
            f"Node:         {self.node_name or NONE_VALUE}",
            f"Restarts:     {self.restarts}",
        ]
        if self.containers:
            lines.append("")
            lines.append("Containers:")
            for c in self.containers:
                lines.append(f"  {c.name}:")
                lines.append(f"    Image:    {c.image or NONE_VALUE}")
                lines.append(f"    State:    {c.state}")
                lines.append(f"    Ready:    {str(c.ready).lower()}")
                lines.append(f"    Restarts: {c.restart_count}")
        return lines


class StatefulSetItem(ResourceItemBase):
    """StatefulSet display model."""

    _entity_name: ClassVar[str] = "statefulset"

    kind: Literal["StatefulSet"] = "StatefulSet"
    replicas: int = Field(default=0, description="Desired replicas")
    ready_replicas: int = Field(default=0, description="Ready replicas")
    updated_replicas: int = Field(default=0, description="Updated replicas")
    service_name: str | None = Field(default=None, description="Governing service name")

    @classmethod
    def from_k8s_object(cls, obj: Any) -> StatefulSetItem:
        """Create from a kubernetes V1StatefulSet object."""
        replicas = _safe_get(obj, "spec", "replicas", default=0) or 0
        ready = _safe_get(obj, "status", "ready_replicas", default=0) or 0
        if _safe_get(obj, "status") is None:
            status = "Unknown"
        else:
            status = "Active" if ready == replicas else "Updating"

        return cls(
            **_common_fields(obj),
            status=status,
            replicas=replicas,
            ready_replicas=ready,
            updated_replicas=_safe_get(obj, "status", "updated_replicas", default=0) or 0,
            service_name=_safe_get(obj, "spec", "service_name"),
        )

    @property
    def ready(self) -> str:
        return f"{self.ready_replicas}/{self.replicas}"

    def columns(self) -> tuple[str, ...]:
        return (self.name, self.ready, self.age)

    def describe(self) -> list[str]:
        return [
            f"Desired:      {self.replicas}",
            f"Ready:        {self.ready_replicas}",
            f"Updated:      {self.updated_replicas}",
            f"ServiceName:  {self.service_name or NONE_VALUE}",
        ]
