"""Enumerations and small value types shared across the session engine.

Extracted into their own module to avoid circular imports between the
controller, the managers it drives and the snapshot projection.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import NamedTuple

ALL_NAMESPACES = "all"
"""Pseudo-namespace meaning an unscoped (all namespaces) subscription."""

OFFLINE_CONTEXT = "(offline)"
"""Placeholder context name used when no kubeconfig could be loaded."""


class ResourceType(Enum):
    """Kubernetes resource types the session can browse."""

    PODS = "Pods"
    PERSISTENT_VOLUME_CLAIMS = "PersistentVolumeClaims"
    STATEFULSETS = "StatefulSets"

    @property
    def kind(self) -> str:
        """API kind name."""
        return _KINDS[self]

    @property
    def label(self) -> str:
        """Short label used in selectors and headers."""
        return _LABELS[self]

    def next(self) -> ResourceType:
        order = RESOURCE_TYPE_ORDER
        return order[(order.index(self) + 1) % len(order)]

    def prev(self) -> ResourceType:
        order = RESOURCE_TYPE_ORDER
        return order[(order.index(self) - 1) % len(order)]

    @classmethod
    def from_kind(cls, kind: str) -> ResourceType:
        """Look up a resource type by API kind or by label, case-insensitively."""
        wanted = kind.lower()
        for rt in cls:
            if wanted in (rt.kind.lower(), rt.label.lower(), rt.value.lower()):
                return rt
        raise ValueError(f"Unsupported resource type: {kind}")


_KINDS = {
    ResourceType.PODS: "Pod",
    ResourceType.PERSISTENT_VOLUME_CLAIMS: "PersistentVolumeClaim",
    ResourceType.STATEFULSETS: "StatefulSet",
}

_LABELS = {
    ResourceType.PODS: "Pods",
    ResourceType.PERSISTENT_VOLUME_CLAIMS: "PVCs",
    ResourceType.STATEFULSETS: "StatefulSets",
}

# Ordered list for cycling through types
RESOURCE_TYPE_ORDER = list(ResourceType)

# Column headers per resource type
COLUMN_HEADERS: dict[ResourceType, tuple[str, ...]] = {
    ResourceType.PODS: ("NAME", "STATUS", "AGE", "RESTARTS", "NODE"),
    ResourceType.PERSISTENT_VOLUME_CLAIMS: ("NAME", "STATUS", "VOLUME", "CAPACITY", "AGE"),
    ResourceType.STATEFULSETS: ("NAME", "READY", "AGE"),
}

DELETABLE_TYPES = frozenset(ResourceType)

# Rollout restart only has meaning for controllers that own a pod template
RESTARTABLE_TYPES = frozenset({ResourceType.STATEFULSETS})

# PVC specs are mostly immutable once bound, so the editor is not offered
EDITABLE_TYPES = frozenset({ResourceType.PODS, ResourceType.STATEFULSETS})

LOGGABLE_TYPES = frozenset({ResourceType.PODS})


class ViewMode(StrEnum):
    """Top-level view; exactly one is active."""

    BROWSE = "browse"
    DETAIL = "detail"
    LOGS = "logs"
    HELP = "help"
    SEARCH = "search"


class Focus(StrEnum):
    """Focused widget within the Browse view."""

    CONTEXT_SELECTOR = "context"
    NAMESPACE_SELECTOR = "namespace"
    TYPE_SELECTOR = "type"
    LIST = "list"

    def next(self) -> Focus:
        order = list(Focus)
        return order[(order.index(self) + 1) % len(order)]

    def prev(self) -> Focus:
        order = list(Focus)
        return order[(order.index(self) - 1) % len(order)]

    @property
    def is_selector(self) -> bool:
        return self is not Focus.LIST


class ConfirmAction(StrEnum):
    """Destructive actions that require confirmation."""

    DELETE = "delete"
    RESTART = "restart"


class ActionKind(StrEnum):
    """Kinds of mutating requests handled by the action pipeline."""

    DELETE = "delete"
    RESTART = "restart"
    EDIT_APPLY = "edit_apply"


class WatchEventType(StrEnum):
    """Watch stream event types."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


class WatchState(StrEnum):
    """Lifecycle states of a watch session."""

    CONNECTING = "connecting"
    ACTIVE = "active"
    RECONNECTING = "reconnecting"
    FAILED = "failed"
    STOPPED = "stopped"


class BannerLevel(StrEnum):
    """Severity of the status banner."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ResourceKey(NamedTuple):
    """Identity of an item within a (context, type) scope."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name


@dataclass(frozen=True)
class ResourceRef:
    """Fully qualified reference to a single resource."""

    resource_type: ResourceType
    namespace: str
    name: str

    @property
    def key(self) -> ResourceKey:
        return ResourceKey(self.namespace, self.name)

    def __str__(self) -> str:
        return f"{self.resource_type.kind}/{self.key}"


@dataclass(frozen=True)
class WatchTarget:
    """What a watch subscription is pointed at."""

    context: str
    namespace: str
    resource_type: ResourceType

    def __str__(self) -> str:
        return f"{self.context}/{self.namespace}/{self.resource_type.label}"
