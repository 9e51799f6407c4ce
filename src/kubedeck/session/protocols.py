"""Capabilities the session engine consumes.

The engine never talks to the kubernetes client or a subprocess directly;
it is handed objects satisfying these protocols, which keeps it testable
against in-memory fakes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from kubedeck.integrations.kubernetes.models import ResourceItemBase
    from kubedeck.session.types import ResourceRef, ResourceType, WatchEventType


@dataclass(frozen=True)
class ClusterContext:
    """A kubeconfig context the operator can switch to."""

    name: str
    cluster: str = ""
    namespace: str | None = None
    current: bool = False

    @property
    def display_name(self) -> str:
        if self.cluster and self.cluster != self.name:
            return f"{self.name} ({self.cluster})"
        return self.name


class ResourceList(list["ResourceItemBase"]):
    """Items from a list call, plus the collection version to watch from."""

    def __init__(
        self, items: Sequence[ResourceItemBase] = (), resource_version: str | None = None
    ) -> None:
        super().__init__(items)
        self.resource_version = resource_version


@runtime_checkable
class ClusterClient(Protocol):
    """Asynchronous access to one kubeconfig's clusters.

    Every method raises a ``KubernetesError`` subclass on failure.
    """

    async def list_contexts(self) -> list[ClusterContext]: ...

    async def set_current_context(self, context: str) -> None: ...

    async def list_namespaces(self, context: str) -> list[str]: ...

    async def list(
        self, context: str, namespace: str, resource_type: ResourceType
    ) -> ResourceList: ...

    def watch(
        self,
        context: str,
        namespace: str,
        resource_type: ResourceType,
        resource_version: str | None = None,
    ) -> AsyncIterator[tuple[WatchEventType, ResourceItemBase]]: ...

    async def delete(self, context: str, ref: ResourceRef) -> None: ...

    async def patch_restart(self, context: str, ref: ResourceRef) -> None: ...

    async def get_manifest(self, context: str, ref: ResourceRef) -> str: ...

    async def apply_manifest(self, context: str, ref: ResourceRef, text: str) -> None: ...

    def stream_logs(
        self,
        context: str,
        ref: ResourceRef,
        follow: bool = True,
        container: str | None = None,
        tail_lines: int | None = None,
    ) -> AsyncIterator[str]: ...


class EditStatus(StrEnum):
    """How an editor session ended."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"
    ABORTED = "aborted"


@dataclass(frozen=True)
class EditResult:
    """Outcome of an editor session; ``text`` is set only when CHANGED."""

    status: EditStatus
    text: str | None = None
    reason: str | None = None

    @classmethod
    def changed(cls, text: str) -> EditResult:
        return cls(EditStatus.CHANGED, text)

    @classmethod
    def unchanged(cls) -> EditResult:
        return cls(EditStatus.UNCHANGED)

    @classmethod
    def aborted(cls, reason: str | None = None) -> EditResult:
        return cls(EditStatus.ABORTED, reason=reason)


@runtime_checkable
class Editor(Protocol):
    """Hands text to the operator's editor and returns the result."""

    async def edit(self, text: str, suffix: str = ".yaml") -> EditResult: ...
