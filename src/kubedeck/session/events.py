"""Events flowing through the multiplexer into the controller.

Every producer (renderer input, tick timer, watch session, log stream,
action pipeline, search scans, background directory loads) speaks in these types.
Notifications carry the generation id of the session that produced them
so the controller can drop stragglers from a stopped session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from kubedeck.session.types import BannerLevel, WatchState

if TYPE_CHECKING:
    from kubedeck.integrations.kubernetes.models import ResourceItemBase
    from kubedeck.session.protocols import EditResult
    from kubedeck.session.types import ActionKind, ResourceRef, ResourceType, WatchTarget


class Event:
    """Base class for multiplexed events."""


# =============================================================================
# Input
# =============================================================================


@dataclass(frozen=True)
class KeyPressed(Event):
    """A key press, named the way the terminal layer names keys.

    ``key`` is e.g. ``"up"``, ``"enter"``, ``"shift+tab"``, ``"q"``;
    ``character`` is the printable character, if any.
    """

    key: str
    character: str | None = None


@dataclass(frozen=True)
class Resized(Event):
    width: int
    height: int


@dataclass(frozen=True)
class Tick(Event):
    pass


# =============================================================================
# Watch / cache notifications
# =============================================================================


@dataclass(frozen=True)
class CacheChanged(Event):
    """The cache of the session ``generation`` has new content."""

    generation: int
    version: int


@dataclass(frozen=True)
class WatchStatusChanged(Event):
    generation: int
    target: WatchTarget
    state: WatchState
    attempt: int = 0
    next_retry_at: datetime | None = None
    reason: str | None = None
    stale: bool = False
    offline: bool = False


# =============================================================================
# Log notifications
# =============================================================================


@dataclass(frozen=True)
class LogLinesAppended(Event):
    generation: int
    count: int


@dataclass(frozen=True)
class LogStreamEnded(Event):
    generation: int
    reason: str | None = None


# =============================================================================
# Actions & editor
# =============================================================================


@dataclass(frozen=True)
class ActionCompleted(Event):
    """Terminal outcome of an action; ``reason`` is set on failure."""

    kind: ActionKind
    target: ResourceRef
    success: bool
    reason: str | None = None


@dataclass(frozen=True)
class EditorFinished(Event):
    """An editor session for ``target`` ended.

    ``target`` is None when the edited text was read-only (log contents).
    """

    target: ResourceRef | None
    result: EditResult


@dataclass(frozen=True)
class ManifestFetchFailed(Event):
    target: ResourceRef
    reason: str


# =============================================================================
# Search
# =============================================================================


@dataclass(frozen=True)
class SearchResultsBatch(Event):
    """Items of one type found in one context during a search scan."""

    generation: int
    context: str
    resource_type: ResourceType
    items: tuple[ResourceItemBase, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class SearchScanComplete(Event):
    generation: int
    context: str


# =============================================================================
# Directory loads
# =============================================================================


@dataclass(frozen=True)
class NamespacesLoaded(Event):
    context: str
    namespaces: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class BannerRequested(Event):
    """A component asks for a transient banner."""

    message: str
    level: BannerLevel = BannerLevel.INFO
