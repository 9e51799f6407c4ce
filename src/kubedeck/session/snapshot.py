"""Read-only projection of the session for renderers.

A :class:`RenderSnapshot` holds everything needed to draw one frame:
selectors, table rows, detail or log panel, overlays, banner and watch
status. Renderers never see the cache, the log buffer or the watch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from kubedeck.session.types import (
    ALL_NAMESPACES,
    COLUMN_HEADERS,
    BannerLevel,
    Focus,
    ViewMode,
    WatchState,
)
from kubedeck.utils.manifest import dump_manifest

if TYPE_CHECKING:
    from kubedeck.integrations.kubernetes.models import ResourceItemBase
    from kubedeck.session.events import WatchStatusChanged
    from kubedeck.session.types import ResourceType

# Rows taken by header, selectors, table header, status line, banner and footer
CHROME_HEIGHT = 6

SPINNER_FRAMES = "|/-\\"

RESOURCE_GONE = "resource no longer present"


def content_height(terminal_height: int) -> int:
    """Lines available to the table, detail or log panel."""
    return max(1, terminal_height - CHROME_HEIGHT)


def table_columns(resource_type: ResourceType, namespace: str) -> tuple[str, ...]:
    """Column headers, with NAMESPACE first when browsing all namespaces."""
    headers = COLUMN_HEADERS[resource_type]
    if namespace == ALL_NAMESPACES:
        return ("NAMESPACE", *headers)
    return headers


def table_row(item: ResourceItemBase, namespace: str) -> tuple[str, ...]:
    cells = item.columns()
    if namespace == ALL_NAMESPACES:
        return (item.namespace, *cells)
    return cells


def detail_content(item: ResourceItemBase) -> list[str]:
    """Describe-style summary followed by the full manifest."""
    kind = getattr(item, "kind", "")
    lines = [
        f"Name:         {item.name}",
        f"Namespace:    {item.namespace or '<none>'}",
        f"Kind:         {kind}",
        f"Status:       {item.status}",
        f"Age:          {item.age}",
        f"Created:      {item.creation_timestamp or '<unknown>'}",
    ]
    if item.labels:
        labels = ", ".join(f"{k}={v}" for k, v in sorted(item.labels.items()))
        lines.append(f"Labels:       {labels}")
    lines.extend(item.describe())
    lines.append("")
    lines.append("--- Full YAML ---")
    if item.manifest:
        lines.extend(dump_manifest(item.manifest).rstrip("\n").splitlines())
    else:
        lines.append("<manifest unavailable>")
    return lines


@dataclass(frozen=True)
class WatchIndicator:
    """Connection state of the live watch, for the status line."""

    state: WatchState = WatchState.STOPPED
    stale: bool = False
    offline: bool = False
    attempt: int = 0
    reason: str | None = None
    spinner: str = ""

    @property
    def label(self) -> str:
        if self.state is WatchState.ACTIVE:
            return "live"
        if self.state is WatchState.CONNECTING:
            return f"connecting {self.spinner}"
        if self.state in (WatchState.RECONNECTING, WatchState.FAILED):
            prefix = "offline" if self.offline else ("stale" if self.stale else self.state.value)
            return f"{prefix}, retry #{self.attempt} {self.spinner}".rstrip()
        return self.state.value


@dataclass(frozen=True)
class RenderSnapshot:
    """Everything a renderer needs to draw one frame."""

    view: ViewMode
    focus: Focus
    context: str
    contexts: tuple[str, ...]
    namespace: str
    namespaces: tuple[str, ...]
    resource_type: ResourceType
    resource_types: tuple[ResourceType, ...]
    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    selected_index: int
    filter_text: str
    filter_editing: bool
    watch: WatchIndicator
    footer: tuple[tuple[str, str], ...]
    underlying_view: ViewMode
    panel_title: str = ""
    panel_lines: tuple[str, ...] = ()
    panel_offset: int = 0
    panel_total: int = 0
    resource_missing: bool = False
    follow: bool = False
    container: str | None = None
    confirmation: str | None = None
    banner: tuple[str, BannerLevel] | None = None
    editing: bool = False
    help: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = ()
    selector_query: str = ""
    selector_matches: tuple[str, ...] = ()
    selector_index: int = 0
    search_query: str = ""
    search_columns: tuple[str, ...] = ()
    search_rows: tuple[tuple[str, ...], ...] = ()
    search_index: int = 0
    search_status: str = ""

    @property
    def help_visible(self) -> bool:
        return self.view is ViewMode.HELP


def watch_indicator(status: WatchStatusChanged | None, ticks: int) -> WatchIndicator:
    if status is None:
        return WatchIndicator(state=WatchState.CONNECTING, spinner=SPINNER_FRAMES[ticks % 4])
    spinning = status.state in (WatchState.CONNECTING, WatchState.RECONNECTING, WatchState.FAILED)
    return WatchIndicator(
        state=status.state,
        stale=status.stale,
        offline=status.offline,
        attempt=status.attempt,
        reason=status.reason,
        spinner=SPINNER_FRAMES[ticks % 4] if spinning else "",
    )
