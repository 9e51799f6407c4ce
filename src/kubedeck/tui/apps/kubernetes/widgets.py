"""Widgets that draw a render snapshot.

Each widget is a passive ``Static``: it owns no state and is redrawn from
the latest :class:`RenderSnapshot`. The ``render_*`` functions build the
Rich renderables and are usable without a running app.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Group
from rich.table import Table
from rich.text import Text
from textual.widgets import Static

from kubedeck.session.types import Focus, ViewMode, WatchState
from kubedeck.tui.theme import Colors, Styles

if TYPE_CHECKING:
    from rich.console import RenderableType

    from kubedeck.session.snapshot import RenderSnapshot


# =============================================================================
# Renderables
# =============================================================================


def _selector(label: str, value: str, focused: bool, snapshot: RenderSnapshot) -> Text:
    text = Text(f"{label}: ", style=Colors.MUTED)
    if focused and snapshot.selector_query:
        # Typed query with its ranked matches, the highlighted one marked
        text.append(f" {snapshot.selector_query}█ ", style=Colors.FOCUS)
        if not snapshot.selector_matches:
            text.append(" no match", style=Colors.WARNING)
        for index, match in enumerate(snapshot.selector_matches):
            highlighted = index == snapshot.selector_index % len(snapshot.selector_matches)
            text.append(f" {match}", style=Colors.SELECTED if highlighted else Colors.MUTED)
        return text
    text.append(f" {value} ", style=Colors.FOCUS if focused else "bold")
    if focused:
        text.append(" ◀ ▶", style=Colors.MUTED)
    return text


def render_selectors(snapshot: RenderSnapshot) -> Text:
    """Context, namespace and resource type selectors on one line."""
    focus = snapshot.focus
    browsing = snapshot.view is ViewMode.BROWSE
    parts = [
        _selector(
            "Context",
            snapshot.context,
            browsing and focus is Focus.CONTEXT_SELECTOR,
            snapshot,
        ),
        _selector(
            "Namespace",
            snapshot.namespace,
            browsing and focus is Focus.NAMESPACE_SELECTOR,
            snapshot,
        ),
        _selector(
            "Type",
            snapshot.resource_type.label,
            browsing and focus is Focus.TYPE_SELECTOR,
            snapshot,
        ),
    ]
    return Text("   ").join(parts)


def render_filter(snapshot: RenderSnapshot) -> Text:
    if snapshot.view is ViewMode.SEARCH:
        text = Text("Search: ", style="bold")
        text.append(snapshot.search_query)
        text.append("█", style="blink")
        return text
    if snapshot.filter_editing:
        text = Text("/", style="bold")
        text.append(snapshot.filter_text)
        text.append("█", style="blink")
        return text
    if snapshot.filter_text:
        return Text(f"filter: {snapshot.filter_text}  (esc clears)", style=Colors.MUTED)
    return Text("")


def _window(selected: int, total: int, height: int) -> tuple[int, int]:
    """Row range to display so the selected row stays visible."""
    height = max(1, height)
    if total <= height:
        return 0, total
    start = min(max(0, selected - height // 2), total - height)
    return start, start + height


def _table(
    columns: tuple[str, ...],
    rows: tuple[tuple[str, ...], ...],
    selected_index: int | None,
    height: int,
) -> Table:
    table = Table(expand=True, box=None, header_style="bold", pad_edge=False)
    for column in columns:
        table.add_column(column, no_wrap=True, overflow="ellipsis")

    # One row goes to the header
    start, end = _window(selected_index or 0, len(rows), height - 1)
    for index in range(start, end):
        selected = index == selected_index
        table.add_row(*rows[index], style=Colors.SELECTED if selected else None)
    return table


def render_table(snapshot: RenderSnapshot, height: int) -> Table:
    """Resource table, scrolled to keep the selection visible."""
    selected = snapshot.selected_index if snapshot.focus is Focus.LIST else None
    return _table(snapshot.columns, snapshot.rows, selected, height)


def render_search(snapshot: RenderSnapshot, height: int) -> Table:
    """Search results across contexts, best match first."""
    return _table(
        snapshot.search_columns, snapshot.search_rows, snapshot.search_index, height
    )


def render_panel(snapshot: RenderSnapshot) -> Text:
    """Detail or log panel body."""
    text = Text()
    text.append(snapshot.panel_title, style="bold")
    if snapshot.underlying_view is ViewMode.LOGS:
        follow = "FOLLOWING" if snapshot.follow else "PAUSED"
        text.append(f"  [{follow}]", style=Colors.SUCCESS if snapshot.follow else Colors.WARNING)
    if snapshot.panel_total:
        last = min(snapshot.panel_total, snapshot.panel_offset + len(snapshot.panel_lines))
        text.append(
            f"  {snapshot.panel_offset + 1}-{last}/{snapshot.panel_total}", style=Colors.MUTED
        )
    text.append("\n")
    missing_style = Colors.WARNING if snapshot.resource_missing else None
    for line in snapshot.panel_lines:
        text.append(line + "\n", style=missing_style)
    return text


def render_body(snapshot: RenderSnapshot, height: int) -> RenderableType:
    if snapshot.help_visible:
        return render_help(snapshot)
    if snapshot.underlying_view in (ViewMode.DETAIL, ViewMode.LOGS):
        return render_panel(snapshot)
    if snapshot.underlying_view is ViewMode.SEARCH:
        return render_search(snapshot, height)
    return render_table(snapshot, height)


def render_help(snapshot: RenderSnapshot) -> Group:
    items: list[RenderableType] = [Text("Keyboard shortcuts", style="bold underline")]
    for section, bindings in snapshot.help:
        items.append(Text(""))
        items.append(Text(section, style="bold"))
        grid = Table.grid(padding=(0, 2))
        grid.add_column(style=Colors.INFO, no_wrap=True)
        grid.add_column()
        for key, description in bindings:
            grid.add_row(key, description)
        items.append(grid)
    return Group(*items)


def render_status(snapshot: RenderSnapshot) -> Text:
    """Watch indicator and row count."""
    watch = snapshot.watch
    text = Text("● ", style=Styles.for_watch(watch.state))
    text.append(watch.label, style=Styles.for_watch(watch.state))
    if watch.reason and watch.state is not WatchState.ACTIVE:
        text.append(f"  {watch.reason}", style=Colors.MUTED)
    if snapshot.underlying_view is ViewMode.BROWSE:
        text.append(f"   {len(snapshot.rows)} {snapshot.resource_type.label}", style=Colors.MUTED)
    elif snapshot.underlying_view is ViewMode.SEARCH:
        text.append(f"   {snapshot.search_status}", style=Colors.MUTED)
    if snapshot.editing:
        text.append("   editing…", style=Colors.INFO)
    return text


def render_banner(snapshot: RenderSnapshot) -> Text:
    """Confirmation prompt, or the transient banner."""
    if snapshot.confirmation:
        return Text(snapshot.confirmation, style=f"bold {Colors.WARNING}")
    if snapshot.banner:
        message, level = snapshot.banner
        return Text(message, style=Styles.for_banner(level))
    return Text("")


def render_footer(snapshot: RenderSnapshot) -> Text:
    text = Text()
    for key, description in snapshot.footer:
        text.append(f" {key} ", style=Colors.SELECTED)
        text.append(f" {description}  ")
    return text


# =============================================================================
# Widgets
# =============================================================================


class SnapshotView(Static):
    """A Static redrawn from snapshots."""

    def show(self, snapshot: RenderSnapshot) -> None:
        self.update(self.build(snapshot))

    def build(self, snapshot: RenderSnapshot) -> RenderableType:
        raise NotImplementedError


class SelectorBar(SnapshotView):
    DEFAULT_CSS = """
    SelectorBar {
        height: 1;
        padding: 0 1;
    }
    """

    def build(self, snapshot: RenderSnapshot) -> RenderableType:
        return render_selectors(snapshot)


class FilterBar(SnapshotView):
    DEFAULT_CSS = """
    FilterBar {
        height: 1;
        padding: 0 1;
    }
    """

    def build(self, snapshot: RenderSnapshot) -> RenderableType:
        return render_filter(snapshot)


class ResourceBody(SnapshotView):
    """Table, search results, detail, logs or help, depending on the view."""

    DEFAULT_CSS = """
    ResourceBody {
        height: 1fr;
        padding: 0 1;
    }
    """

    def build(self, snapshot: RenderSnapshot) -> RenderableType:
        return render_body(snapshot, self.size.height or 20)


class StatusLine(SnapshotView):
    DEFAULT_CSS = f"""
    StatusLine {{
        height: 1;
        padding: 0 1;
        background: {Colors.SURFACE_DARKEN};
    }}
    """

    def build(self, snapshot: RenderSnapshot) -> RenderableType:
        return render_status(snapshot)


class BannerLine(SnapshotView):
    DEFAULT_CSS = """
    BannerLine {
        height: 1;
        padding: 0 1;
    }
    """

    def build(self, snapshot: RenderSnapshot) -> RenderableType:
        return render_banner(snapshot)


class FooterBar(SnapshotView):
    DEFAULT_CSS = f"""
    FooterBar {{
        height: 1;
        background: {Colors.SURFACE};
    }}
    """

    def build(self, snapshot: RenderSnapshot) -> RenderableType:
        return render_footer(snapshot)
