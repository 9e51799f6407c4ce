"""Theme constants and style utilities for the session renderer.

Usage:
    from kubedeck.tui.theme import Colors, Styles

    # Use colors in DEFAULT_CSS
    DEFAULT_CSS = f'''
    #banner {{ background: {Colors.SURFACE}; }}
    '''

    # Use style helpers
    styled_text = Styles.for_banner(BannerLevel.ERROR)
"""

from __future__ import annotations

from kubedeck.session.types import BannerLevel, WatchState


class Colors:
    """Color constants for TUI theming.

    These map to Textual CSS variables where possible, but provide
    fallback names for use in Rich styles.
    """

    # Semantic colors (Textual CSS variables)
    PRIMARY = "$primary"
    ACCENT = "$accent"

    # Surface colors
    SURFACE = "$surface"
    SURFACE_DARKEN = "$surface-darken-1"

    # Rich style names
    SUCCESS = "green"
    WARNING = "yellow"
    ERROR = "red"
    INFO = "cyan"
    MUTED = "dim"
    FOCUS = "bold reverse"
    SELECTED = "reverse"


class Styles:
    """Rich style lookups keyed by session state."""

    BANNER = {
        BannerLevel.INFO: Colors.INFO,
        BannerLevel.SUCCESS: Colors.SUCCESS,
        BannerLevel.WARNING: Colors.WARNING,
        BannerLevel.ERROR: f"bold {Colors.ERROR}",
    }

    WATCH = {
        WatchState.CONNECTING: Colors.WARNING,
        WatchState.ACTIVE: Colors.SUCCESS,
        WatchState.RECONNECTING: Colors.WARNING,
        WatchState.FAILED: Colors.ERROR,
        WatchState.STOPPED: Colors.MUTED,
    }

    @staticmethod
    def for_banner(level: BannerLevel) -> str:
        """Style for a banner of the given level."""
        return Styles.BANNER.get(level, Colors.INFO)

    @staticmethod
    def for_watch(state: WatchState) -> str:
        """Style for the watch indicator in the given state."""
        return Styles.WATCH.get(state, Colors.MUTED)
