"""Terminal User Interface for kubedeck.

The renderer is a thin Textual layer over the session engine: it forwards
keys and resizes into the event multiplexer and draws each
:class:`~kubedeck.session.snapshot.RenderSnapshot` the controller produces.

Usage:
    from kubedeck.tui import Colors, Styles
    from kubedeck.tui.apps.kubernetes import KubedeckApp
"""

from kubedeck.tui.theme import Colors, Styles

__all__ = [
    "Colors",
    "Styles",
]
