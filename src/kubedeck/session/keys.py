"""Key bindings for each view.

Keys are named the way Textual names them (``"up"``, ``"enter"``,
``"shift+tab"``, ``"slash"``, ``"G"``), so the renderer can forward
``event.key`` unchanged.
"""

from __future__ import annotations

from enum import StrEnum

from kubedeck.session.types import Focus, ViewMode


class Command(StrEnum):
    """Operator intents the controller understands."""

    QUIT = "quit"
    FORCE_QUIT = "force_quit"
    HELP = "help"
    BACK = "back"
    FOCUS_NEXT = "focus_next"
    FOCUS_PREV = "focus_prev"
    SELECT_PREV = "select_prev"
    SELECT_NEXT = "select_next"
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    TOP = "top"
    BOTTOM = "bottom"
    OPEN_DETAIL = "open_detail"
    FILTER = "filter"
    CLEAR_FILTER = "clear_filter"
    DELETE = "delete"
    RESTART = "restart"
    EDIT = "edit"
    LOGS = "logs"
    TOGGLE_FOLLOW = "toggle_follow"
    CYCLE_CONTAINER = "cycle_container"
    OPEN_IN_EDITOR = "open_in_editor"
    SEARCH = "search"
    FOCUS_LIST = "focus_list"


CONFIRM_KEYS = frozenset({"y", "Y"})

GLOBAL_BINDINGS: dict[str, Command] = {
    "ctrl+c": Command.FORCE_QUIT,
    "question_mark": Command.HELP,
}

SELECTOR_BINDINGS: dict[str, Command] = {
    "left": Command.SELECT_PREV,
    "up": Command.SELECT_PREV,
    "right": Command.SELECT_NEXT,
    "down": Command.SELECT_NEXT,
    "tab": Command.FOCUS_NEXT,
    "shift+tab": Command.FOCUS_PREV,
    "enter": Command.FOCUS_NEXT,
    "escape": Command.FOCUS_LIST,
    "ctrl+f": Command.SEARCH,
}

LIST_BINDINGS: dict[str, Command] = {
    "up": Command.UP,
    "k": Command.UP,
    "down": Command.DOWN,
    "j": Command.DOWN,
    "pageup": Command.PAGE_UP,
    "pagedown": Command.PAGE_DOWN,
    "home": Command.TOP,
    "g": Command.TOP,
    "end": Command.BOTTOM,
    "G": Command.BOTTOM,
    "enter": Command.OPEN_DETAIL,
    "slash": Command.FILTER,
    "escape": Command.CLEAR_FILTER,
    "d": Command.DELETE,
    "r": Command.RESTART,
    "e": Command.EDIT,
    "l": Command.LOGS,
    "tab": Command.FOCUS_NEXT,
    "ctrl+f": Command.SEARCH,
    "shift+tab": Command.FOCUS_PREV,
    "q": Command.QUIT,
}

DETAIL_BINDINGS: dict[str, Command] = {
    "up": Command.UP,
    "k": Command.UP,
    "down": Command.DOWN,
    "j": Command.DOWN,
    "pageup": Command.PAGE_UP,
    "pagedown": Command.PAGE_DOWN,
    "g": Command.TOP,
    "home": Command.TOP,
    "G": Command.BOTTOM,
    "end": Command.BOTTOM,
    "l": Command.LOGS,
    "e": Command.EDIT,
    "d": Command.DELETE,
    "r": Command.RESTART,
    "escape": Command.BACK,
    "q": Command.BACK,
}

LOGS_BINDINGS: dict[str, Command] = {
    "up": Command.UP,
    "k": Command.UP,
    "down": Command.DOWN,
    "j": Command.DOWN,
    "pageup": Command.PAGE_UP,
    "pagedown": Command.PAGE_DOWN,
    "g": Command.TOP,
    "home": Command.TOP,
    "G": Command.BOTTOM,
    "end": Command.BOTTOM,
    "f": Command.TOGGLE_FOLLOW,
    "space": Command.TOGGLE_FOLLOW,
    "c": Command.CYCLE_CONTAINER,
    "o": Command.OPEN_IN_EDITOR,
    "escape": Command.BACK,
    "q": Command.BACK,
}

# Printable keys are query text in the Search view, so nothing else is bound
SEARCH_BINDINGS: dict[str, Command] = {
    "ctrl+c": Command.FORCE_QUIT,
    "escape": Command.BACK,
    "enter": Command.OPEN_DETAIL,
    "down": Command.DOWN,
    "tab": Command.DOWN,
    "up": Command.UP,
    "shift+tab": Command.UP,
}

# A result from another context is read-only
SEARCH_DETAIL_BINDINGS: dict[str, Command] = {
    key: command
    for key, command in DETAIL_BINDINGS.items()
    if command not in (Command.EDIT, Command.DELETE, Command.RESTART)
}

HELP_BINDINGS: dict[str, Command] = {
    "escape": Command.HELP,
    "q": Command.HELP,
}


def resolve(
    key: str, view: ViewMode, focus: Focus, from_search: bool = False
) -> Command | None:
    """Map a key to a command for the current view and focus.

    ``from_search`` marks a Detail view opened from a search result.
    """
    if view is ViewMode.SEARCH:
        return SEARCH_BINDINGS.get(key)
    if command := GLOBAL_BINDINGS.get(key):
        return command
    if view is ViewMode.BROWSE:
        table = SELECTOR_BINDINGS if focus.is_selector else LIST_BINDINGS
    elif view is ViewMode.DETAIL:
        table = SEARCH_DETAIL_BINDINGS if from_search else DETAIL_BINDINGS
    elif view is ViewMode.LOGS:
        table = LOGS_BINDINGS
    else:
        table = HELP_BINDINGS
    return table.get(key)


# Footer hints per view, shown by the renderer
FOOTER_HINTS: dict[ViewMode, tuple[tuple[str, str], ...]] = {
    ViewMode.BROWSE: (
        ("tab", "focus"),
        ("←/→", "change"),
        ("enter", "detail"),
        ("/", "filter"),
        ("ctrl+f", "search"),
        ("d", "delete"),
        ("r", "restart"),
        ("e", "edit"),
        ("l", "logs"),
        ("?", "help"),
        ("q", "quit"),
    ),
    ViewMode.DETAIL: (
        ("j/k", "scroll"),
        ("g/G", "top/bottom"),
        ("l", "logs"),
        ("e", "edit"),
        ("d", "delete"),
        ("r", "restart"),
        ("esc", "back"),
    ),
    ViewMode.LOGS: (
        ("f", "follow"),
        ("j/k", "scroll"),
        ("g/G", "top/bottom"),
        ("c", "container"),
        ("o", "open in editor"),
        ("esc", "back"),
    ),
    ViewMode.SEARCH: (
        ("type", "query"),
        ("↑/↓", "select"),
        ("enter", "detail"),
        ("esc", "back"),
    ),
    ViewMode.HELP: (("esc", "close"),),
}

SEARCH_DETAIL_HINTS: tuple[tuple[str, str], ...] = (
    ("j/k", "scroll"),
    ("g/G", "top/bottom"),
    ("l", "logs"),
    ("esc", "results"),
)

HELP_TEXT: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Global",
        (("?", "toggle help"), ("ctrl+c", "quit"), ("q", "quit / back")),
    ),
    (
        "Browse",
        (
            ("tab / shift+tab", "move focus between selectors and list"),
            ("←/→ on a selector", "switch context, namespace or type"),
            ("type on a selector", "fuzzy-filter its entries, enter to pick"),
            ("↑/↓ j/k", "move selection"),
            ("enter", "open detail"),
            ("/", "filter by name (enter to keep, esc to clear)"),
            ("ctrl+f", "search every context by name"),
            ("d", "delete (asks for confirmation)"),
            ("r", "rollout restart StatefulSet (asks for confirmation)"),
            ("e", "edit manifest in $EDITOR"),
            ("l", "pod logs"),
        ),
    ),
    (
        "Detail",
        (("j/k", "scroll"), ("g/G", "top/bottom"), ("l", "pod logs"), ("esc", "back")),
    ),
    (
        "Search",
        (
            ("type", "fuzzy-match resource names"),
            ("↑/↓ tab", "move selection"),
            ("enter", "open detail (l for pod logs)"),
            ("esc", "back to results, then to browse"),
        ),
    ),
    (
        "Logs",
        (
            ("f / space", "toggle follow"),
            ("j/k", "scroll (pauses follow)"),
            ("c", "next container"),
            ("o", "open buffer in $EDITOR"),
            ("esc", "back"),
        ),
    ),
)
