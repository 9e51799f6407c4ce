"""Session controller: the single consumer of multiplexed events.

Owns :class:`AppState`, translates keys into state transitions, and drives
the watch session manager, log streamer and action pipeline with explicit
start/stop calls whenever the selection changes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from kubedeck.integrations.kubernetes.exceptions import KubernetesError
from kubedeck.session.actions import ActionPipeline, ActionRequest
from kubedeck.session.events import (
    ActionCompleted,
    BannerRequested,
    CacheChanged,
    EditorFinished,
    Event,
    KeyPressed,
    LogLinesAppended,
    LogStreamEnded,
    ManifestFetchFailed,
    NamespacesLoaded,
    Resized,
    SearchResultsBatch,
    SearchScanComplete,
    Tick,
    WatchStatusChanged,
)
from kubedeck.session.keys import (
    CONFIRM_KEYS,
    FOOTER_HINTS,
    GLOBAL_BINDINGS,
    HELP_TEXT,
    SEARCH_DETAIL_HINTS,
    Command,
    resolve,
)
from kubedeck.session.logs import LogStreamer
from kubedeck.session.protocols import EditResult, EditStatus
from kubedeck.session.search import (
    SEARCH_COLUMNS,
    SearchResult,
    SearchScanner,
    SearchState,
    rank,
)
from kubedeck.session.snapshot import (
    RESOURCE_GONE,
    RenderSnapshot,
    content_height,
    detail_content,
    table_columns,
    table_row,
    watch_indicator,
)
from kubedeck.session.types import (
    ALL_NAMESPACES,
    EDITABLE_TYPES,
    LOGGABLE_TYPES,
    OFFLINE_CONTEXT,
    RESOURCE_TYPE_ORDER,
    RESTARTABLE_TYPES,
    ActionKind,
    BannerLevel,
    ConfirmAction,
    Focus,
    ResourceRef,
    ResourceType,
    ViewMode,
    WatchTarget,
)
from kubedeck.session.watch import WatchSessionManager

if TYPE_CHECKING:
    from kubedeck.core.config import SessionConfig
    from kubedeck.integrations.kubernetes.models import ResourceItemBase
    from kubedeck.session.multiplexer import EventMultiplexer
    from kubedeck.session.protocols import ClusterClient, ClusterContext, Editor

logger = structlog.get_logger()

DEFAULT_NAMESPACE = "default"


@dataclass(frozen=True)
class ConfirmationState:
    """A destructive action waiting for the operator's yes."""

    action: ConfirmAction
    target: ResourceRef

    @property
    def prompt(self) -> str:
        verb = "Delete" if self.action is ConfirmAction.DELETE else "Rollout restart"
        return f"{verb} {self.target.resource_type.kind} {self.target.key}? [y/N]"


@dataclass
class Banner:
    message: str
    level: BannerLevel
    ticks_left: int


@dataclass
class AppState:
    """Mutable session state; only the controller writes it."""

    context: str
    namespace: str
    resource_type: ResourceType
    contexts: list[ClusterContext] = field(default_factory=list)
    namespaces: list[str] = field(default_factory=lambda: [ALL_NAMESPACES])
    view: ViewMode = ViewMode.BROWSE
    prior_view: ViewMode | None = None
    focus: Focus = Focus.LIST
    filter_text: str = ""
    filter_editing: bool = False
    selected_index: int = 0
    selected: ResourceRef | None = None
    detail_offset: int = 0
    confirmation: ConfirmationState | None = None
    banner: Banner | None = None
    editing: bool = False
    watch_status: WatchStatusChanged | None = None
    search: SearchState | None = None
    selector_query: str = ""
    selector_index: int = 0
    offline: bool = False
    width: int = 80
    height: int = 24
    ticks: int = 0
    quit: bool = False


class SessionController:
    """Consumes events, owns state and produces render snapshots.

    Args:
        client: Cluster capability.
        mux: Event multiplexer feeding this controller.
        config: Session settings.
        editor: External editor for manifest edits and log buffers.
        context: Context to start in; defaults to the kubeconfig's current.
        namespace: Namespace to start in; defaults to the context's.
        resource_type: Resource type to start with.
        search: Scanner for the Search view; built from ``client`` if omitted.
    """

    def __init__(
        self,
        client: ClusterClient,
        mux: EventMultiplexer,
        config: SessionConfig,
        editor: Editor,
        *,
        context: str | None = None,
        namespace: str | None = None,
        resource_type: ResourceType = ResourceType.PODS,
        watch: WatchSessionManager | None = None,
        logs: LogStreamer | None = None,
        actions: ActionPipeline | None = None,
        search: SearchScanner | None = None,
    ) -> None:
        self._client = client
        self._mux = mux
        self._config = config
        self._editor = editor
        self._requested_context = context
        self._requested_namespace = namespace
        self._watch = watch or WatchSessionManager(client, mux, config)
        self._logs = logs or LogStreamer(client, mux, config)
        self._actions = actions or ActionPipeline(client, mux)
        self._search = search or SearchScanner(client, mux)
        self.state = AppState(
            context=context or OFFLINE_CONTEXT,
            namespace=namespace or DEFAULT_NAMESPACE,
            resource_type=resource_type,
        )
        self._started = False
        self._log = logger.bind(component="controller")

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def watch(self) -> WatchSessionManager:
        return self._watch

    @property
    def logs(self) -> LogStreamer:
        return self._logs

    @property
    def actions(self) -> ActionPipeline:
        return self._actions

    @property
    def search(self) -> SearchScanner:
        return self._search

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Resolve the initial context and namespace and start watching."""
        if self._started:
            return
        self._started = True
        s = self.state

        s.contexts = await self._client.list_contexts()
        names = [c.name for c in s.contexts]
        if not names:
            s.offline = True
            s.context = OFFLINE_CONTEXT
            self._set_banner("No kubeconfig found; running offline", BannerLevel.WARNING)
        else:
            if self._requested_context in names:
                s.context = self._requested_context
            else:
                if self._requested_context:
                    self._set_banner(
                        f"Context '{self._requested_context}' not found", BannerLevel.WARNING
                    )
                s.context = next((c.name for c in s.contexts if c.current), names[0])
            await self._apply_context(s.context)

        ctx = self._context_entry(s.context)
        s.namespace = self._requested_namespace or (ctx.namespace if ctx else None) or (
            DEFAULT_NAMESPACE
        )
        s.namespaces = self._namespace_choices([s.namespace])
        self._log.info(
            "session_starting",
            context=s.context,
            namespace=s.namespace,
            resource_type=s.resource_type.label,
            offline=s.offline,
        )
        if not s.offline:
            self._load_namespaces(s.context)
        await self._restart_watch()

    async def run(self, render: Callable[[RenderSnapshot], object] | None = None) -> None:
        """Consume events until quit or until the stream closes."""
        await self.start()
        self._mux.start_ticks()
        if render is not None:
            render(self.snapshot())
        try:
            async for event in self._mux:
                await self.handle(event)
                if self.state.quit:
                    break
                if render is not None and self._mux.pending == 0:
                    render(self.snapshot())
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        await self._search.stop()
        await self._logs.stop()
        await self._watch.stop()
        await self._mux.shutdown()
        self._log.info("session_stopped")

    # =========================================================================
    # Event dispatch
    # =========================================================================

    async def handle(self, event: Event) -> None:
        """Apply one event to the session state."""
        if isinstance(event, KeyPressed):
            await self._on_key(event)
        elif isinstance(event, Tick):
            self._on_tick()
        elif isinstance(event, Resized):
            self._on_resize(event)
        elif isinstance(event, CacheChanged):
            if self._watch.is_current(event.generation):
                self._clamp_selection()
                self._clamp_detail()
        elif isinstance(event, WatchStatusChanged):
            if self._watch.is_current(event.generation):
                self.state.watch_status = event
        elif isinstance(event, (LogLinesAppended, LogStreamEnded)):
            # The buffer is already updated; a fresh snapshot shows it
            pass
        elif isinstance(event, ActionCompleted):
            self._on_action_completed(event)
        elif isinstance(event, EditorFinished):
            self._on_editor_finished(event)
        elif isinstance(event, ManifestFetchFailed):
            self.state.editing = False
            self._set_banner(f"Cannot edit {event.target.name}: {event.reason}", BannerLevel.ERROR)
        elif isinstance(event, NamespacesLoaded):
            await self._on_namespaces_loaded(event)
        elif isinstance(event, BannerRequested):
            self._set_banner(event.message, event.level)
        elif isinstance(event, SearchResultsBatch):
            self._on_search_batch(event)
        elif isinstance(event, SearchScanComplete):
            if self._search.is_current(event.generation) and self.state.search is not None:
                self.state.search.contexts_done += 1

    def _on_tick(self) -> None:
        s = self.state
        s.ticks += 1
        if s.banner is not None:
            s.banner.ticks_left -= 1
            if s.banner.ticks_left <= 0:
                s.banner = None

    def _on_resize(self, event: Resized) -> None:
        self.state.width = event.width
        self.state.height = event.height
        buffer = self._logs.buffer
        if buffer is not None:
            buffer.set_viewport_height(self._viewport())
        self._clamp_detail()

    def _on_action_completed(self, event: ActionCompleted) -> None:
        ref = event.target
        if event.success:
            request = ActionRequest(event.kind, self.state.context, ref)
            self._set_banner(request.describe(), BannerLevel.SUCCESS)
        else:
            verb = event.kind.value.replace("_", " ")
            self._set_banner(
                f"{verb.capitalize()} {ref.name} failed: {event.reason}", BannerLevel.ERROR
            )

    def _on_editor_finished(self, event: EditorFinished) -> None:
        s = self.state
        s.editing = False
        result = event.result
        if event.target is None:
            return
        if result.status is EditStatus.CHANGED and result.text is not None:
            self._actions.submit(
                ActionRequest(ActionKind.EDIT_APPLY, s.context, event.target, manifest=result.text)
            )
        elif result.status is EditStatus.UNCHANGED:
            self._set_banner("No changes detected", BannerLevel.INFO)
        else:
            self._set_banner(f"Edit cancelled: {result.reason or 'aborted'}", BannerLevel.WARNING)

    def _on_search_batch(self, event: SearchResultsBatch) -> None:
        search = self.state.search
        if search is None or not self._search.is_current(event.generation):
            return
        if event.error is not None:
            self._set_banner(
                f"Search {event.context}/{event.resource_type.label}: {event.error}",
                BannerLevel.WARNING,
            )
            return
        search.add([SearchResult(event.context, event.resource_type, i) for i in event.items])

    async def _on_namespaces_loaded(self, event: NamespacesLoaded) -> None:
        s = self.state
        if event.context != s.context:
            return
        if event.error is not None:
            self._set_banner(f"Cannot list namespaces: {event.error}", BannerLevel.WARNING)
            return
        s.namespaces = self._namespace_choices(event.namespaces)
        if s.namespace != ALL_NAMESPACES and s.namespace not in event.namespaces:
            fallback = (
                DEFAULT_NAMESPACE if DEFAULT_NAMESPACE in event.namespaces else ALL_NAMESPACES
            )
            self._log.info(
                "namespace_unavailable", namespace=s.namespace, fallback=fallback, context=s.context
            )
            s.namespace = fallback
            await self._restart_watch()

    # =========================================================================
    # Keys
    # =========================================================================

    async def _on_key(self, event: KeyPressed) -> None:
        s = self.state
        if event.key == "ctrl+c":
            s.quit = True
            return
        if s.editing:
            return
        if s.confirmation is not None:
            confirmation = s.confirmation
            s.confirmation = None
            if event.key in CONFIRM_KEYS:
                self._submit_confirmed(confirmation)
            else:
                self._set_banner("Cancelled", BannerLevel.INFO)
            return
        if s.filter_editing:
            self._on_filter_key(event)
            return

        if s.view is ViewMode.SEARCH and s.search is not None:
            if self._on_search_text(s.search, event):
                return
        elif s.view is ViewMode.BROWSE and s.focus.is_selector:
            if await self._on_selector_key(event):
                return

        command = resolve(event.key, s.view, s.focus, from_search=self._opened_result() is not None)
        if command is not None:
            await self._dispatch(command)

    def _on_filter_key(self, event: KeyPressed) -> None:
        s = self.state
        if event.key == "enter":
            s.filter_editing = False
            return
        if event.key == "escape":
            s.filter_editing = False
            s.filter_text = ""
        elif event.key == "backspace":
            s.filter_text = s.filter_text[:-1]
        elif (char := _typed(event)) is not None:
            s.filter_text += char
        else:
            return
        s.selected_index = 0

    @staticmethod
    def _on_search_text(search: SearchState, event: KeyPressed) -> bool:
        if event.key == "backspace":
            search.set_query(search.query[:-1])
        elif (char := _typed(event)) is not None:
            search.set_query(search.query + char)
        else:
            return False
        return True

    async def _on_selector_key(self, event: KeyPressed) -> bool:
        """Type-to-filter on the focused selector.

        Printable keys narrow the selector's entries by fuzzy match; while a
        query is active the arrows walk the matches and enter picks one.
        """
        s = self.state
        key = event.key
        if key == "backspace":
            s.selector_query = s.selector_query[:-1]
            s.selector_index = 0
            return True
        if (char := _typed(event)) is not None and key not in GLOBAL_BINDINGS:
            s.selector_query += char
            s.selector_index = 0
            return True
        if not s.selector_query:
            return False
        if key in ("up", "left", "down", "right"):
            matches = self._selector_matches()
            if matches:
                step = -1 if key in ("up", "left") else 1
                s.selector_index = (s.selector_index + step) % len(matches)
            return True
        if key == "enter":
            await self._pick_selector_match()
            return True
        if key == "escape":
            self._clear_selector_query()
            return True
        if key in ("tab", "shift+tab"):
            self._clear_selector_query()
        return False

    async def _dispatch(self, command: Command) -> None:
        s = self.state
        if command in (Command.QUIT, Command.FORCE_QUIT):
            s.quit = True
        elif command is Command.HELP:
            self._toggle_help()
        elif command is Command.BACK:
            await self._go_back()
        elif command is Command.FOCUS_NEXT:
            self._set_focus(s.focus.next())
        elif command is Command.FOCUS_PREV:
            self._set_focus(s.focus.prev())
        elif command is Command.FOCUS_LIST:
            self._set_focus(Focus.LIST)
        elif command is Command.SEARCH:
            await self._open_search()
        elif command in (Command.SELECT_PREV, Command.SELECT_NEXT):
            await self._cycle_selector(-1 if command is Command.SELECT_PREV else 1)
        elif command in (
            Command.UP,
            Command.DOWN,
            Command.PAGE_UP,
            Command.PAGE_DOWN,
            Command.TOP,
            Command.BOTTOM,
        ):
            self._move(command)
        elif command is Command.OPEN_DETAIL:
            if s.view is ViewMode.SEARCH:
                self._open_search_result()
            else:
                self._open_detail()
        elif command is Command.FILTER:
            s.filter_editing = True
        elif command is Command.CLEAR_FILTER:
            s.filter_text = ""
            s.selected_index = 0
        elif command is Command.DELETE:
            self._request_confirmation(ConfirmAction.DELETE)
        elif command is Command.RESTART:
            self._request_confirmation(ConfirmAction.RESTART)
        elif command is Command.EDIT:
            self._start_edit()
        elif command is Command.LOGS:
            await self._open_logs()
        elif command is Command.TOGGLE_FOLLOW:
            if (buffer := self._logs.buffer) is not None:
                buffer.toggle_follow()
        elif command is Command.CYCLE_CONTAINER:
            await self._cycle_container()
        elif command is Command.OPEN_IN_EDITOR:
            self._open_logs_in_editor()

    # =========================================================================
    # View transitions
    # =========================================================================

    def _toggle_help(self) -> None:
        s = self.state
        if s.view is ViewMode.HELP:
            s.view = s.prior_view or ViewMode.BROWSE
            s.prior_view = None
        else:
            s.prior_view = s.view
            s.view = ViewMode.HELP

    async def _go_back(self) -> None:
        s = self.state
        if s.view is ViewMode.SEARCH:
            await self._close_search()
        elif s.search is not None and s.search.opened is not None:
            if s.view is ViewMode.LOGS:
                await self._logs.stop()
            s.search.opened = None
            s.view = ViewMode.SEARCH
            s.selected = None
            s.detail_offset = 0
        else:
            await self._back_to_browse()

    async def _back_to_browse(self) -> None:
        s = self.state
        if s.view is ViewMode.LOGS:
            await self._logs.stop()
        s.view = ViewMode.BROWSE
        s.selected = None
        s.detail_offset = 0

    def _open_detail(self) -> None:
        item = self._selected_item()
        if item is None:
            return
        s = self.state
        s.selected = self._ref(item)
        s.view = ViewMode.DETAIL
        s.detail_offset = 0

    async def _open_logs(self) -> None:
        s = self.state
        target = self._action_target()
        if target is None:
            return
        if target.resource_type not in LOGGABLE_TYPES:
            self._set_banner(f"Logs are not available for {target.resource_type.label}")
            return
        item = self._lookup(target)
        names = list(getattr(item, "container_names", []) or [])
        s.selected = target
        s.view = ViewMode.LOGS
        await self._logs.start(
            self._target_context(),
            target,
            container=names[0] if names else None,
            viewport_height=self._viewport(),
        )

    async def _cycle_container(self) -> None:
        pod = self._logs.pod
        if pod is None:
            return
        item = self._lookup(pod)
        names = list(getattr(item, "container_names", []) or [])
        if len(names) < 2:
            self._set_banner("Pod has a single container")
            return
        current = self._logs.container
        index = names.index(current) if current in names else -1
        container = names[(index + 1) % len(names)]
        self._set_banner(f"Container: {container}")
        await self._logs.start(
            self._target_context(), pod, container=container, viewport_height=self._viewport()
        )

    # =========================================================================
    # Search
    # =========================================================================

    async def _open_search(self) -> None:
        """Start a fresh search over every context."""
        s = self.state
        names = [c.name for c in s.contexts]
        if not names:
            self._set_banner("Search needs a kubeconfig context", BannerLevel.WARNING)
            return
        self._clear_selector_query()
        s.filter_editing = False
        s.search = SearchState(contexts_total=len(names))
        s.view = ViewMode.SEARCH
        self._log.info("search_opened", contexts=len(names))
        await self._search.start(names)

    async def _close_search(self) -> None:
        s = self.state
        await self._search.stop()
        s.search = None
        s.view = ViewMode.BROWSE

    def _open_search_result(self) -> None:
        s = self.state
        result = s.search.selected if s.search is not None else None
        if s.search is None or result is None:
            return
        s.search.opened = result
        s.selected = result.ref
        s.view = ViewMode.DETAIL
        s.detail_offset = 0

    def _opened_result(self) -> SearchResult | None:
        search = self.state.search
        return search.opened if search is not None else None

    def _target_context(self) -> str:
        """Context of the resource on screen: a search result's, or the session's."""
        opened = self._opened_result()
        return opened.context if opened is not None else self.state.context

    # =========================================================================
    # Selection
    # =========================================================================

    async def _cycle_selector(self, step: int) -> None:
        s = self.state
        if s.focus is Focus.CONTEXT_SELECTOR:
            names = [c.name for c in s.contexts]
            if len(names) < 2:
                return
            index = names.index(s.context) if s.context in names else -1
            await self.select_context(names[(index + step) % len(names)])
        elif s.focus is Focus.NAMESPACE_SELECTOR:
            values = s.namespaces
            if len(values) < 2:
                return
            index = values.index(s.namespace) if s.namespace in values else -1
            await self.select_namespace(values[(index + step) % len(values)])
        elif s.focus is Focus.TYPE_SELECTOR:
            order = RESOURCE_TYPE_ORDER
            index = order.index(s.resource_type)
            await self.select_resource_type(order[(index + step) % len(order)])

    def _set_focus(self, focus: Focus) -> None:
        self._clear_selector_query()
        self.state.focus = focus

    def _clear_selector_query(self) -> None:
        self.state.selector_query = ""
        self.state.selector_index = 0

    def _selector_labels(self) -> list[str]:
        s = self.state
        if s.focus is Focus.CONTEXT_SELECTOR:
            return [c.name for c in s.contexts]
        if s.focus is Focus.NAMESPACE_SELECTOR:
            return list(s.namespaces)
        if s.focus is Focus.TYPE_SELECTOR:
            return [rt.label for rt in RESOURCE_TYPE_ORDER]
        return []

    def _selector_matches(self) -> list[int]:
        return rank(self.state.selector_query, self._selector_labels())

    async def _pick_selector_match(self) -> None:
        s = self.state
        matches = self._selector_matches()
        focus = s.focus
        if not matches:
            self._set_banner(f"No {focus.value} matches '{s.selector_query}'")
            self._clear_selector_query()
            return
        index = matches[s.selector_index % len(matches)]
        label = self._selector_labels()[index]
        self._set_focus(focus.next())
        if focus is Focus.CONTEXT_SELECTOR:
            await self.select_context(label)
        elif focus is Focus.NAMESPACE_SELECTOR:
            await self.select_namespace(label)
        else:
            await self.select_resource_type(RESOURCE_TYPE_ORDER[index])

    async def select_context(self, context: str) -> None:
        """Switch context: restart the watch and reload its namespaces."""
        s = self.state
        if context == s.context:
            return
        if not await self._apply_context(context):
            return
        s.context = context
        s.namespaces = self._namespace_choices([s.namespace])
        self._load_namespaces(context)
        await self._restart_watch()

    async def select_namespace(self, namespace: str) -> None:
        s = self.state
        if namespace == s.namespace:
            return
        s.namespace = namespace
        await self._restart_watch()

    async def select_resource_type(self, resource_type: ResourceType) -> None:
        s = self.state
        if resource_type is s.resource_type:
            return
        s.resource_type = resource_type
        await self._restart_watch()

    async def _apply_context(self, context: str) -> bool:
        try:
            await self._client.set_current_context(context)
        except KubernetesError as e:
            self._set_banner(f"Cannot switch to {context}: {e}", BannerLevel.ERROR)
            return False
        return True

    async def _restart_watch(self) -> None:
        s = self.state
        s.selected_index = 0
        s.filter_text = ""
        s.filter_editing = False
        s.watch_status = None
        await self._watch.start(WatchTarget(s.context, s.namespace, s.resource_type))

    def _load_namespaces(self, context: str) -> None:
        self._mux.spawn(self._fetch_namespaces(context), name=f"namespaces-{context}")

    async def _fetch_namespaces(self, context: str) -> None:
        try:
            names = await self._client.list_namespaces(context)
        except KubernetesError as e:
            self._mux.post(NamespacesLoaded(context, [], error=str(e)))
            return
        self._mux.post(NamespacesLoaded(context, list(names)))

    def _move(self, command: Command) -> None:
        s = self.state
        page = self._viewport()
        delta = {
            Command.UP: -1,
            Command.DOWN: 1,
            Command.PAGE_UP: -page,
            Command.PAGE_DOWN: page,
        }.get(command, 0)

        if s.view is ViewMode.SEARCH and s.search is not None:
            s.search.move(delta)
        elif s.view is ViewMode.BROWSE:
            last = len(self._rows()) - 1
            if command is Command.TOP:
                s.selected_index = 0
            elif command is Command.BOTTOM:
                s.selected_index = max(0, last)
            else:
                s.selected_index = min(max(0, s.selected_index + delta), max(0, last))
        elif s.view is ViewMode.DETAIL:
            limit = self._detail_max_offset()
            if command is Command.TOP:
                s.detail_offset = 0
            elif command is Command.BOTTOM:
                s.detail_offset = limit
            else:
                s.detail_offset = min(max(0, s.detail_offset + delta), limit)
        elif s.view is ViewMode.LOGS and (buffer := self._logs.buffer) is not None:
            if command is Command.TOP:
                buffer.set_follow(False)
                buffer.scroll_to_top()
            elif command is Command.BOTTOM:
                buffer.scroll_to_bottom()
            else:
                # Manual scrolling pauses follow
                buffer.set_follow(False)
                buffer.scroll(delta)

    # =========================================================================
    # Actions
    # =========================================================================

    def _request_confirmation(self, action: ConfirmAction) -> None:
        target = self._action_target()
        if target is None:
            return
        if action is ConfirmAction.RESTART and target.resource_type not in RESTARTABLE_TYPES:
            self._set_banner("Rollout restart is only available for StatefulSets")
            return
        self.state.confirmation = ConfirmationState(action, target)

    def _submit_confirmed(self, confirmation: ConfirmationState) -> None:
        kind = ActionKind.DELETE if confirmation.action is ConfirmAction.DELETE else (
            ActionKind.RESTART
        )
        if self._actions.submit(ActionRequest(kind, self.state.context, confirmation.target)):
            self._set_banner(f"{kind.value.capitalize()} {confirmation.target.name}...")

    def _start_edit(self) -> None:
        target = self._action_target()
        if target is None:
            return
        if target.resource_type not in EDITABLE_TYPES:
            self._set_banner(f"{target.resource_type.label} cannot be edited", BannerLevel.WARNING)
            return
        self.state.editing = True
        self._mux.spawn(self._edit_session(self.state.context, target), name="editor")

    async def _edit_session(self, context: str, target: ResourceRef) -> None:
        try:
            text = await self._client.get_manifest(context, target)
        except KubernetesError as e:
            self._mux.post(ManifestFetchFailed(target, str(e)))
            return
        try:
            result = await self._editor.edit(text)
        except Exception as e:
            self._log.error("editor_failed", target=str(target), exc_info=True)
            result = EditResult.aborted(str(e))
        self._mux.post(EditorFinished(target, result))

    def _open_logs_in_editor(self) -> None:
        buffer = self._logs.buffer
        if buffer is None:
            return
        self.state.editing = True
        self._mux.spawn(self._view_text(buffer.text()), name="editor")

    async def _view_text(self, text: str) -> None:
        try:
            result = await self._editor.edit(text, suffix=".log")
        except Exception as e:
            self._log.error("editor_failed", exc_info=True)
            result = EditResult.aborted(str(e))
        self._mux.post(EditorFinished(None, result))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _set_banner(self, message: str, level: BannerLevel = BannerLevel.INFO) -> None:
        self.state.banner = Banner(message, level, self._config.banner_ticks)

    def _viewport(self) -> int:
        return content_height(self.state.height)

    def _context_entry(self, name: str) -> ClusterContext | None:
        return next((c for c in self.state.contexts if c.name == name), None)

    @staticmethod
    def _namespace_choices(names: list[str]) -> list[str]:
        return [ALL_NAMESPACES, *sorted({n for n in names if n and n != ALL_NAMESPACES})]

    def _rows(self) -> list[ResourceItemBase]:
        cache = self._watch.cache
        return cache.snapshot(self.state.filter_text) if cache is not None else []

    def _selected_item(self) -> ResourceItemBase | None:
        rows = self._rows()
        if 0 <= self.state.selected_index < len(rows):
            return rows[self.state.selected_index]
        return None

    def _ref(self, item: ResourceItemBase) -> ResourceRef:
        return ResourceRef(self.state.resource_type, item.namespace, item.name)

    def _cache_item(self, ref: ResourceRef) -> ResourceItemBase | None:
        cache = self._watch.cache
        return cache.get(ref.key) if cache is not None else None

    def _lookup(self, ref: ResourceRef) -> ResourceItemBase | None:
        """The item behind ``ref``: the opened search result, else the live cache."""
        opened = self._opened_result()
        if opened is not None and opened.ref == ref:
            return opened.item
        return self._cache_item(ref)

    def _action_target(self) -> ResourceRef | None:
        """Resource the current view acts on, if it still exists."""
        s = self.state
        if s.view is ViewMode.BROWSE:
            if s.focus is not Focus.LIST:
                return None
            item = self._selected_item()
            return self._ref(item) if item is not None else None
        if s.view in (ViewMode.DETAIL, ViewMode.LOGS) and s.selected is not None:
            if self._lookup(s.selected) is None:
                self._set_banner(RESOURCE_GONE, BannerLevel.WARNING)
                return None
            return s.selected
        return None

    def _clamp_selection(self) -> None:
        s = self.state
        s.selected_index = min(s.selected_index, max(0, len(self._rows()) - 1))

    def _detail_max_offset(self) -> int:
        s = self.state
        item = self._lookup(s.selected) if s.selected is not None else None
        if item is None:
            return 0
        return max(0, len(detail_content(item)) - self._viewport())

    def _clamp_detail(self) -> None:
        s = self.state
        if s.view is ViewMode.DETAIL:
            s.detail_offset = min(s.detail_offset, self._detail_max_offset())

    # =========================================================================
    # Snapshot
    # =========================================================================

    def snapshot(self) -> RenderSnapshot:
        """Project the current state for rendering."""
        s = self.state
        rows = self._rows()
        underlying = s.prior_view if s.view is ViewMode.HELP and s.prior_view else s.view
        panel: dict[str, object] = {}
        opened = self._opened_result()
        where = f" @ {opened.context}" if opened is not None else ""

        if underlying is ViewMode.DETAIL and s.selected is not None:
            item = self._lookup(s.selected)
            title = f"{s.selected.resource_type.kind} {s.selected.key}{where}"
            if item is None:
                panel = {
                    "panel_title": title,
                    "panel_lines": (RESOURCE_GONE,),
                    "resource_missing": True,
                }
            else:
                content = detail_content(item)
                offset = min(s.detail_offset, max(0, len(content) - self._viewport()))
                panel = {
                    "panel_title": title,
                    "panel_lines": tuple(content[offset : offset + self._viewport()]),
                    "panel_offset": offset,
                    "panel_total": len(content),
                }
        elif underlying is ViewMode.LOGS and s.selected is not None:
            buffer = self._logs.buffer
            missing = self._lookup(s.selected) is None
            container = self._logs.container
            title = f"Logs {s.selected.key}{where}" + (f" [{container}]" if container else "")
            lines: tuple[str, ...] = tuple(buffer.visible()) if buffer is not None else ()
            if missing:
                lines = (*lines, f"--- {RESOURCE_GONE} ---")
            panel = {
                "panel_title": title,
                "panel_lines": lines,
                "panel_offset": buffer.offset if buffer is not None else 0,
                "panel_total": len(buffer) if buffer is not None else 0,
                "follow": buffer.follow_enabled if buffer is not None else False,
                "container": container,
                "resource_missing": missing,
            }

        if s.search is not None:
            panel.update(
                search_query=s.search.query,
                search_columns=SEARCH_COLUMNS,
                search_rows=s.search.rows(),
                search_index=s.search.index,
                search_status=s.search.status,
            )
        footer = FOOTER_HINTS[s.view]
        if opened is not None and s.view is ViewMode.DETAIL:
            footer = SEARCH_DETAIL_HINTS
        selector_matches: tuple[str, ...] = ()
        if s.selector_query:
            labels = self._selector_labels()
            selector_matches = tuple(labels[i] for i in self._selector_matches())

        return RenderSnapshot(
            view=s.view,
            focus=s.focus,
            context=s.context,
            contexts=tuple(c.name for c in s.contexts),
            namespace=s.namespace,
            namespaces=tuple(s.namespaces),
            resource_type=s.resource_type,
            resource_types=tuple(RESOURCE_TYPE_ORDER),
            columns=table_columns(s.resource_type, s.namespace),
            rows=tuple(table_row(item, s.namespace) for item in rows),
            selected_index=s.selected_index,
            filter_text=s.filter_text,
            filter_editing=s.filter_editing,
            watch=watch_indicator(s.watch_status, s.ticks),
            footer=footer,
            underlying_view=underlying,
            confirmation=s.confirmation.prompt if s.confirmation else None,
            banner=(s.banner.message, s.banner.level) if s.banner else None,
            editing=s.editing,
            help=HELP_TEXT if s.view is ViewMode.HELP else (),
            selector_query=s.selector_query,
            selector_matches=selector_matches,
            selector_index=s.selector_index,
            **panel,  # type: ignore[arg-type]
        )


def _typed(event: KeyPressed) -> str | None:
    """The printable character a key press types, if any."""
    char = event.character
    if char is not None and len(char) == 1 and char.isprintable():
        return char
    return None
