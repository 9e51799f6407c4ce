"""Main Textual application for the kubedeck session.

The app is only a renderer: key presses and resizes are forwarded into the
event multiplexer, and the session controller runs as a worker that calls
back with a fresh snapshot whenever the event queue drains.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from textual import events
from textual.app import App, ComposeResult
from textual.screen import Screen

from kubedeck.session.controller import SessionController
from kubedeck.session.events import KeyPressed, Resized
from kubedeck.session.multiplexer import EventMultiplexer
from kubedeck.session.types import ResourceType
from kubedeck.tui.apps.kubernetes.widgets import (
    BannerLine,
    FilterBar,
    FooterBar,
    ResourceBody,
    SelectorBar,
    SnapshotView,
    StatusLine,
)
from kubedeck.utils.editor import ExternalEditor

if TYPE_CHECKING:
    from kubedeck.core.config import SessionConfig
    from kubedeck.session.events import Event
    from kubedeck.session.protocols import ClusterClient, Editor
    from kubedeck.session.snapshot import RenderSnapshot

logger = structlog.get_logger()


class SessionScreen(Screen[None], inherit_bindings=False):
    """Single screen holding every snapshot widget.

    Bindings are not inherited: every key, including tab and ctrl+c, is
    interpreted by the session controller.
    """

    def compose(self) -> ComposeResult:
        yield SelectorBar(id="selectors")
        yield FilterBar(id="filter")
        yield ResourceBody(id="body")
        yield StatusLine(id="status")
        yield BannerLine(id="banner")
        yield FooterBar(id="footer")

    def show(self, snapshot: RenderSnapshot) -> None:
        """Redraw every widget from ``snapshot``."""
        for view in self.query(SnapshotView):
            view.show(snapshot)

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        app = self.app
        if isinstance(app, KubedeckApp):
            app.post_session_event(KeyPressed(event.key, event.character))


class KubedeckApp(App[None], inherit_bindings=False):
    """TUI application for a live Kubernetes session.

    Args:
        client: Cluster capability the session talks to.
        config: Session settings.
        context: Initial kubeconfig context.
        namespace: Initial namespace, or ``"all"``.
        resource_type: Initial resource type.
        editor: Editor override; defaults to the operator's ``$EDITOR``,
            run with the terminal suspended.
    """

    TITLE = "kubedeck"
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        client: ClusterClient,
        config: SessionConfig,
        *,
        context: str | None = None,
        namespace: str | None = None,
        resource_type: ResourceType = ResourceType.PODS,
        editor: Editor | None = None,
    ) -> None:
        super().__init__()
        self._mux = EventMultiplexer(config.queue_capacity, config.tick_interval)
        self._controller = SessionController(
            client,
            self._mux,
            config,
            editor or ExternalEditor(config.editor, suspend=self.suspend),
            context=context,
            namespace=namespace,
            resource_type=resource_type,
        )

    @property
    def controller(self) -> SessionController:
        return self._controller

    def on_mount(self) -> None:
        """Push the session screen and start the controller."""
        self.push_screen(SessionScreen())
        self.post_session_event(Resized(self.size.width, self.size.height))
        self.run_worker(self._run_session(), name="session", exclusive=True)

    async def _run_session(self) -> None:
        try:
            await self._controller.run(render=self.show_snapshot)
        finally:
            logger.debug("session_worker_finished")
            self.exit()

    def on_resize(self, event: events.Resize) -> None:
        self.post_session_event(Resized(event.size.width, event.size.height))

    def post_session_event(self, event: Event) -> None:
        self._mux.post(event)

    def show_snapshot(self, snapshot: RenderSnapshot) -> None:
        screen = self.screen
        if isinstance(screen, SessionScreen):
            screen.show(snapshot)
