"""Lifecycle of the single active watch subscription.

One :class:`WatchSession` is live at a time. It lists the target to fill
its cache, then follows the watch stream. When the stream fails or ends it
reconnects with exponential backoff and jitter, keeping the last known
items visible (flagged stale) until a resync succeeds or the staleness
timeout expires.
"""

from __future__ import annotations

import asyncio
import contextlib
import random
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from kubedeck.integrations.kubernetes.exceptions import KubernetesError
from kubedeck.session.cache import ResourceCache
from kubedeck.session.events import BannerRequested, CacheChanged, WatchStatusChanged
from kubedeck.session.types import BannerLevel, WatchState

if TYPE_CHECKING:
    from collections.abc import Callable

    from kubedeck.core.config import SessionConfig
    from kubedeck.session.multiplexer import EventMultiplexer
    from kubedeck.session.protocols import ClusterClient
    from kubedeck.session.types import WatchTarget

logger = structlog.get_logger()


@dataclass
class WatchSession:
    """State of one subscription; identified by its generation id."""

    generation: int
    target: WatchTarget
    cache: ResourceCache
    state: WatchState = WatchState.CONNECTING
    attempt: int = 0
    next_retry_at: datetime | None = None
    reason: str | None = None
    has_been_active: bool = False
    offline: bool = False
    stale_since: float | None = field(default=None, repr=False)
    task: asyncio.Task[None] | None = field(default=None, repr=False)

    @property
    def live(self) -> bool:
        return self.state is not WatchState.STOPPED


class WatchSessionManager:
    """Starts, stops and reconnects watch sessions.

    Transport and API failures never escape: they turn into status events
    and banners posted to the multiplexer.

    Args:
        client: Cluster capability used for list and watch.
        mux: Multiplexer receiving cache and status notifications.
        config: Backoff and staleness settings.
        jitter: Source of uniform jitter in [-1, 1]; replaceable in tests.
    """

    def __init__(
        self,
        client: ClusterClient,
        mux: EventMultiplexer,
        config: SessionConfig,
        jitter: Callable[[], float] | None = None,
    ) -> None:
        self._client = client
        self._mux = mux
        self._config = config
        self._jitter = jitter or (lambda: random.uniform(-1.0, 1.0))
        self._session: WatchSession | None = None
        self._generation = 0
        self._log = logger.bind(component="watch")

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def session(self) -> WatchSession | None:
        return self._session

    @property
    def cache(self) -> ResourceCache | None:
        return self._session.cache if self._session else None

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        """True if ``generation`` belongs to the live session."""
        return (
            self._session is not None
            and self._session.live
            and self._session.generation == generation
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self, target: WatchTarget) -> WatchSession:
        """Stop the current session, then start one for ``target``.

        The new session gets a fresh cache; the old cache is discarded.
        """
        await self.stop()

        self._generation += 1
        session = WatchSession(
            generation=self._generation,
            target=target,
            cache=ResourceCache(target),
        )
        self._session = session
        self._log.info("watch_starting", target=str(target), generation=session.generation)
        self._post_status(session)
        session.task = self._mux.spawn(self._run(session), name=f"watch-{session.generation}")
        return session

    async def stop(self) -> None:
        """Stop the live session, cancelling its stream and any retry timer."""
        session = self._session
        if session is None or not session.live:
            return
        session.state = WatchState.STOPPED
        session.next_retry_at = None
        task = session.task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._log.info("watch_stopped", target=str(session.target), generation=session.generation)

    def backoff_delay(self, attempt: int) -> float:
        """Delay before reconnect ``attempt`` (1-based), jittered and capped."""
        cfg = self._config
        delay = min(cfg.backoff_cap, cfg.backoff_base * 2 ** max(0, attempt - 1))
        delay += delay * cfg.backoff_jitter * self._jitter()
        return max(0.0, min(cfg.backoff_cap, delay))

    # =========================================================================
    # Session loop
    # =========================================================================

    async def _run(self, session: WatchSession) -> None:
        target = session.target
        while session.live:
            failed = False
            try:
                items = await self._client.list(
                    target.context, target.namespace, target.resource_type
                )
                session.cache.resync(items)
                self._mark_active(session)
                self._mux.post(CacheChanged(session.generation, session.cache.version))

                stream = self._client.watch(
                    target.context,
                    target.namespace,
                    target.resource_type,
                    resource_version=items.resource_version,
                )
                async with contextlib.aclosing(stream):
                    async for event_type, item in stream:
                        if session.cache.apply(event_type, item):
                            self._mux.post(CacheChanged(session.generation, session.cache.version))
                reason = "watch stream ended"
            except KubernetesError as e:
                reason = str(e)
                failed = e.terminal
            except Exception as e:
                self._log.error(
                    "watch_unexpected_error", target=str(target), error=str(e), exc_info=True
                )
                reason = str(e) or type(e).__name__

            await self._reconnect_wait(session, reason, failed=failed)

    def _mark_active(self, session: WatchSession) -> None:
        if session.attempt:
            self._log.info(
                "watch_reconnected", target=str(session.target), attempts=session.attempt
            )
        session.state = WatchState.ACTIVE
        session.attempt = 0
        session.next_retry_at = None
        session.reason = None
        session.has_been_active = True
        session.offline = False
        session.stale_since = None
        self._post_status(session)

    async def _reconnect_wait(
        self, session: WatchSession, reason: str, failed: bool = False
    ) -> None:
        # Permission and missing-resource errors are reported as Failed but
        # still retried: RBAC or the namespace may be fixed underneath us.
        previous = session.state
        session.attempt += 1
        delay = self.backoff_delay(session.attempt)
        session.state = WatchState.FAILED if failed else WatchState.RECONNECTING
        session.reason = reason
        session.next_retry_at = datetime.now(UTC) + timedelta(seconds=delay)

        if session.has_been_active and not session.offline and session.stale_since is None:
            session.stale_since = time.monotonic()
            session.cache.mark_stale()
        elif not session.has_been_active:
            session.offline = True

        self._log.warning(
            "watch_reconnecting",
            target=str(session.target),
            attempt=session.attempt,
            delay_s=round(delay, 3),
            reason=reason,
        )
        self._post_status(session)
        # Later attempts only update the status line, so they do not push
        # out an action outcome banner
        if session.attempt == 1 or session.state is not previous:
            self._mux.post(
                BannerRequested(
                    f"{session.target}: {reason}; retrying in {delay:.0f}s",
                    BannerLevel.WARNING,
                )
            )

        deadline = time.monotonic() + delay
        expire_at = self._stale_expiry(session)
        if expire_at is not None and expire_at <= deadline:
            await asyncio.sleep(max(0.0, expire_at - time.monotonic()))
            self._expire_stale(session)
        await asyncio.sleep(max(0.0, deadline - time.monotonic()))

    def _stale_expiry(self, session: WatchSession) -> float | None:
        if session.stale_since is None or session.offline:
            return None
        return session.stale_since + self._config.staleness_timeout

    def _expire_stale(self, session: WatchSession) -> None:
        """Drop stale items once they are too old to be trusted."""
        session.cache.clear()
        session.offline = True
        self._log.warning(
            "watch_cache_expired",
            target=str(session.target),
            staleness_timeout=self._config.staleness_timeout,
        )
        self._mux.post(CacheChanged(session.generation, session.cache.version))
        self._post_status(session)

    def _post_status(self, session: WatchSession) -> None:
        self._mux.post(
            WatchStatusChanged(
                generation=session.generation,
                target=session.target,
                state=session.state,
                attempt=session.attempt,
                next_retry_at=session.next_retry_at,
                reason=session.reason,
                stale=session.cache.stale,
                offline=session.offline,
            )
        )
