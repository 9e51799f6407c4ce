"""Log streaming with follow/pause buffering.

:class:`LogStreamer` owns at most one log subscription and the
:class:`LogBuffer` it fills. The buffer keeps a viewport offset: while
following, the offset is pinned to the tail; while paused, new lines are
appended without moving the viewport.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections import deque
from itertools import islice
from typing import TYPE_CHECKING

import structlog

from kubedeck.integrations.kubernetes.exceptions import KubernetesError
from kubedeck.session.events import BannerRequested, LogLinesAppended, LogStreamEnded
from kubedeck.session.types import BannerLevel

if TYPE_CHECKING:
    from collections.abc import Iterable

    from kubedeck.core.config import SessionConfig
    from kubedeck.session.multiplexer import EventMultiplexer
    from kubedeck.session.protocols import ClusterClient
    from kubedeck.session.types import ResourceRef

logger = structlog.get_logger()


class LogBuffer:
    """Bounded log lines plus a viewport offset.

    Args:
        max_lines: Lines retained; the oldest are evicted first.
        viewport_height: Lines visible at once.
    """

    def __init__(self, max_lines: int = 5000, viewport_height: int = 20) -> None:
        self._lines: deque[str] = deque(maxlen=max_lines)
        self.viewport_height = max(1, viewport_height)
        self.follow_enabled = True
        self.offset = 0

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def max_offset(self) -> int:
        return max(0, len(self._lines) - self.viewport_height)

    def append(self, lines: Iterable[str]) -> int:
        """Append lines, returning how many were added."""
        added = evicted = 0
        maxlen = self._lines.maxlen
        for line in lines:
            if maxlen is not None and len(self._lines) == maxlen:
                evicted += 1
            self._lines.append(line)
            added += 1

        if self.follow_enabled:
            self.offset = self.max_offset
        else:
            # Keep the same lines on screen as older ones fall off the front
            self.offset = min(max(0, self.offset - evicted), self.max_offset)
        return added

    # =========================================================================
    # Viewport
    # =========================================================================

    def set_follow(self, enabled: bool) -> None:
        self.follow_enabled = enabled
        if enabled:
            self.offset = self.max_offset

    def toggle_follow(self) -> bool:
        self.set_follow(not self.follow_enabled)
        return self.follow_enabled

    def scroll(self, delta: int) -> None:
        self.offset = min(max(0, self.offset + delta), self.max_offset)

    def scroll_to_top(self) -> None:
        self.offset = 0

    def scroll_to_bottom(self) -> None:
        self.offset = self.max_offset

    def set_viewport_height(self, height: int) -> None:
        self.viewport_height = max(1, height)
        if self.follow_enabled:
            self.offset = self.max_offset
        else:
            self.offset = min(self.offset, self.max_offset)

    # =========================================================================
    # Reads
    # =========================================================================

    def lines(self) -> list[str]:
        return list(self._lines)

    def visible(self) -> list[str]:
        end = self.offset + self.viewport_height
        return list(islice(self._lines, self.offset, end))

    def text(self) -> str:
        return "\n".join(self._lines)


class LogStreamer:
    """Owns the single active log subscription.

    Starting a stream always stops the previous one first. Streams are not
    retried: an end or error leaves a marker line in the buffer and posts a
    banner, and the operator reopens the view (or cycles the container) to
    resubscribe.
    """

    def __init__(
        self,
        client: ClusterClient,
        mux: EventMultiplexer,
        config: SessionConfig,
    ) -> None:
        self._client = client
        self._mux = mux
        self._config = config
        self._buffer: LogBuffer | None = None
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self.context: str | None = None
        self.pod: ResourceRef | None = None
        self.container: str | None = None
        self.ended = False
        self.end_reason: str | None = None
        self._log = logger.bind(component="logs")

    @property
    def buffer(self) -> LogBuffer | None:
        return self._buffer

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def is_current(self, generation: int) -> bool:
        return self._buffer is not None and generation == self._generation

    async def start(
        self,
        context: str,
        pod: ResourceRef,
        container: str | None = None,
        viewport_height: int = 20,
    ) -> LogBuffer:
        """Stop any current stream and subscribe to ``pod``'s logs."""
        await self.stop()

        self._generation += 1
        buffer = LogBuffer(self._config.log_buffer_lines, viewport_height)
        self._buffer = buffer
        self.context = context
        self.pod = pod
        self.container = container
        self.ended = False
        self.end_reason = None
        self._log.info(
            "log_stream_starting",
            pod=str(pod.key),
            container=container,
            generation=self._generation,
        )
        self._task = self._mux.spawn(
            self._run(self._generation, context, pod, container, buffer),
            name=f"logs-{self._generation}",
        )
        return buffer

    async def stop(self) -> None:
        """Cancel the stream and drop the buffer."""
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            self._log.info("log_stream_stopped", pod=str(self.pod.key) if self.pod else None)
        self._buffer = None
        self.pod = None
        self.container = None

    async def _run(
        self,
        generation: int,
        context: str,
        pod: ResourceRef,
        container: str | None,
        buffer: LogBuffer,
    ) -> None:
        reason: str | None = None
        stream = self._client.stream_logs(
            context, pod, follow=True, container=container, tail_lines=self._config.log_tail_lines
        )
        try:
            async with contextlib.aclosing(stream):
                async for line in stream:
                    buffer.append((line,))
                    self._mux.post(LogLinesAppended(generation, 1))
        except KubernetesError as e:
            reason = str(e)
        except Exception as e:
            self._log.error("log_stream_unexpected_error", pod=str(pod.key), exc_info=True)
            reason = str(e) or type(e).__name__

        self.ended = True
        self.end_reason = reason
        if reason is None:
            buffer.append(("--- log stream ended ---",))
            self._log.info("log_stream_ended", pod=str(pod.key), container=container)
            self._mux.post(BannerRequested(f"Log stream for {pod.name} ended", BannerLevel.INFO))
        else:
            buffer.append((f"--- log stream error: {reason} ---",))
            self._log.warning(
                "log_stream_failed", pod=str(pod.key), container=container, reason=reason
            )
            self._mux.post(BannerRequested(f"Logs for {pod.name}: {reason}", BannerLevel.ERROR))
        self._mux.post(LogStreamEnded(generation, reason))
