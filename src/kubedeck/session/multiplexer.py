"""Ordered fan-in of every event source into one consumer.

Producers call :meth:`EventMultiplexer.post` (never blocks) or run as tasks
registered with :meth:`EventMultiplexer.spawn`; the controller consumes
the merged stream with ``async for``.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Coroutine
from typing import Any

import structlog

from kubedeck.session.events import Event, Tick

logger = structlog.get_logger()


class EventMultiplexer:
    """Bounded, arrival-ordered event queue with owned producer tasks.

    The bound only applies to ticks: when the queue is full the oldest
    pending tick is evicted to make room, and an incoming tick is dropped
    if there is none to evict. Input and notifications are always queued.

    Args:
        capacity: Queue length at which ticks start being shed.
        tick_interval: Seconds between tick events.
    """

    def __init__(self, capacity: int = 256, tick_interval: float = 0.25) -> None:
        self._capacity = capacity
        self._tick_interval = tick_interval
        self._queue: deque[Event] = deque()
        self._wakeup = asyncio.Event()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False
        self.dropped_ticks = 0
        self._log = logger.bind(component="multiplexer")

    # =========================================================================
    # Producers
    # =========================================================================

    def post(self, event: Event) -> bool:
        """Queue an event without blocking.

        Returns:
            False if the event was dropped (closed stream or shed tick).
        """
        if self._closed:
            return False
        if len(self._queue) >= self._capacity:
            evicted = self._evict_oldest_tick()
            if not evicted and isinstance(event, Tick):
                self.dropped_ticks += 1
                return False
        self._queue.append(event)
        self._wakeup.set()
        return True

    def _evict_oldest_tick(self) -> bool:
        for index, pending in enumerate(self._queue):
            if isinstance(pending, Tick):
                del self._queue[index]
                self.dropped_ticks += 1
                return True
        return False

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task[Any]:
        """Run a producer or background coroutine owned by the multiplexer.

        Owned tasks are cancelled by :meth:`shutdown`.
        """
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.error(
                "task_failed",
                task=task.get_name(),
                error=str(exc),
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    def start_ticks(self) -> asyncio.Task[Any]:
        """Start the periodic tick producer."""
        return self.spawn(self._tick_loop(), name="tick")

    async def _tick_loop(self) -> None:
        while not self._closed:
            await asyncio.sleep(self._tick_interval)
            self.post(Tick())

    # =========================================================================
    # Consumer
    # =========================================================================

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return len(self._queue)

    async def get(self) -> Event:
        """Wait for the next event.

        Raises:
            StopAsyncIteration: Once the stream is closed.
        """
        while not self._queue:
            if self._closed:
                raise StopAsyncIteration
            self._wakeup.clear()
            await self._wakeup.wait()
        if self._closed:
            raise StopAsyncIteration
        return self._queue.popleft()

    def __aiter__(self) -> EventMultiplexer:
        return self

    async def __anext__(self) -> Event:
        return await self.get()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def shutdown(self) -> None:
        """Cancel every owned task and close the stream."""
        if self._closed:
            return
        self._closed = True
        self._queue.clear()
        self._wakeup.set()

        tasks = [t for t in self._tasks if t is not asyncio.current_task()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._log.debug("multiplexer_shutdown", cancelled=len(tasks))
