"""Shared fixtures for session engine tests.

Provides an in-memory cluster client whose watch and log streams are fed
from asyncio queues, a scripted editor, and helpers to build items and
drain the multiplexer into a controller.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio

from kubedeck.core.config import SessionConfig
from kubedeck.integrations.kubernetes.exceptions import KubernetesNotFoundError
from kubedeck.integrations.kubernetes.models import (
    PersistentVolumeClaimItem,
    PodItem,
    ResourceItemBase,
    StatefulSetItem,
)
from kubedeck.session.controller import SessionController
from kubedeck.session.multiplexer import EventMultiplexer
from kubedeck.session.protocols import ClusterContext, EditResult, ResourceList
from kubedeck.session.types import ALL_NAMESPACES, ResourceRef, ResourceType, WatchEventType

WatchKey = tuple[str, str, ResourceType]


def make_pod(
    name: str,
    namespace: str = "default",
    status: str = "Running",
    containers: list[str] | None = None,
) -> PodItem:
    return PodItem(
        name=name,
        namespace=namespace,
        status=status,
        container_names=containers if containers is not None else ["app"],
        manifest={"kind": "Pod", "metadata": {"name": name, "namespace": namespace}},
    )


def make_sts(name: str, namespace: str = "default", replicas: int = 1) -> StatefulSetItem:
    return StatefulSetItem(
        name=name, namespace=namespace, replicas=replicas, ready_replicas=replicas
    )


def make_pvc(name: str, namespace: str = "default") -> PersistentVolumeClaimItem:
    return PersistentVolumeClaimItem(name=name, namespace=namespace, status="Bound")


class FakeClusterClient:
    """In-memory ClusterClient.

    Items are stored per (context, type) and filtered by namespace on list.
    Watch streams read from a queue per subscription target; push a
    ``(WatchEventType, item)`` tuple, an exception to raise, or None to end
    the stream.
    """

    def __init__(self, contexts: list[ClusterContext] | None = None) -> None:
        self.contexts = (
            contexts
            if contexts is not None
            else [
                ClusterContext("dev", "dev-cluster", "default", current=True),
                ClusterContext("prod", "prod-cluster", "default"),
            ]
        )
        self.current_context: str | None = None
        self.namespaces: dict[str, list[str]] = {
            c.name: ["default", "kube-system"] for c in self.contexts
        }
        self.items: dict[tuple[str, ResourceType], list[ResourceItemBase]] = defaultdict(list)
        self.list_errors: dict[WatchKey, list[Exception]] = defaultdict(list)
        self.list_calls: list[WatchKey] = []
        self.watch_calls: list[WatchKey] = []
        self.open_watches: set[WatchKey] = set()
        self.max_open_watches = 0
        self._watch_queues: dict[WatchKey, asyncio.Queue[Any]] = {}

        self.deleted: list[ResourceRef] = []
        self.restarted: list[ResourceRef] = []
        self.applied: list[tuple[ResourceRef, str]] = []
        self.action_error: Exception | None = None
        self.manifests: dict[ResourceRef, str] = {}

        self.log_lines: dict[str, list[str]] = defaultdict(list)
        self.log_calls: list[tuple[str, str | None]] = []
        self.log_contexts: list[str] = []
        self._log_queues: dict[str, asyncio.Queue[Any]] = {}

    # Directory -------------------------------------------------------------

    async def list_contexts(self) -> list[ClusterContext]:
        return list(self.contexts)

    async def set_current_context(self, context: str) -> None:
        self.current_context = context

    async def list_namespaces(self, context: str) -> list[str]:
        return list(self.namespaces.get(context, []))

    # List & watch ----------------------------------------------------------

    def add(self, context: str, resource_type: ResourceType, *items: ResourceItemBase) -> None:
        self.items[(context, resource_type)].extend(items)

    async def list(
        self, context: str, namespace: str, resource_type: ResourceType
    ) -> ResourceList:
        key = (context, namespace, resource_type)
        self.list_calls.append(key)
        if self.list_errors[key]:
            raise self.list_errors[key].pop(0)
        items = [
            item
            for item in self.items[(context, resource_type)]
            if namespace == ALL_NAMESPACES or item.namespace == namespace
        ]
        return ResourceList(items, resource_version=str(len(self.list_calls)))

    def watch_queue(self, key: WatchKey) -> asyncio.Queue[Any]:
        if key not in self._watch_queues:
            self._watch_queues[key] = asyncio.Queue()
        return self._watch_queues[key]

    def push(self, key: WatchKey, *events: Any) -> None:
        queue = self.watch_queue(key)
        for event in events:
            queue.put_nowait(event)

    async def watch(
        self,
        context: str,
        namespace: str,
        resource_type: ResourceType,
        resource_version: str | None = None,
    ) -> AsyncIterator[tuple[WatchEventType, ResourceItemBase]]:
        key = (context, namespace, resource_type)
        self.watch_calls.append(key)
        self.open_watches.add(key)
        self.max_open_watches = max(self.max_open_watches, len(self.open_watches))
        queue = self.watch_queue(key)
        try:
            while True:
                event = await queue.get()
                if event is None:
                    return
                if isinstance(event, Exception):
                    raise event
                yield event
        finally:
            self.open_watches.discard(key)

    # Mutations -------------------------------------------------------------

    async def delete(self, context: str, ref: ResourceRef) -> None:
        if self.action_error is not None:
            raise self.action_error
        self.deleted.append(ref)

    async def patch_restart(self, context: str, ref: ResourceRef) -> None:
        if self.action_error is not None:
            raise self.action_error
        self.restarted.append(ref)

    async def get_manifest(self, context: str, ref: ResourceRef) -> str:
        if ref not in self.manifests:
            raise KubernetesNotFoundError(
                resource_type=ref.resource_type.kind, resource_name=ref.name
            )
        return self.manifests[ref]

    async def apply_manifest(self, context: str, ref: ResourceRef, text: str) -> None:
        if self.action_error is not None:
            raise self.action_error
        self.applied.append((ref, text))

    # Logs ------------------------------------------------------------------

    def log_queue(self, pod: str) -> asyncio.Queue[Any]:
        if pod not in self._log_queues:
            self._log_queues[pod] = asyncio.Queue()
        return self._log_queues[pod]

    async def stream_logs(
        self,
        context: str,
        ref: ResourceRef,
        follow: bool = True,
        container: str | None = None,
        tail_lines: int | None = None,
    ) -> AsyncIterator[str]:
        self.log_calls.append((ref.name, container))
        self.log_contexts.append(context)
        for line in self.log_lines[ref.name]:
            yield line
        if not follow:
            return
        queue = self.log_queue(ref.name)
        while True:
            line = await queue.get()
            if line is None:
                return
            if isinstance(line, Exception):
                raise line
            yield line


class FakeEditor:
    """Editor returning scripted results and recording what it was given."""

    def __init__(self, result: EditResult | None = None) -> None:
        self.result = result or EditResult.unchanged()
        self.calls: list[tuple[str, str]] = []

    async def edit(self, text: str, suffix: str = ".yaml") -> EditResult:
        self.calls.append((text, suffix))
        return self.result


async def pump(controller: SessionController, mux: EventMultiplexer, rounds: int = 10) -> None:
    """Let background tasks run and feed every queued event to the controller."""
    for _ in range(rounds):
        await asyncio.sleep(0)
        while mux.pending:
            await controller.handle(await mux.get())


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(
        tick_interval=0.25,
        backoff_base=0.01,
        backoff_cap=0.05,
        backoff_jitter=0.0,
        staleness_timeout=5.0,
        banner_duration=1.0,
    )


@pytest.fixture
def fake_client() -> FakeClusterClient:
    return FakeClusterClient()


@pytest.fixture
def fake_editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture
def mux(session_config: SessionConfig) -> EventMultiplexer:
    return EventMultiplexer(session_config.queue_capacity, session_config.tick_interval)


@pytest_asyncio.fixture
async def controller(
    fake_client: FakeClusterClient,
    mux: EventMultiplexer,
    session_config: SessionConfig,
    fake_editor: FakeEditor,
) -> AsyncIterator[SessionController]:
    ctrl = SessionController(fake_client, mux, session_config, fake_editor)
    yield ctrl
    await ctrl.shutdown()
