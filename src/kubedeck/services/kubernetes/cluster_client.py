"""Asynchronous cluster access over the synchronous kubernetes client.

Every blocking call runs in a worker thread. Streams (watch events, log
lines) are advanced one item per thread hop, so cancelling the consuming
task is observed between items.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import socket
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from kubedeck.integrations.kubernetes.exceptions import (
    KubernetesError,
    KubernetesValidationError,
)
from kubedeck.integrations.kubernetes.models import item_from_k8s_object
from kubedeck.services.kubernetes.base import K8sBaseManager
from kubedeck.services.kubernetes.resource_helpers import (
    delete_resource,
    list_function,
    manifest_yaml,
    patch_resource,
    read_resource,
    replace_resource,
    restart_patch_body,
)
from kubedeck.session.protocols import ClusterContext, ResourceList
from kubedeck.session.types import RESTARTABLE_TYPES, ResourceType, WatchEventType
from kubedeck.utils.manifest import parse_manifest

if TYPE_CHECKING:
    from kubedeck.integrations.kubernetes.models import ResourceItemBase
    from kubedeck.session.types import ResourceRef

_END = object()

_WATCH_EVENT_TYPES = frozenset(t.value for t in WatchEventType)


def _shutdown_socket(response: Any) -> None:
    """Unblock a thread reading ``response`` so closing it does not wait on the read.

    Closing a urllib3 response takes the lock held by a thread blocked in a
    read, so the socket is shut down first, as ``kubernetes.watch.Watch.stop``
    does in recent client releases.
    """
    sock = getattr(getattr(response, "connection", None), "sock", None)
    if sock is None:
        return
    with contextlib.suppress(OSError):
        sock.shutdown(socket.SHUT_RDWR)


def _release(response: Any) -> None:
    response.close()
    response.release_conn()


class KubernetesClusterClient(K8sBaseManager):
    """Cluster access for the session engine, one kubeconfig at a time."""

    _entity_name = "cluster"

    # =========================================================================
    # Contexts & Namespaces
    # =========================================================================

    async def list_contexts(self) -> list[ClusterContext]:
        """List kubeconfig contexts; empty in offline mode."""
        current = self._client.get_current_context()
        return [
            ClusterContext(
                name=c["name"],
                cluster=c["cluster"],
                namespace=c["namespace"],
                current=c["name"] == current,
            )
            for c in self._client.list_contexts()
        ]

    async def set_current_context(self, context: str) -> None:
        self._client.set_current_context(context)

    async def list_namespaces(self, context: str) -> list[str]:
        """List namespace names in a context, sorted.

        Transient connection failures are retried with backoff.
        """
        retry_decorator = self._client.make_retry_decorator()

        @retry_decorator
        def _list() -> list[str]:
            try:
                result = self._client.core_v1(context).list_namespace(
                    _request_timeout=self._client.timeout
                )
            except Exception as e:
                self._handle_api_error(e, "Namespace")
            return sorted(ns.metadata.name for ns in result.items)

        self._log.debug("listing_namespaces", context=context)
        return await asyncio.to_thread(_list)

    # =========================================================================
    # List & Watch
    # =========================================================================

    async def list(
        self, context: str, namespace: str, resource_type: ResourceType
    ) -> ResourceList:
        """List items of a type for the initial fill and every resync."""
        ns = self._resolve_namespace(namespace)
        kind = resource_type.kind

        def _list() -> ResourceList:
            try:
                fn, kwargs = list_function(self._client, context, resource_type, ns)
                result = fn(**kwargs, _request_timeout=self._client.timeout)
            except Exception as e:
                self._handle_api_error(e, kind, namespace=ns)
            items = [item_from_k8s_object(kind, obj) for obj in result.items or []]
            version = getattr(result.metadata, "resource_version", None)
            return ResourceList(items, resource_version=version)

        self._log.debug("listing_resources", context=context, namespace=namespace, kind=kind)
        return await asyncio.to_thread(_list)

    async def watch(
        self,
        context: str,
        namespace: str,
        resource_type: ResourceType,
        resource_version: str | None = None,
    ) -> AsyncIterator[tuple[WatchEventType, ResourceItemBase]]:
        """Stream Added/Modified/Deleted events for a collection.

        The stream never times out on its own; it ends when the consumer
        closes it or raises on transport/API failure.
        """
        from kubernetes import watch

        ns = self._resolve_namespace(namespace)
        kind = resource_type.kind
        try:
            fn, kwargs = list_function(self._client, context, resource_type, ns)
        except Exception as e:
            self._handle_api_error(e, kind, namespace=ns)
        kwargs["allow_watch_bookmarks"] = True
        if resource_version:
            kwargs["resource_version"] = resource_version

        # Watch.stream keeps its response to itself; record it so stopping
        # can shut the socket down under a thread blocked on it
        responses: list[Any] = []

        @functools.wraps(fn)
        def _open_watch(*args: Any, **kw: Any) -> Any:
            response = fn(*args, **kw)
            responses.append(response)
            return response

        w = watch.Watch()
        stream = w.stream(_open_watch, **kwargs)
        self._log.debug(
            "watch_opened",
            context=context,
            namespace=namespace,
            kind=kind,
            resource_version=resource_version,
        )
        try:
            while True:
                try:
                    event = await asyncio.to_thread(next, stream, _END)
                except Exception as e:
                    self._handle_api_error(e, kind, namespace=ns)
                if event is _END:
                    return
                event_type = event.get("type")
                if event_type == "ERROR":
                    raw = event.get("raw_object") or {}
                    raise KubernetesError(
                        message=raw.get("message") or "watch error",
                        status_code=raw.get("code"),
                        resource_type=kind,
                        namespace=ns,
                    )
                if event_type not in _WATCH_EVENT_TYPES:
                    continue
                yield WatchEventType(event_type), item_from_k8s_object(kind, event["object"])
        finally:
            w.stop()
            if responses:
                _shutdown_socket(responses[-1])
            self._log.debug("watch_closed", context=context, namespace=namespace, kind=kind)

    # =========================================================================
    # Mutations
    # =========================================================================

    async def delete(self, context: str, ref: ResourceRef) -> None:
        kind = ref.resource_type.kind
        self._log.info("deleting_resource", context=context, kind=kind, ref=str(ref.key))

        def _delete() -> None:
            try:
                delete_resource(
                    self._client, context, ref.resource_type, ref.name, ref.namespace
                )
            except Exception as e:
                self._handle_api_error(e, kind, ref.name, ref.namespace)

        await asyncio.to_thread(_delete)

    async def patch_restart(self, context: str, ref: ResourceRef) -> None:
        """Trigger a rollout restart of a StatefulSet."""
        kind = ref.resource_type.kind
        if ref.resource_type not in RESTARTABLE_TYPES:
            raise KubernetesValidationError(
                message=f"{kind} does not support rollout restart", status_code=None
            )
        self._log.info("restarting_resource", context=context, kind=kind, ref=str(ref.key))
        body = restart_patch_body()

        def _patch() -> None:
            try:
                patch_resource(
                    self._client, context, ref.resource_type, ref.name, ref.namespace, body
                )
            except Exception as e:
                self._handle_api_error(e, kind, ref.name, ref.namespace)

        await asyncio.to_thread(_patch)

    async def get_manifest(self, context: str, ref: ResourceRef) -> str:
        """Fetch the editable YAML manifest of a resource."""
        kind = ref.resource_type.kind

        def _get() -> str:
            try:
                raw = read_resource(
                    self._client, context, ref.resource_type, ref.name, ref.namespace
                )
            except Exception as e:
                self._handle_api_error(e, kind, ref.name, ref.namespace)
            return manifest_yaml(raw)

        return await asyncio.to_thread(_get)

    async def apply_manifest(self, context: str, ref: ResourceRef, text: str) -> None:
        """Replace the object with an edited manifest.

        Fields removed in the editor are removed from the object.

        Raises:
            ManifestParseError: If the text does not parse; nothing is sent.
            KubernetesError: If the API rejects the update.
        """
        kind = ref.resource_type.kind
        body = parse_manifest(text, name=ref.name)
        self._log.info("applying_manifest", context=context, kind=kind, ref=str(ref.key))

        def _apply() -> None:
            try:
                replace_resource(
                    self._client, context, ref.resource_type, ref.name, ref.namespace, body
                )
            except Exception as e:
                self._handle_api_error(e, kind, ref.name, ref.namespace)

        await asyncio.to_thread(_apply)

    # =========================================================================
    # Log Streaming
    # =========================================================================

    async def stream_logs(
        self,
        context: str,
        ref: ResourceRef,
        follow: bool = True,
        container: str | None = None,
        tail_lines: int | None = None,
    ) -> AsyncIterator[str]:
        """Stream log lines of a pod container."""
        kwargs: dict[str, Any] = {
            "name": ref.name,
            "namespace": ref.namespace,
            "follow": follow,
            "_preload_content": False,
        }
        if container:
            kwargs["container"] = container
        if tail_lines is not None:
            kwargs["tail_lines"] = tail_lines

        def _open() -> Any:
            try:
                return self._client.core_v1(context).read_namespaced_pod_log(**kwargs)
            except Exception as e:
                self._handle_api_error(e, "Pod", ref.name, ref.namespace)

        self._log.debug(
            "streaming_logs", context=context, pod=ref.name, container=container, follow=follow
        )
        response = await asyncio.to_thread(_open)
        lines = iter(response)
        try:
            while True:
                try:
                    line = await asyncio.to_thread(next, lines, _END)
                except Exception as e:
                    self._handle_api_error(e, "Pod", ref.name, ref.namespace)
                if line is _END:
                    return
                if isinstance(line, bytes):
                    yield line.decode("utf-8", errors="replace").rstrip("\r\n")
                else:
                    yield str(line).rstrip("\r\n")
        finally:
            # A worker may still be blocked reading; free it, then close off the loop
            _shutdown_socket(response)
            await asyncio.to_thread(_release, response)
