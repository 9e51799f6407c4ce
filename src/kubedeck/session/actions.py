"""Mutating operations against the cluster.

Each accepted request runs as its own task and reports exactly one
:class:`ActionCompleted` through the multiplexer. The cache is never
touched here; a successful mutation shows up through the watch.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from kubedeck.integrations.kubernetes.exceptions import KubernetesError, ManifestParseError
from kubedeck.session.events import ActionCompleted
from kubedeck.session.types import (
    DELETABLE_TYPES,
    EDITABLE_TYPES,
    RESTARTABLE_TYPES,
    ActionKind,
)
from kubedeck.utils.manifest import parse_manifest

if TYPE_CHECKING:
    from kubedeck.session.multiplexer import EventMultiplexer
    from kubedeck.session.protocols import ClusterClient
    from kubedeck.session.types import ResourceRef

logger = structlog.get_logger()

_ALLOWED_TYPES = {
    ActionKind.DELETE: DELETABLE_TYPES,
    ActionKind.RESTART: RESTARTABLE_TYPES,
    ActionKind.EDIT_APPLY: EDITABLE_TYPES,
}


@dataclass(frozen=True)
class ActionRequest:
    """A mutation to run against ``target`` in ``context``.

    ``manifest`` carries the edited text for EDIT_APPLY.
    """

    kind: ActionKind
    context: str
    target: ResourceRef
    manifest: str | None = None

    def describe(self) -> str:
        verb = {
            ActionKind.DELETE: "Deleted",
            ActionKind.RESTART: "Restarted",
            ActionKind.EDIT_APPLY: "Applied changes to",
        }[self.kind]
        return f"{verb} {self.target.resource_type.kind} {self.target.key}"


class ActionPipeline:
    """Runs at most one action at a time.

    A request submitted while another is in flight is rejected with a
    Failure outcome rather than queued, so outcomes map one-to-one onto
    operator confirmations.
    """

    def __init__(self, client: ClusterClient, mux: EventMultiplexer) -> None:
        self._client = client
        self._mux = mux
        self._task: asyncio.Task[None] | None = None
        self._log = logger.bind(component="actions")

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, request: ActionRequest) -> bool:
        """Start ``request`` without waiting for it.

        Returns:
            True if the request was accepted and is running. A rejected
            request has already had its Failure posted.
        """
        rejection = self._validate(request)
        if rejection is not None:
            self._log.warning(
                "action_rejected",
                kind=request.kind.value,
                target=str(request.target),
                reason=rejection,
            )
            self._complete(request, False, rejection)
            return False

        self._log.info("action_submitted", kind=request.kind.value, target=str(request.target))
        self._task = self._mux.spawn(self._run(request), name=f"action-{request.kind.value}")
        return True

    def _validate(self, request: ActionRequest) -> str | None:
        if self.in_flight:
            return "another action is in progress"
        if request.target.resource_type not in _ALLOWED_TYPES[request.kind]:
            return (
                f"{request.kind.value.replace('_', ' ')} is not supported for "
                f"{request.target.resource_type.label}"
            )
        if request.kind is ActionKind.EDIT_APPLY and request.manifest is None:
            return "no manifest to apply"
        return None

    async def _run(self, request: ActionRequest) -> None:
        ref = request.target
        try:
            if request.kind is ActionKind.DELETE:
                await self._client.delete(request.context, ref)
            elif request.kind is ActionKind.RESTART:
                await self._client.patch_restart(request.context, ref)
            else:
                manifest = request.manifest or ""
                parse_manifest(manifest, name=ref.name)
                await self._client.apply_manifest(request.context, ref, manifest)
        except ManifestParseError as e:
            self._complete(request, False, str(e))
        except KubernetesError as e:
            self._complete(request, False, str(e))
        except Exception as e:
            self._log.error("action_unexpected_error", target=str(ref), exc_info=True)
            self._complete(request, False, str(e) or type(e).__name__)
        else:
            self._complete(request, True)

    def _complete(self, request: ActionRequest, success: bool, reason: str | None = None) -> None:
        if success:
            self._log.info("action_succeeded", kind=request.kind.value, target=str(request.target))
        else:
            self._log.warning(
                "action_failed", kind=request.kind.value, target=str(request.target), reason=reason
            )
        self._mux.post(ActionCompleted(request.kind, request.target, success, reason))
