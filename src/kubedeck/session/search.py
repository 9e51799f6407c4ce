"""Search across every context of the kubeconfig.

A scan lists each resource type in all namespaces of every context and
posts the items to the multiplexer batch by batch, so results show up
while slower clusters are still answering. The query is matched against
item names with :func:`fuzzy_score`; the same scorer narrows the
context, namespace and type selectors while the operator types.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from kubedeck.integrations.kubernetes.exceptions import (
    KubernetesConnectionError,
    KubernetesError,
)
from kubedeck.session.events import SearchResultsBatch, SearchScanComplete
from kubedeck.session.types import ALL_NAMESPACES, RESOURCE_TYPE_ORDER, ResourceRef

if TYPE_CHECKING:
    from kubedeck.integrations.kubernetes.models import ResourceItemBase
    from kubedeck.session.multiplexer import EventMultiplexer
    from kubedeck.session.protocols import ClusterClient
    from kubedeck.session.types import ResourceType

logger = structlog.get_logger()

SEARCH_COLUMNS = ("NAME", "TYPE", "NAMESPACE", "CONTEXT")

WORD_SEPARATORS = "-_/"


# =============================================================================
# Matching
# =============================================================================


def fuzzy_score(query: str, candidate: str) -> int | None:
    """Score ``candidate`` against ``query``, case-insensitively.

    The query characters must appear in order in the candidate. Each match
    earns a point, more when it follows the previous match or starts a
    word (after ``-``, ``_`` or ``/``), and shorter candidates score
    higher.

    Returns:
        The score, or None when the candidate does not match.
    """
    needle = query.lower()
    if not needle:
        return 0
    haystack = candidate.lower()
    score = 0
    matched = 0
    previous = False
    for index, char in enumerate(haystack):
        if matched < len(needle) and char == needle[matched]:
            score += 1
            if previous:
                score += 2
            if index == 0 or haystack[index - 1] in WORD_SEPARATORS:
                score += 3
            previous = True
            matched += 1
        else:
            previous = False
    if matched < len(needle):
        return None
    return score + max(0, 100 - len(haystack))


def rank(query: str, candidates: Sequence[str]) -> list[int]:
    """Indices of the candidates matching ``query``, best first.

    Equal scores keep their original order; an empty query keeps every
    candidate in order.
    """
    if not query:
        return list(range(len(candidates)))
    scored = [
        (score, index)
        for index, candidate in enumerate(candidates)
        if (score := fuzzy_score(query, candidate)) is not None
    ]
    scored.sort(key=lambda pair: -pair[0])
    return [index for _, index in scored]


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class SearchResult:
    """An item found in some context."""

    context: str
    resource_type: ResourceType
    item: ResourceItemBase

    @property
    def ref(self) -> ResourceRef:
        return ResourceRef(self.resource_type, self.item.namespace, self.item.name)

    def row(self) -> tuple[str, ...]:
        return (self.item.name, self.resource_type.label, self.item.namespace, self.context)


@dataclass
class SearchState:
    """Query, results and selection of the Search view."""

    query: str = ""
    results: list[SearchResult] = field(default_factory=list)
    matches: list[int] = field(default_factory=list)
    index: int = 0
    contexts_total: int = 0
    contexts_done: int = 0
    opened: SearchResult | None = None

    @property
    def scanning(self) -> bool:
        return self.contexts_done < self.contexts_total

    @property
    def selected(self) -> SearchResult | None:
        if 0 <= self.index < len(self.matches):
            return self.results[self.matches[self.index]]
        return None

    @property
    def status(self) -> str:
        found = f"{len(self.matches)} found"
        if self.scanning:
            return f"{found}, scanning {self.contexts_done}/{self.contexts_total} contexts"
        return found

    def add(self, results: Sequence[SearchResult]) -> None:
        """Append results, keeping the selected result selected."""
        self.results.extend(results)
        self._refilter(self.selected)

    def set_query(self, query: str) -> None:
        self.query = query
        self.index = 0
        self._refilter(None)

    def move(self, step: int) -> None:
        """Move the selection, wrapping at both ends."""
        if self.matches:
            self.index = (self.index + step) % len(self.matches)

    def rows(self) -> tuple[tuple[str, ...], ...]:
        return tuple(self.results[i].row() for i in self.matches)

    def _refilter(self, keep: SearchResult | None) -> None:
        self.matches = rank(self.query, [r.item.name for r in self.results])
        if keep is not None:
            self.index = next(
                (pos for pos, i in enumerate(self.matches) if self.results[i] is keep), 0
            )
        self.index = min(self.index, max(0, len(self.matches) - 1))


# =============================================================================
# Scanning
# =============================================================================


class SearchScanner:
    """Lists every resource type in every context for one search.

    Each context is scanned by its own task, one type after another. A
    new scan cancels the previous one; its batches carry the old
    generation id and are ignored.

    Args:
        client: Cluster capability used for the list calls.
        mux: Multiplexer receiving result batches.
    """

    def __init__(self, client: ClusterClient, mux: EventMultiplexer) -> None:
        self._client = client
        self._mux = mux
        self._generation = 0
        self._tasks: set[asyncio.Task[Any]] = set()
        self._log = logger.bind(component="search")

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def active(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def start(self, contexts: Sequence[str]) -> int:
        """Stop any running scan and scan ``contexts``."""
        await self.stop()
        self._generation += 1
        self._log.info("search_scan_starting", contexts=len(contexts), generation=self._generation)
        for context in contexts:
            task = self._mux.spawn(
                self._scan(self._generation, context), name=f"search-{context}"
            )
            self._tasks.add(task)
        return self._generation

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, set()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if tasks:
            # Late batches from the cancelled scan are dropped by generation
            self._generation += 1

    async def _scan(self, generation: int, context: str) -> None:
        for resource_type in RESOURCE_TYPE_ORDER:
            try:
                items = await self._client.list(context, ALL_NAMESPACES, resource_type)
            except KubernetesError as e:
                self._log.warning(
                    "search_list_failed",
                    context=context,
                    kind=resource_type.kind,
                    error=str(e),
                )
                self._mux.post(
                    SearchResultsBatch(generation, context, resource_type, (), error=str(e))
                )
                if isinstance(e, KubernetesConnectionError):
                    # The other types would time out the same way
                    break
                continue
            self._mux.post(SearchResultsBatch(generation, context, resource_type, tuple(items)))
        self._log.debug("search_scan_complete", context=context, generation=generation)
        self._mux.post(SearchScanComplete(generation, context))
