"""In-memory resource cache materialized from one watch subscription.

Stores display items keyed by :class:`ResourceKey`. Owned and mutated by
the watch session manager only; everyone else reads snapshots, which are
lists of immutable items and therefore safe to hand to the renderer.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from kubedeck.session.types import ResourceKey, WatchEventType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from kubedeck.integrations.kubernetes.models import ResourceItemBase
    from kubedeck.session.types import WatchTarget

logger = structlog.get_logger()


class ResourceCache:
    """Key to item map for one (context, namespace, type) target.

    ``version`` increments on every change so consumers can tell whether a
    snapshot is outdated without comparing contents.

    Example::

        cache = ResourceCache(target)
        cache.resync(items)
        cache.apply(WatchEventType.DELETED, item)
        rows = cache.snapshot("web")
    """

    def __init__(self, target: WatchTarget | None = None) -> None:
        self.target = target
        self._items: dict[ResourceKey, ResourceItemBase] = {}
        self.version = 0
        self.stale = False
        self.last_synced_at: datetime | None = None
        self._log = logger.bind(component="cache", target=str(target) if target else None)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    @staticmethod
    def key_of(item: ResourceItemBase) -> ResourceKey:
        return ResourceKey(item.namespace, item.name)

    # =========================================================================
    # Mutation
    # =========================================================================

    def apply(self, event_type: WatchEventType, item: ResourceItemBase) -> bool:
        """Apply one watch event.

        A Modified event for a key that was never Added is treated as an
        Added; the anomaly is logged.

        Returns:
            True if the cache content changed.
        """
        key = self.key_of(item)
        if event_type == WatchEventType.DELETED:
            if self._items.pop(key, None) is None:
                return False
        else:
            if event_type == WatchEventType.MODIFIED and key not in self._items:
                self._log.warning("cache_modified_absent_key", key=str(key))
            self._items[key] = item
        self.version += 1
        return True

    def resync(self, items: Iterable[ResourceItemBase]) -> None:
        """Replace the whole content with an authoritative list."""
        self._items = {self.key_of(item): item for item in items}
        self.stale = False
        self.last_synced_at = datetime.now(UTC)
        self.version += 1
        self._log.debug("cache_resynced", items=len(self._items))

    def clear(self) -> None:
        if self._items:
            self._items = {}
            self.version += 1
        self.stale = False

    def mark_stale(self) -> None:
        self.stale = True

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, key: ResourceKey) -> ResourceItemBase | None:
        return self._items.get(key)

    def snapshot(self, filter_text: str = "") -> list[ResourceItemBase]:
        """Items whose name contains ``filter_text`` (case-insensitive).

        Ordered by identity key ascending.
        """
        needle = filter_text.casefold()
        return [
            self._items[key]
            for key in sorted(self._items)
            if not needle or needle in key.name.casefold()
        ]
