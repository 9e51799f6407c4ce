"""Base models for Kubernetes resource display."""

from __future__ import annotations

from datetime import UTC, datetime
from functools import lru_cache
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

NONE_VALUE = "<none>"


class ResourceItemBase(BaseModel):
    """Fields shared by every resource variant.

    Items are immutable: every watch event produces a fresh instance, so a
    snapshot handed to the renderer can never change underneath it.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(description="Resource name")
    namespace: str = Field(default="", description="Resource namespace")
    status: str = Field(default="Unknown", description="Status phase shown in the table")
    creation_timestamp: str | None = Field(default=None, description="Creation time (ISO 8601)")
    labels: dict[str, str] | None = Field(default=None, description="Resource labels")
    manifest: dict[str, Any] = Field(
        default_factory=dict, description="Serialized object as returned by the API"
    )

    _entity_name: ClassVar[str] = "entity"

    @property
    def key(self) -> tuple[str, str]:
        """Identity key (namespace, name)."""
        return (self.namespace, self.name)

    @property
    def age(self) -> str:
        """Human-readable age string."""
        return format_age(self.creation_timestamp)

    def columns(self) -> tuple[str, ...]:
        """Table cells matching the type's column headers."""
        raise NotImplementedError

    def describe(self) -> list[str]:
        """Type-specific describe lines for the detail view."""
        return []


def format_age(timestamp: str | None, now: datetime | None = None) -> str:
    """Format the time since ``timestamp`` as ``3d4h``, ``2h5m``, ``7m`` or ``12s``."""
    if not timestamp:
        return "<unknown>"
    try:
        created = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return "<unknown>"
    if created.tzinfo is None:
        created = created.replace(tzinfo=UTC)

    diff = int(((now or datetime.now(UTC)) - created).total_seconds())
    if diff < 0:
        return "0s"

    days, rem = divmod(diff, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)
    if days > 0:
        return f"{days}d{hours}h"
    if hours > 0:
        return f"{hours}h{minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{seconds}s"


def _safe_get(obj: Any, *attrs: str, default: Any = None) -> Any:
    """Safely traverse nested attributes on kubernetes SDK objects."""
    current = obj
    for attr in attrs:
        if current is None:
            return default
        current = getattr(current, attr, None)
    return current if current is not None else default


def _get_timestamp(obj: Any) -> str | None:
    """Extract ISO timestamp string from a datetime or string."""
    if obj is None:
        return None
    if isinstance(obj, str):
        return obj
    if isinstance(obj, datetime):
        return obj.isoformat()
    return str(obj)


def _get_labels(obj: Any) -> dict[str, str] | None:
    """Extract labels dict, returning None if empty."""
    labels = _safe_get(obj, "metadata", "labels")
    return dict(labels) if labels else None


@lru_cache(maxsize=1)
def _serializer() -> Any:
    from kubernetes.client import ApiClient

    return ApiClient()


def _serialize(obj: Any) -> dict[str, Any]:
    """Serialize an SDK object to the camelCase dict the API speaks."""
    if isinstance(obj, dict):
        return obj
    result = _serializer().sanitize_for_serialization(obj)
    return result if isinstance(result, dict) else {}


def _common_fields(obj: Any) -> dict[str, Any]:
    """Fields every variant reads from object metadata."""
    return {
        "name": _safe_get(obj, "metadata", "name", default=""),
        "namespace": _safe_get(obj, "metadata", "namespace", default=""),
        "creation_timestamp": _get_timestamp(_safe_get(obj, "metadata", "creation_timestamp")),
        "labels": _get_labels(obj),
        "manifest": _serialize(obj),
    }
