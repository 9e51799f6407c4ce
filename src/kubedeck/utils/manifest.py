"""YAML manifest (de)serialization for the edit flow."""

from __future__ import annotations

from typing import Any

import yaml

from kubedeck.integrations.kubernetes.exceptions import ManifestParseError


def dump_manifest(obj_dict: dict[str, Any]) -> str:
    """Render a manifest dict as block-style YAML, keeping key order."""
    return yaml.safe_dump(obj_dict, default_flow_style=False, sort_keys=False)


def parse_manifest(text: str, name: str | None = None) -> dict[str, Any]:
    """Parse edited manifest text.

    Args:
        text: YAML document produced by the editor.
        name: Expected ``metadata.name``; renaming is not an update.

    Returns:
        The manifest as a dict.

    Raises:
        ManifestParseError: If the text is not a single YAML mapping, or
            names a different object.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        problem = getattr(e, "problem", None) or "invalid YAML"
        line = mark.line + 1 if mark is not None else None
        raise ManifestParseError(f"Invalid YAML: {problem}", line=line) from e

    if not isinstance(data, dict):
        raise ManifestParseError("Invalid YAML: expected a mapping")

    metadata = data.get("metadata")
    if name is not None and isinstance(metadata, dict) and metadata.get("name", name) != name:
        raise ManifestParseError(
            f"metadata.name changed from '{name}' to '{metadata.get('name')}'"
        )
    return data
