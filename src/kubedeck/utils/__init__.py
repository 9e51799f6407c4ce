"""Utility functions for kubedeck."""

from kubedeck.utils.editor import ExternalEditor, get_editor
from kubedeck.utils.manifest import dump_manifest, parse_manifest

__all__ = [
    "ExternalEditor",
    "dump_manifest",
    "get_editor",
    "parse_manifest",
]
