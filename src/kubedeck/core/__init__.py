"""Core configuration for kubedeck."""

from kubedeck.core.config import SessionConfig

__all__ = ["SessionConfig"]
