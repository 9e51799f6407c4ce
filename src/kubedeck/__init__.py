"""kubedeck - interactive terminal controller for Kubernetes clusters."""

__version__ = "0.1.0"
