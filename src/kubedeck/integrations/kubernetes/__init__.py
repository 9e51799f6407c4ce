"""Kubernetes integration - API client and configuration models."""

from kubedeck.integrations.kubernetes.client import OFFLINE_CONTEXT, KubernetesClient
from kubedeck.integrations.kubernetes.config import KubernetesConfig
from kubedeck.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
    ManifestParseError,
)

__all__ = [
    "OFFLINE_CONTEXT",
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConfig",
    "KubernetesConflictError",
    "KubernetesConnectionError",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesValidationError",
    "ManifestParseError",
]
