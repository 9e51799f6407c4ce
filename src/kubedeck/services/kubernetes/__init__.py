"""Kubernetes service module.

Adapts the synchronous kubernetes client to the asynchronous cluster
capability the session engine consumes.
"""

from kubedeck.services.kubernetes.cluster_client import KubernetesClusterClient

__all__ = ["KubernetesClusterClient"]
