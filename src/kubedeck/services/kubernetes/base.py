"""Base manager for Kubernetes service managers.

Provides shared infrastructure for managers built on the multi-context
client: client access, namespace resolution and error translation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import structlog

from kubedeck.session.types import ALL_NAMESPACES

if TYPE_CHECKING:
    from kubedeck.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()


class K8sBaseManager:
    """Base class for Kubernetes service managers.

    Subclasses set ``_entity_name`` for structured log context.

    Example:
        >>> class ClusterClient(K8sBaseManager):
        ...     _entity_name = "cluster"
    """

    _entity_name: str = ""

    def __init__(self, client: KubernetesClient) -> None:
        """Initialize the manager.

        Args:
            client: Kubernetes API client instance.
        """
        self._client = client
        self._log = logger.bind(entity=self._entity_name)

    @staticmethod
    def _resolve_namespace(namespace: str | None) -> str | None:
        """Map the ``all`` pseudo-namespace to an unscoped (None) request.

        Args:
            namespace: Namespace name, ``all`` or None.

        Returns:
            The namespace to scope API calls to, or None for all namespaces.
        """
        if not namespace or namespace == ALL_NAMESPACES:
            return None
        return namespace

    def _handle_api_error(
        self,
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> NoReturn:
        """Translate a Kubernetes API exception and re-raise.

        Args:
            e: The original exception (typically ApiException).
            resource_type: Type of resource being operated on.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.

        Raises:
            KubernetesError: Always raises an appropriate subclass.
        """
        translated = self._client.translate_api_exception(
            e,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )
        if translated is e:
            raise translated
        raise translated from e
