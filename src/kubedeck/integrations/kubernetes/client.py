"""Kubernetes API client wrapper.

Provides a multi-context client that wraps the official kubernetes Python
client with one cached ``ApiClient`` per kubeconfig context, retry logic
and consistent error translation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kubedeck.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)
from kubedeck.session.types import OFFLINE_CONTEXT

if TYPE_CHECKING:
    from kubernetes.client import ApiClient, AppsV1Api, CoreV1Api

    from kubedeck.integrations.kubernetes.config import KubernetesConfig

logger = structlog.get_logger()


class KubernetesClient:
    """Multi-context Kubernetes API client.

    Unlike a client bound to the process-wide default configuration, every
    context gets its own ``ApiClient`` so a session can switch contexts
    without reloading global state, and a watch on the previous context can
    wind down independently.

    Example:
        ```python
        from kubedeck.integrations.kubernetes import KubernetesClient
        from kubedeck.integrations.kubernetes.config import KubernetesConfig

        with KubernetesClient(KubernetesConfig.from_env()) as client:
            pods = client.core_v1("kind-dev").list_namespaced_pod("default")
        ```
    """

    def __init__(self, config: KubernetesConfig) -> None:
        """Initialize the client.

        Loading never fails: a missing or unreadable kubeconfig leaves the
        client with no contexts (offline mode).

        Args:
            config: Kubernetes connection settings.
        """
        self._config = config
        self._retries = config.retry_attempts
        self._api_clients: dict[str, ApiClient] = {}
        self._contexts: list[dict[str, Any]] = self._load_contexts()

        active = next((c["name"] for c in self._contexts if c["active"]), None)
        if config.context and any(c["name"] == config.context for c in self._contexts):
            active = config.context
        elif config.context:
            logger.warning("unknown_context_requested", context=config.context)
        self._current_context: str | None = active

        logger.info(
            "kubernetes_client_initialized",
            context=self._current_context,
            contexts=len(self._contexts),
            kubeconfig=config.kubeconfig,
        )

    def _load_contexts(self) -> list[dict[str, Any]]:
        """Read context entries from the kubeconfig."""
        from kubernetes import config

        try:
            contexts, active = config.list_kube_config_contexts(
                config_file=self._config.kubeconfig,
            )
        except (config.ConfigException, OSError, TypeError) as e:
            logger.warning("kubeconfig_unavailable", error=str(e))
            return []

        result = []
        for ctx in contexts or []:
            ctx_info = ctx.get("context") or {}
            result.append(
                {
                    "name": ctx.get("name", ""),
                    "cluster": ctx_info.get("cluster", ""),
                    "namespace": ctx_info.get("namespace", "default"),
                    "active": ctx.get("name") == active.get("name") if active else False,
                }
            )
        return result

    # =========================================================================
    # Context Management
    # =========================================================================

    def list_contexts(self) -> list[dict[str, Any]]:
        """List all available kubeconfig contexts.

        Returns:
            List of context dictionaries with 'name', 'cluster', 'namespace'
            and 'active' keys. Empty when no kubeconfig could be loaded.
        """
        return list(self._contexts)

    @property
    def offline(self) -> bool:
        """True when no kubeconfig context is available."""
        return not self._contexts

    def get_current_context(self) -> str:
        """Get the current context name, or the offline placeholder."""
        return self._current_context or OFFLINE_CONTEXT

    def set_current_context(self, context_name: str) -> None:
        """Mark a context as current.

        Args:
            context_name: The kubeconfig context name.

        Raises:
            KubernetesConnectionError: If the context is not in the kubeconfig.
        """
        if not any(c["name"] == context_name for c in self._contexts):
            raise KubernetesConnectionError(message=f"Unknown context '{context_name}'")
        self._current_context = context_name
        logger.info("switched_context", context=context_name)

    # =========================================================================
    # Per-context API Accessors
    # =========================================================================

    def api_client(self, context_name: str) -> ApiClient:
        """Get (or create) the ApiClient bound to a context.

        Raises:
            KubernetesConnectionError: If the context cannot be loaded.
        """
        cached = self._api_clients.get(context_name)
        if cached is not None:
            return cached

        from kubernetes import config

        if context_name == OFFLINE_CONTEXT or self.offline:
            raise KubernetesConnectionError(
                message="No kubeconfig available. Set KUBEDECK_KUBECONFIG or KUBECONFIG."
            )
        try:
            api_client = config.new_client_from_config(
                config_file=self._config.kubeconfig,
                context=context_name,
            )
        except (config.ConfigException, OSError) as e:
            raise KubernetesConnectionError(
                message=f"Failed to load context '{context_name}'",
                original_error=e,
            ) from e

        self._api_clients[context_name] = api_client
        logger.debug("api_client_created", context=context_name)
        return api_client

    def core_v1(self, context_name: str) -> CoreV1Api:
        """Get a CoreV1Api (pods, pvcs, namespaces) for a context."""
        from kubernetes.client import CoreV1Api

        return CoreV1Api(self.api_client(context_name))

    def apps_v1(self, context_name: str) -> AppsV1Api:
        """Get an AppsV1Api (statefulsets) for a context."""
        from kubernetes.client import AppsV1Api

        return AppsV1Api(self.api_client(context_name))

    # =========================================================================
    # Error Translation
    # =========================================================================

    @staticmethod
    def translate_api_exception(
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Translate a kubernetes or transport exception to a custom exception.

        Args:
            e: The original exception.
            resource_type: Type of resource being operated on.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.

        Returns:
            An appropriate KubernetesError subclass.
        """
        from kubernetes.client import ApiException
        from urllib3.exceptions import HTTPError

        if isinstance(e, KubernetesError):
            return e

        if isinstance(e, (HTTPError, OSError)):
            return KubernetesConnectionError(
                message=f"Cannot reach Kubernetes API: {e}",
                original_error=e,
            )

        if not isinstance(e, ApiException):
            return KubernetesError(
                message=str(e),
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        status = e.status

        if status in (401, 403):
            return KubernetesAuthError(
                message=e.reason or "Authentication/authorization failed",
                status_code=status,
                reason=e.reason,
            )

        if status == 404:
            return KubernetesNotFoundError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status == 409:
            return KubernetesConflictError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status in (400, 422):
            return KubernetesValidationError(
                message=e.reason or "Validation failed",
                status_code=status,
            )

        if not status:
            return KubernetesConnectionError(
                message=e.reason or "Kubernetes API unreachable",
                original_error=e,
            )

        return KubernetesError(
            message=e.reason or f"Kubernetes API error: {status}",
            status_code=status,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )

    # =========================================================================
    # Retry Decorator
    # =========================================================================

    def make_retry_decorator(self) -> Any:
        """Create a retry decorator for transient connection errors.

        Returns:
            A tenacity retry decorator configured with exponential backoff.
        """
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(self._retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def timeout(self) -> int:
        """Request timeout applied to non-streaming calls."""
        return self._config.timeout

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close every per-context ApiClient."""
        for api_client in self._api_clients.values():
            api_client.close()
        self._api_clients.clear()
        logger.debug("kubernetes_client_closed")

    def __enter__(self) -> KubernetesClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
