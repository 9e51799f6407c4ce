"""Errors raised by the cluster adapter.

Every failure from the kubernetes client is translated into one of these
before it reaches the session engine, so the engine never sees
``ApiException`` or urllib3 errors. ``str(error)`` is what the operator
reads in the banner.
"""

from __future__ import annotations


class KubernetesError(Exception):
    """Base exception for cluster operations.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status from the API server, if any.
        resource_type: Kind involved (e.g. "Pod", "StatefulSet").
        resource_name: Name of the object involved.
        namespace: Namespace of the object involved.
    """

    terminal = False
    """Whether retrying cannot help until something changes outside kubedeck."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.namespace = namespace

    @property
    def location(self) -> str | None:
        """``Kind/name in namespace`` of the object involved, if known."""
        if not (self.resource_type and self.resource_name):
            return None
        where = f"{self.resource_type}/{self.resource_name}"
        return f"{where} in {self.namespace}" if self.namespace else where

    def __str__(self) -> str:
        text = self.message
        if self.status_code:
            text += f" (status: {self.status_code})"
        if location := self.location:
            text += f" [{location}]"
        return text


class KubernetesConnectionError(KubernetesError):
    """The API server could not be reached, or a stream dropped mid-flight.

    The only error the adapter retries on its own.
    """

    def __init__(
        self,
        message: str = "Failed to connect to Kubernetes cluster",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message=message)
        self.original_error = original_error


class KubernetesAuthError(KubernetesError):
    """Credentials were rejected (401) or RBAC denied the verb (403)."""

    terminal = True

    def __init__(
        self,
        message: str = "Kubernetes authentication/authorization failed",
        status_code: int | None = 401,
        reason: str | None = None,
    ) -> None:
        super().__init__(message=message, status_code=status_code)
        self.reason = reason


def _describe(verb: str, resource_type: str | None, name: str | None, ns: str | None) -> str:
    message = f"{resource_type} '{name}' {verb}"
    if ns:
        message += f" in namespace '{ns}'"
    return message


class KubernetesNotFoundError(KubernetesError):
    """The object, or the namespace being watched, does not exist (404)."""

    terminal = True

    def __init__(
        self,
        message: str = "Kubernetes resource not found",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        if resource_type and resource_name:
            message = _describe("not found", resource_type, resource_name, namespace)
        super().__init__(
            message=message,
            status_code=404,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class KubernetesValidationError(KubernetesError):
    """The request was refused as invalid (400/422), or is not supported for the kind."""

    def __init__(
        self,
        message: str = "Invalid resource specification",
        status_code: int | None = 422,
    ) -> None:
        super().__init__(message=message, status_code=status_code)


class KubernetesConflictError(KubernetesError):
    """An update raced a newer version of the object (409)."""

    def __init__(
        self,
        message: str = "Resource conflict",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        if resource_type and resource_name:
            message = _describe(
                "was modified concurrently", resource_type, resource_name, namespace
            )
        super().__init__(
            message=message,
            status_code=409,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class ManifestParseError(Exception):
    """Raised when an edited manifest cannot be parsed.

    Never reaches the cluster: parsing happens before any API call.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.message} (line {self.line})"
        return self.message
