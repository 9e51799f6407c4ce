"""Unit tests for Kubernetes exceptions."""

from __future__ import annotations

import pytest

from kubedeck.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
    ManifestParseError,
)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestKubernetesError:
    """Test KubernetesError base exception."""

    def test_init_minimal(self) -> None:
        """Test initialization with minimal arguments."""
        error = KubernetesError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.status_code is None
        assert error.resource_type is None

    def test_str_message_only(self) -> None:
        """Test string representation with message only."""
        assert str(KubernetesError("Test error")) == "Test error"

    def test_str_with_status_code(self) -> None:
        """Test string representation with status code."""
        assert str(KubernetesError("Test error", status_code=500)) == "Test error (status: 500)"

    def test_str_with_resource(self) -> None:
        """Test string representation with resource location."""
        error = KubernetesError(
            "Boom",
            status_code=500,
            resource_type="Pod",
            resource_name="web-0",
            namespace="default",
        )
        assert str(error) == "Boom (status: 500) [Pod/web-0 in default]"


@pytest.mark.unit
@pytest.mark.kubernetes
class TestSubclasses:
    """Test the specialised exceptions."""

    def test_hierarchy(self) -> None:
        """Test every adapter error is a KubernetesError."""
        for cls in (
            KubernetesAuthError,
            KubernetesConflictError,
            KubernetesConnectionError,
            KubernetesNotFoundError,
            KubernetesValidationError,
        ):
            assert issubclass(cls, KubernetesError)

    def test_connection_error_keeps_original(self) -> None:
        """Test that the original error is preserved."""
        original = OSError("refused")
        error = KubernetesConnectionError("down", original_error=original)
        assert error.original_error is original
        assert error.status_code is None

    def test_auth_error_defaults(self) -> None:
        """Test KubernetesAuthError default status."""
        error = KubernetesAuthError()
        assert error.status_code == 401
        assert error.reason is None

    def test_not_found_builds_message(self) -> None:
        """Test that NotFound names the missing object."""
        error = KubernetesNotFoundError(
            resource_type="Pod", resource_name="web-0", namespace="shop"
        )
        assert error.message == "Pod 'web-0' not found in namespace 'shop'"
        assert error.status_code == 404

    def test_conflict_builds_message(self) -> None:
        """Test that Conflict names the contended object."""
        error = KubernetesConflictError(resource_type="StatefulSet", resource_name="db")
        assert error.message == "StatefulSet 'db' was modified concurrently"
        assert error.status_code == 409

    def test_validation_error_defaults(self) -> None:
        """Test KubernetesValidationError default status."""
        assert KubernetesValidationError().status_code == 422


@pytest.mark.unit
class TestManifestParseError:
    """Test ManifestParseError formatting."""

    def test_str_with_line(self) -> None:
        """Test that the line number is appended."""
        assert str(ManifestParseError("Invalid YAML: bad", line=3)) == "Invalid YAML: bad (line 3)"

    def test_str_without_line(self) -> None:
        """Test plain message formatting."""
        assert str(ManifestParseError("Invalid YAML")) == "Invalid YAML"

    def test_not_a_kubernetes_error(self) -> None:
        """Test that parse errors are distinct from API errors."""
        assert not issubclass(ManifestParseError, KubernetesError)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestTerminal:
    """Test which errors stop being worth retrying."""

    @pytest.mark.parametrize(
        ("error", "terminal"),
        [
            (KubernetesAuthError(), True),
            (KubernetesNotFoundError(), True),
            (KubernetesConnectionError(), False),
            (KubernetesConflictError(), False),
            (KubernetesValidationError(), False),
            (KubernetesError("boom", status_code=500), False),
        ],
    )
    def test_terminal(self, error: KubernetesError, terminal: bool) -> None:
        """Test auth and not-found failures are terminal."""
        assert error.terminal is terminal

    def test_location_without_namespace(self) -> None:
        """Test cluster-scoped locations omit the namespace."""
        error = KubernetesError("gone", resource_type="Pod", resource_name="web-0")
        assert error.location == "Pod/web-0"
        assert KubernetesError("gone").location is None
