"""Shared fixtures for Kubernetes service tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from kubedeck.integrations.kubernetes.client import KubernetesClient


@pytest.fixture
def mock_k8s_client() -> MagicMock:
    """Create a mock multi-context client.

    ``core_v1(context)`` and ``apps_v1(context)`` return the same sub-mock
    for every context; error translation is the real one and the retry
    decorator is a pass-through.
    """
    mock_client = MagicMock()
    mock_client.timeout = 30
    mock_client.translate_api_exception.side_effect = KubernetesClient.translate_api_exception
    mock_client.make_retry_decorator.return_value = lambda fn: fn
    return mock_client
