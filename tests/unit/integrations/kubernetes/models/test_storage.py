"""Unit tests for Kubernetes storage display models."""

from __future__ import annotations

import pytest
from kubernetes.client import (
    V1ObjectMeta,
    V1PersistentVolumeClaim,
    V1PersistentVolumeClaimSpec,
    V1PersistentVolumeClaimStatus,
)

from kubedeck.integrations.kubernetes.models.storage import PersistentVolumeClaimItem


def _pvc(
    phase: str | None = "Bound", capacity: dict[str, str] | None = None
) -> V1PersistentVolumeClaim:
    return V1PersistentVolumeClaim(
        api_version="v1",
        kind="PersistentVolumeClaim",
        metadata=V1ObjectMeta(name="data-db-0", namespace="shop"),
        spec=V1PersistentVolumeClaimSpec(
            access_modes=["ReadWriteOnce"],
            storage_class_name="standard",
            volume_name="pvc-1234",
        ),
        status=V1PersistentVolumeClaimStatus(phase=phase, capacity=capacity),
    )


@pytest.mark.unit
@pytest.mark.kubernetes
class TestPersistentVolumeClaimItem:
    """Test PersistentVolumeClaimItem model."""

    def test_from_k8s_object(self) -> None:
        """Test fields read from a bound claim."""
        item = PersistentVolumeClaimItem.from_k8s_object(_pvc(capacity={"storage": "10Gi"}))

        assert item.name == "data-db-0"
        assert item.status == "Bound"
        assert item.volume == "pvc-1234"
        assert item.capacity == "10Gi"
        assert item.access_modes == ["ReadWriteOnce"]
        assert item.storage_class == "standard"
        assert item.kind == "PersistentVolumeClaim"

    def test_pending_claim_without_capacity(self) -> None:
        """Test an unbound claim shows <none> for capacity."""
        item = PersistentVolumeClaimItem.from_k8s_object(_pvc(phase="Pending"))

        assert item.status == "Pending"
        assert item.capacity is None
        assert item.columns()[:4] == ("data-db-0", "Pending", "pvc-1234", "<none>")

    def test_describe(self) -> None:
        """Test describe lines."""
        item = PersistentVolumeClaimItem(
            name="data", access_modes=["ReadWriteOnce", "ReadOnlyMany"]
        )

        assert "AccessModes:  ReadWriteOnce, ReadOnlyMany" in item.describe()
        assert "StorageClass: <none>" in item.describe()
