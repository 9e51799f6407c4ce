"""Unit tests for the shared display model helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from kubedeck.integrations.kubernetes.models import (
    PersistentVolumeClaimItem,
    PodItem,
    StatefulSetItem,
    format_age,
    item_from_dict,
    item_from_k8s_object,
)

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestFormatAge:
    """Test format_age."""

    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(seconds=12), "12s"),
            (timedelta(minutes=7, seconds=3), "7m"),
            (timedelta(hours=2, minutes=5), "2h5m"),
            (timedelta(days=3, hours=4), "3d4h"),
        ],
    )
    def test_format_age(self, delta: timedelta, expected: str) -> None:
        """Test age formatting by magnitude."""
        assert format_age((NOW - delta).isoformat(), now=NOW) == expected

    def test_zulu_suffix(self) -> None:
        """Test RFC 3339 timestamps with a Z suffix."""
        assert format_age("2024-06-01T11:59:00Z", now=NOW) == "1m"

    def test_future_timestamp(self) -> None:
        """Test clock skew never produces negative ages."""
        assert format_age((NOW + timedelta(minutes=1)).isoformat(), now=NOW) == "0s"

    @pytest.mark.parametrize("value", [None, "", "yesterday"])
    def test_unknown(self, value: str | None) -> None:
        """Test missing or unparseable timestamps."""
        assert format_age(value, now=NOW) == "<unknown>"


@pytest.mark.unit
@pytest.mark.kubernetes
class TestItemFactories:
    """Test kind-based construction."""

    def test_item_from_dict_discriminates_on_kind(self) -> None:
        """Test dicts are validated into the matching variant."""
        pod = item_from_dict({"kind": "Pod", "name": "web-0", "restarts": 1})
        pvc = item_from_dict({"kind": "PersistentVolumeClaim", "name": "data"})
        sts = item_from_dict({"kind": "StatefulSet", "name": "db", "replicas": 2})

        assert isinstance(pod, PodItem)
        assert isinstance(pvc, PersistentVolumeClaimItem)
        assert isinstance(sts, StatefulSetItem)

    def test_item_from_dict_unknown_kind(self) -> None:
        """Test unsupported kinds fail validation."""
        with pytest.raises(ValidationError):
            item_from_dict({"kind": "Deployment", "name": "api"})

    def test_item_from_k8s_object_unknown_kind(self) -> None:
        """Test unsupported kinds are rejected."""
        with pytest.raises(ValueError, match="Unsupported resource kind"):
            item_from_k8s_object("Deployment", object())

    def test_key_is_namespace_and_name(self) -> None:
        """Test the identity key."""
        assert PodItem(name="web-0", namespace="shop").key == ("shop", "web-0")
