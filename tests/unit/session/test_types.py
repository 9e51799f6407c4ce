"""Unit tests for session value types."""

from __future__ import annotations

import pytest

from kubedeck.session.protocols import ClusterContext, EditResult, EditStatus, ResourceList
from kubedeck.session.types import (
    Focus,
    ResourceKey,
    ResourceRef,
    ResourceType,
    WatchTarget,
)


class TestResourceType:
    """Tests for ResourceType lookups and cycling."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("pod", ResourceType.PODS),
            ("Pods", ResourceType.PODS),
            ("pvcs", ResourceType.PERSISTENT_VOLUME_CLAIMS),
            ("PersistentVolumeClaim", ResourceType.PERSISTENT_VOLUME_CLAIMS),
            ("statefulset", ResourceType.STATEFULSETS),
        ],
    )
    def test_from_kind(self, value: str, expected: ResourceType) -> None:
        assert ResourceType.from_kind(value) is expected

    @pytest.mark.unit
    def test_from_kind_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unsupported resource type"):
            ResourceType.from_kind("deployments")

    @pytest.mark.unit
    def test_cycling_wraps(self) -> None:
        last = list(ResourceType)[-1]

        assert last.next() is ResourceType.PODS
        assert ResourceType.PODS.prev() is last


class TestFocus:
    """Tests for focus cycling."""

    @pytest.mark.unit
    def test_next_cycles_through_selectors_then_list(self) -> None:
        focus = Focus.CONTEXT_SELECTOR
        seen = []
        for _ in range(4):
            seen.append(focus)
            focus = focus.next()

        assert seen == list(Focus)
        assert focus is Focus.CONTEXT_SELECTOR
        assert Focus.CONTEXT_SELECTOR.prev() is Focus.LIST

    @pytest.mark.unit
    def test_only_list_is_not_a_selector(self) -> None:
        assert [f for f in Focus if not f.is_selector] == [Focus.LIST]


class TestRefs:
    """Tests for identity and display strings."""

    @pytest.mark.unit
    def test_resource_ref_strings(self) -> None:
        ref = ResourceRef(ResourceType.PODS, "default", "web-0")

        assert ref.key == ResourceKey("default", "web-0")
        assert str(ref) == "Pod/default/web-0"

    @pytest.mark.unit
    def test_cluster_scoped_key_omits_namespace(self) -> None:
        assert str(ResourceKey("", "node-1")) == "node-1"

    @pytest.mark.unit
    def test_watch_target_string(self) -> None:
        target = WatchTarget("dev", "all", ResourceType.PERSISTENT_VOLUME_CLAIMS)

        assert str(target) == "dev/all/PVCs"


class TestProtocolTypes:
    """Tests for the value types exchanged with clients and editors."""

    @pytest.mark.unit
    def test_context_display_name(self) -> None:
        assert ClusterContext("dev", "dev-cluster").display_name == "dev (dev-cluster)"
        assert ClusterContext("dev", "dev").display_name == "dev"

    @pytest.mark.unit
    def test_resource_list_keeps_version(self) -> None:
        items = ResourceList([], resource_version="42")

        assert list(items) == []
        assert items.resource_version == "42"

    @pytest.mark.unit
    def test_edit_result_constructors(self) -> None:
        assert EditResult.changed("x") == EditResult(EditStatus.CHANGED, "x")
        assert EditResult.unchanged().text is None
        assert EditResult.aborted("boom").reason == "boom"
