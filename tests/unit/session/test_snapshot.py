"""Unit tests for the render snapshot helpers."""

from __future__ import annotations

import pytest

from kubedeck.session.events import WatchStatusChanged
from kubedeck.session.snapshot import (
    CHROME_HEIGHT,
    WatchIndicator,
    content_height,
    detail_content,
    table_columns,
    table_row,
    watch_indicator,
)
from kubedeck.session.types import ResourceType, WatchState, WatchTarget
from tests.unit.session.conftest import make_pod, make_sts

TARGET = WatchTarget("dev", "default", ResourceType.PODS)


class TestTable:
    """Tests for column and row projection."""

    @pytest.mark.unit
    def test_namespace_column_added_for_all_namespaces(self) -> None:
        scoped = table_columns(ResourceType.PODS, "default")
        unscoped = table_columns(ResourceType.PODS, "all")

        assert scoped[0] == "NAME"
        assert unscoped == ("NAMESPACE", *scoped)

    @pytest.mark.unit
    def test_row_matches_columns(self) -> None:
        pod = make_pod("web-0", namespace="shop")

        row = table_row(pod, "all")

        assert row[:3] == ("shop", "web-0", "Running")
        assert len(row) == len(table_columns(ResourceType.PODS, "all"))

    @pytest.mark.unit
    def test_statefulset_row(self) -> None:
        assert table_row(make_sts("db", replicas=3), "default")[:2] == ("db", "3/3")

    @pytest.mark.unit
    def test_content_height_never_below_one(self) -> None:
        assert content_height(24) == 24 - CHROME_HEIGHT
        assert content_height(2) == 1


class TestDetail:
    """Tests for the detail panel content."""

    @pytest.mark.unit
    def test_detail_has_summary_then_yaml(self) -> None:
        lines = detail_content(make_pod("web-0"))

        assert lines[0] == "Name:         web-0"
        assert "Kind:         Pod" in lines
        marker = lines.index("--- Full YAML ---")
        assert "kind: Pod" in lines[marker + 1 :]

    @pytest.mark.unit
    def test_detail_without_manifest(self) -> None:
        lines = detail_content(make_sts("db"))

        assert lines[-1] == "<manifest unavailable>"


class TestWatchIndicator:
    """Tests for the status line projection."""

    @pytest.mark.unit
    def test_no_status_yet_is_connecting(self) -> None:
        indicator = watch_indicator(None, ticks=1)

        assert indicator.state is WatchState.CONNECTING
        assert indicator.label == "connecting /"

    @pytest.mark.unit
    def test_active_has_no_spinner(self) -> None:
        status = WatchStatusChanged(1, TARGET, WatchState.ACTIVE)

        assert watch_indicator(status, ticks=3).label == "live"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("stale", "offline", "prefix"),
        [(True, False, "stale"), (False, True, "offline"), (False, False, "reconnecting")],
    )
    def test_reconnecting_label(self, stale: bool, offline: bool, prefix: str) -> None:
        indicator = WatchIndicator(
            state=WatchState.RECONNECTING, stale=stale, offline=offline, attempt=2
        )

        assert indicator.label == f"{prefix}, retry #2"
