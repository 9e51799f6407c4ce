"""Unit tests for the KubedeckApp renderer."""

from __future__ import annotations

import asyncio

import pytest

from kubedeck.core.config import SessionConfig
from kubedeck.session.types import ResourceType
from kubedeck.tui.apps.kubernetes.app import KubedeckApp, SessionScreen
from kubedeck.tui.apps.kubernetes.widgets import SnapshotView
from kubedeck.utils.editor import ExternalEditor
from tests.unit.session.conftest import FakeClusterClient, FakeEditor, make_pod


@pytest.fixture
def fake_client() -> FakeClusterClient:
    client = FakeClusterClient()
    client.add("dev", ResourceType.PODS, make_pod("web-0"), make_pod("web-1"))
    return client


class TestKubedeckAppInit:
    """Tests for app construction."""

    @pytest.mark.unit
    def test_initial_selection_passed_to_controller(self, fake_client: FakeClusterClient) -> None:
        app = KubedeckApp(
            fake_client,
            SessionConfig(),
            context="prod",
            namespace="kube-system",
            resource_type=ResourceType.STATEFULSETS,
            editor=FakeEditor(),
        )

        assert app.controller.state.resource_type is ResourceType.STATEFULSETS

    @pytest.mark.unit
    def test_default_editor(self, fake_client: FakeClusterClient) -> None:
        config = SessionConfig(editor="nano")

        app = KubedeckApp(fake_client, config)

        editor = app.controller._editor
        assert isinstance(editor, ExternalEditor)
        assert editor.command == "nano"


class TestKubedeckAppRun:
    """Tests for the running app."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_mounts_session_screen(self, fake_client: FakeClusterClient) -> None:
        app = KubedeckApp(fake_client, SessionConfig(), editor=FakeEditor())

        async with app.run_test(size=(100, 30)) as pilot:
            await pilot.pause()

            assert isinstance(app.screen, SessionScreen)
            assert len(app.screen.query(SnapshotView)) == 6
            assert app.controller.state.context == "dev"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_keys_reach_controller(self, fake_client: FakeClusterClient) -> None:
        app = KubedeckApp(fake_client, SessionConfig(), editor=FakeEditor())

        async with app.run_test(size=(100, 30)) as pilot:
            await pilot.pause()
            await pilot.press("question_mark")
            for _ in range(20):
                await pilot.pause(0.01)
                if app.controller.state.view == "help":
                    break

            assert app.controller.state.view == "help"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ctrl_c_quits(self, fake_client: FakeClusterClient) -> None:
        app = KubedeckApp(fake_client, SessionConfig(), editor=FakeEditor())

        async with app.run_test(size=(100, 30)) as pilot:
            await pilot.pause()
            await pilot.press("ctrl+c")
            for _ in range(20):
                await asyncio.sleep(0.01)
                if app.controller.state.quit:
                    break

            assert app.controller.state.quit is True
