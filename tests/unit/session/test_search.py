"""Unit tests for cross-context search."""

from __future__ import annotations

import asyncio

import pytest

from kubedeck.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
)
from kubedeck.session.events import SearchResultsBatch, SearchScanComplete
from kubedeck.session.multiplexer import EventMultiplexer
from kubedeck.session.search import (
    SearchResult,
    SearchScanner,
    SearchState,
    fuzzy_score,
    rank,
)
from kubedeck.session.types import ALL_NAMESPACES, RESOURCE_TYPE_ORDER, ResourceType
from tests.unit.session.conftest import FakeClusterClient, make_pod, make_sts

PODS = ResourceType.PODS


async def settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


def _drain(mux: EventMultiplexer) -> list[object]:
    events = []
    while mux.pending:
        events.append(mux._queue.popleft())
    return events


def _result(name: str, context: str = "dev") -> SearchResult:
    return SearchResult(context, PODS, make_pod(name))


class TestFuzzyScore:
    """Tests for the subsequence scorer."""

    @pytest.mark.unit
    def test_consecutive_word_start_match(self) -> None:
        # 4 + 3 + 3 for the run starting the word, plus 100 - len
        assert fuzzy_score("web", "web-0") == 105

    @pytest.mark.unit
    def test_case_insensitive(self) -> None:
        assert fuzzy_score("WEB", "Web-0") == fuzzy_score("web", "web-0")

    @pytest.mark.unit
    def test_out_of_order_characters_do_not_match(self) -> None:
        assert fuzzy_score("bew", "web") is None
        assert fuzzy_score("xyz", "web") is None

    @pytest.mark.unit
    def test_empty_query_scores_zero(self) -> None:
        assert fuzzy_score("", "anything") == 0

    @pytest.mark.unit
    def test_separator_starts_a_word(self) -> None:
        assert fuzzy_score("db", "api-db") == 101
        assert fuzzy_score("db", "adbx-z") == 98


class TestRank:
    """Tests for ordering candidates by score."""

    @pytest.mark.unit
    def test_word_boundary_ranks_first(self) -> None:
        assert rank("db", ["adbx-z", "api-db"]) == [1, 0]

    @pytest.mark.unit
    def test_shorter_name_ranks_first(self) -> None:
        assert rank("web", ["web-frontend", "web"]) == [1, 0]

    @pytest.mark.unit
    def test_ties_keep_order_and_misses_drop(self) -> None:
        assert rank("a", ["ab", "zz", "ac"]) == [0, 2]

    @pytest.mark.unit
    def test_empty_query_keeps_everything(self) -> None:
        assert rank("", ["b", "a"]) == [0, 1]


class TestSearchState:
    """Tests for result ranking and selection."""

    @pytest.mark.unit
    def test_new_results_keep_the_selected_one(self) -> None:
        state = SearchState()
        state.set_query("db")
        state.add([_result("api-db")])
        assert state.selected is not None and state.selected.item.name == "api-db"

        state.add([_result("db", context="prod")])

        assert [row[0] for row in state.rows()] == ["db", "api-db"]
        assert state.selected.item.name == "api-db"
        assert state.index == 1

    @pytest.mark.unit
    def test_query_change_resets_selection(self) -> None:
        state = SearchState()
        state.add([_result("web-0"), _result("web-1"), _result("cache")])
        state.move(2)

        state.set_query("web")

        assert state.index == 0
        assert len(state.matches) == 2

    @pytest.mark.unit
    def test_move_wraps(self) -> None:
        state = SearchState()
        state.add([_result("a"), _result("b")])

        state.move(-1)
        assert state.index == 1
        state.move(1)
        assert state.index == 0

    @pytest.mark.unit
    def test_move_without_matches_is_a_no_op(self) -> None:
        state = SearchState(query="zzz")
        state.add([_result("web")])

        state.move(1)

        assert state.selected is None
        assert state.rows() == ()

    @pytest.mark.unit
    def test_status_reports_scan_progress(self) -> None:
        state = SearchState(contexts_total=2, contexts_done=1)
        state.add([_result("a"), _result("b", context="prod")])

        assert state.status == "2 found, scanning 1/2 contexts"
        state.contexts_done = 2
        assert state.status == "2 found"

    @pytest.mark.unit
    def test_result_row(self) -> None:
        result = SearchResult("prod", ResourceType.STATEFULSETS, make_sts("db", "shop"))

        assert result.row() == ("db", "StatefulSets", "shop", "prod")
        assert result.ref.name == "db"
        assert result.ref.namespace == "shop"


class TestSearchScanner:
    """Tests for the per-context fan-out."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_lists_every_type_in_every_context(
        self, fake_client: FakeClusterClient, mux: EventMultiplexer
    ) -> None:
        fake_client.add("dev", PODS, make_pod("web", "shop"))
        fake_client.add("prod", ResourceType.STATEFULSETS, make_sts("db", "data"))
        scanner = SearchScanner(fake_client, mux)

        generation = await scanner.start(["dev", "prod"])
        await settle()

        assert set(fake_client.list_calls) == {
            (context, ALL_NAMESPACES, rt)
            for context in ("dev", "prod")
            for rt in RESOURCE_TYPE_ORDER
        }
        events = _drain(mux)
        batches = [e for e in events if isinstance(e, SearchResultsBatch)]
        assert len(batches) == 2 * len(RESOURCE_TYPE_ORDER)
        assert all(b.generation == generation for b in batches)
        found = {(b.context, i.name) for b in batches for i in b.items}
        assert found == {("dev", "web"), ("prod", "db")}
        complete = [e for e in events if isinstance(e, SearchScanComplete)]
        assert sorted(c.context for c in complete) == ["dev", "prod"]
        assert not scanner.active

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unreachable_context_reports_once_and_completes(
        self, fake_client: FakeClusterClient, mux: EventMultiplexer
    ) -> None:
        first = RESOURCE_TYPE_ORDER[0]
        fake_client.list_errors[("prod", ALL_NAMESPACES, first)].append(
            KubernetesConnectionError("unreachable")
        )
        scanner = SearchScanner(fake_client, mux)

        await scanner.start(["prod"])
        await settle()

        assert fake_client.list_calls == [("prod", ALL_NAMESPACES, first)]
        events = _drain(mux)
        assert isinstance(events[0], SearchResultsBatch)
        assert events[0].error == "unreachable"
        assert isinstance(events[-1], SearchScanComplete)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_forbidden_type_is_skipped(
        self, fake_client: FakeClusterClient, mux: EventMultiplexer
    ) -> None:
        forbidden = ResourceType.PERSISTENT_VOLUME_CLAIMS
        fake_client.list_errors[("dev", ALL_NAMESPACES, forbidden)].append(
            KubernetesAuthError("forbidden", status_code=403)
        )
        scanner = SearchScanner(fake_client, mux)

        await scanner.start(["dev"])
        await settle()

        assert len(fake_client.list_calls) == len(RESOURCE_TYPE_ORDER)
        errors = [
            e for e in _drain(mux) if isinstance(e, SearchResultsBatch) and e.error is not None
        ]
        assert [e.resource_type for e in errors] == [forbidden]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stop_retires_the_generation(
        self, fake_client: FakeClusterClient, mux: EventMultiplexer
    ) -> None:
        scanner = SearchScanner(fake_client, mux)
        generation = await scanner.start(["dev", "prod"])

        await scanner.stop()

        assert not scanner.is_current(generation)
        assert not scanner.active
        assert fake_client.list_calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_restart_supersedes_previous_scan(
        self, fake_client: FakeClusterClient, mux: EventMultiplexer
    ) -> None:
        scanner = SearchScanner(fake_client, mux)
        first = await scanner.start(["dev"])

        second = await scanner.start(["dev"])
        await settle()

        assert second > first
        assert scanner.is_current(second)
        generations = {e.generation for e in _drain(mux) if isinstance(e, SearchScanComplete)}
        assert generations == {second}
