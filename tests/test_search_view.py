"""Tests for the SearchView state machine."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from relic_search.domain.models import QueryState, RecordResult, TextResult
from relic_search.services.search import SearchService
from relic_search.views.rendering import DisplayState, render_state
from relic_search.views.search_view import EMPTY_QUERY_MESSAGE, SearchView


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", " ", "\t\n  "])
async def test_blank_query_sets_validation_error_without_request(backend, make_client, service_settings, query):
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        state = await view.submit_search(query)

    assert backend.requests == []
    assert state.error == EMPTY_QUERY_MESSAGE == "Please enter a search query"
    assert state.loading is False
    assert render_state(state).display is DisplayState.ERROR


@pytest.mark.asyncio
async def test_results_key_body_sets_results(backend, make_client, service_settings):
    backend.reply_search(json={"results": ["a", "b", "c"]})
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        state = await view.submit_search("prime")

    assert len(state.results) == 3
    assert render_state(state).result_count == 3
    assert state.has_searched is True
    assert state.loading is False
    assert state.error == ""


@pytest.mark.asyncio
async def test_bare_array_body_sets_results(backend, make_client, service_settings):
    backend.reply_search(json=[{"title": "x"}, {"title": "y"}])
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        state = await view.submit_search("prime")

    assert render_state(state).result_count == 2


@pytest.mark.asyncio
async def test_empty_results_list_is_an_empty_answer(backend, make_client, service_settings):
    backend.reply_search(json={"results": []})
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        state = await view.submit_search("nothing")

    rendered = render_state(state)
    assert rendered.display is DisplayState.EMPTY
    assert rendered.message == 'No results found for "nothing"'


@pytest.mark.asyncio
async def test_server_error_clears_results_and_settles(backend, make_client, service_settings):
    backend.reply_search(json={"results": ["old"]})
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        await view.submit_search("first")
        backend.reply_search(500)
        state = await view.submit_search("second")

    assert state.error == "Search failed: HTTP error! status: 500"
    assert state.results == ()
    assert state.loading is False
    assert state.has_searched is True


@pytest.mark.asyncio
async def test_malformed_json_uses_search_error_path(backend, make_client, service_settings):
    backend.reply_search(text="{broken")
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        state = await view.submit_search("x")

    assert state.error.startswith("Search failed: Invalid JSON response")
    assert state.loading is False


@pytest.mark.asyncio
async def test_catalyst_scenario(backend, make_client, service_settings):
    backend.reply_search(json={"results": [{"title": "A", "description": "B"}]})
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        state = await view.submit_search("catalyst")

    rendered = render_state(state)
    assert backend.requests[0].url.params["q"] == "catalyst"
    assert rendered.header == "Search Results (1 found)"
    assert len(rendered.items) == 1
    assert rendered.items[0].heading == "A"
    assert [line.text for line in rendered.items[0].description] == ["B"]


@pytest.mark.asyncio
async def test_list_all_maps_relic_records(backend, make_client, service_settings):
    backend.reply_relics(json=[{"id": 7, "name": "Axi Relic"}])
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        view.set_query("leftover")
        state = await view.list_all()

    assert state.query == ""
    assert state.results == (RecordResult(title="Axi Relic", description="Relic ID: 7"),)
    rendered = render_state(state)
    assert rendered.items[0].heading == "Axi Relic"
    assert rendered.items[0].description[0].text == "Relic ID: 7"


@pytest.mark.asyncio
async def test_list_all_failure_uses_relic_label(backend, make_client, service_settings):
    backend.reply_relics(503)
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        state = await view.list_all()

    assert state.error == "Failed to load relics: HTTP error! status: 503"
    assert state.results == ()
    assert state.loading is False
    assert state.has_searched is True


@pytest.mark.asyncio
async def test_empty_listing_mentions_database(backend, make_client, service_settings):
    backend.reply_relics(json=[])
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        state = await view.list_all()

    assert render_state(state).message == "No relics found in the database"


@pytest.mark.asyncio
async def test_clear_is_idempotent(backend, make_client, service_settings):
    backend.reply_search(json=["a"])
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        await view.submit_search("a")
        once = await view.clear()
        twice = await view.clear()

    assert once == twice == QueryState()
    assert render_state(twice).display is DisplayState.IDLE


@pytest.mark.asyncio
async def test_listener_receives_loading_then_settled_snapshots(backend, make_client, service_settings):
    backend.reply_search(json=["a"])
    snapshots: list[QueryState] = []

    async def listener(state: QueryState) -> None:
        snapshots.append(state)

    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings), on_change=listener)
        await view.submit_search("a")

    assert [snapshot.loading for snapshot in snapshots] == [True, False]
    assert snapshots[0].has_searched is True
    assert snapshots[0].error == ""
    assert snapshots[1].results == (TextResult(text="a"),)


@pytest.mark.asyncio
async def test_failing_listener_does_not_leave_view_loading(backend, make_client, service_settings):
    backend.reply_search(json=["a"])

    async def listener(state: QueryState) -> None:
        raise RuntimeError("telegram down")

    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings), on_change=listener)
        state = await view.submit_search("a")

    assert state.loading is False
    assert state.results == (TextResult(text="a"),)


@pytest.mark.asyncio
async def test_latest_issued_search_wins(make_client, service_settings):
    slow_started = asyncio.Event()
    release_slow = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["q"] == "slow":
            slow_started.set()
            await release_slow.wait()
            return httpx.Response(200, json=["stale"])
        return httpx.Response(200, json=["fresh"])

    async with make_client(handler) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        slow = asyncio.create_task(view.submit_search("slow"))
        await slow_started.wait()
        await view.submit_search("fast")
        release_slow.set()
        await slow

    assert view.state.query == "fast"
    assert view.state.results == (TextResult(text="fresh"),)
    assert view.state.loading is False


@pytest.mark.asyncio
async def test_can_submit_follows_query_and_loading(backend, make_client, service_settings):
    async with make_client(backend) as client:
        view = SearchView(SearchService(client, settings=service_settings))
        assert view.can_submit is False
        view.set_query("  ")
        assert view.can_submit is False
        view.set_query("axi")
        assert view.can_submit is True
