"""Shared pytest fixtures for search service and view tests."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx
import pytest

from relic_search.config import SearchServiceSettings

BACKEND_URL = "http://backend.test"

Handler = Callable[[httpx.Request], Awaitable[httpx.Response]]


class RecordingBackend:
    """Mock backend answering the search and listing endpoints."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.search_response: httpx.Response = httpx.Response(200, json={"results": []})
        self.relics_response: httpx.Response = httpx.Response(200, json=[])

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/search":
            return self.search_response
        if request.url.path == "/relics":
            return self.relics_response
        return httpx.Response(404)

    def reply_search(self, status_code: int = 200, **kwargs: Any) -> None:
        self.search_response = httpx.Response(status_code, **kwargs)

    def reply_relics(self, status_code: int = 200, **kwargs: Any) -> None:
        self.relics_response = httpx.Response(status_code, **kwargs)


@pytest.fixture
def service_settings() -> SearchServiceSettings:
    return SearchServiceSettings(base_url=BACKEND_URL)


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def make_client() -> Callable[[Handler], httpx.AsyncClient]:
    def factory(handler: Handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
