"""Query/result state machine behind a search screen."""

from __future__ import annotations

import itertools
from typing import Any, Awaitable, Callable, Sequence

from relic_search.domain.models import QueryState
from relic_search.logging import logger
from relic_search.services.exceptions import ValidationError
from relic_search.services.search import EMPTY_QUERY_MESSAGE, SearchService

SEARCH_FAILED_LABEL = "Search failed"
LIST_FAILED_LABEL = "Failed to load relics"

StateListener = Callable[[QueryState], Awaitable[None]]


class SearchView:
    """Owns one ``QueryState`` and the transitions that change it.

    ``submit_search``, ``list_all`` and ``clear`` are the only transitions.
    Every change is published to ``on_change`` as an immutable snapshot. When
    fetches overlap, only the most recently issued one is allowed to settle
    into the state.
    """

    def __init__(self, service: SearchService, *, on_change: StateListener | None = None) -> None:
        self._service = service
        self._on_change = on_change
        self._state = QueryState()
        self._tickets = itertools.count(1)
        self._current_ticket = 0

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def can_submit(self) -> bool:
        return not self._state.loading and bool(self._state.query.strip())

    def set_query(self, text: str) -> None:
        self._state = self._replace(query=text)

    async def submit_search(self, query: str) -> QueryState:
        self.set_query(query)
        try:
            trimmed = self._validate(query)
        except ValidationError as exc:
            logger.info("search_rejected", reason=str(exc))
            # Input errors win over a fetch that may still be in flight.
            self._current_ticket = next(self._tickets)
            await self._publish(loading=False, error=str(exc))
            return self._state

        async def fetch() -> Sequence[Any]:
            return await self._service.search(trimmed)

        return await self._run(fetch, SEARCH_FAILED_LABEL)

    async def list_all(self) -> QueryState:
        async def fetch() -> Sequence[Any]:
            relics = await self._service.list_relics()
            return [relic.to_result() for relic in relics]

        self.set_query("")
        return await self._run(fetch, LIST_FAILED_LABEL)

    async def clear(self) -> QueryState:
        self._current_ticket = next(self._tickets)
        await self._publish(query="", results=(), loading=False, error="", has_searched=False)
        return self._state

    @staticmethod
    def _validate(query: str) -> str:
        trimmed = query.strip()
        if not trimmed:
            raise ValidationError(EMPTY_QUERY_MESSAGE)
        return trimmed

    async def _run(self, fetch: Callable[[], Awaitable[Sequence[Any]]], label: str) -> QueryState:
        ticket = next(self._tickets)
        self._current_ticket = ticket
        await self._publish(loading=True, error="", has_searched=True)

        changes: dict[str, Any]
        try:
            results = await fetch()
            changes = {"results": tuple(results), "error": ""}
        except Exception as exc:
            if ticket == self._current_ticket:
                logger.warning(
                    "search_view_fetch_failed",
                    label=label,
                    error=str(exc),
                    exception_type=exc.__class__.__name__,
                )
            changes = {"results": (), "error": f"{label}: {exc}"}

        if ticket != self._current_ticket:
            logger.info("search_view_stale_response", ticket=ticket, current=self._current_ticket)
            return self._state

        await self._publish(loading=False, **changes)
        return self._state

    def _replace(self, **changes: Any) -> QueryState:
        values = dict(self._state)
        values.update(changes)
        return QueryState(**values)

    async def _publish(self, **changes: Any) -> None:
        self._state = self._replace(**changes)
        if self._on_change is None:
            return
        try:
            await self._on_change(self._state)
        except Exception:
            logger.exception(
                "search_view_listener_failed",
                loading=self._state.loading,
                has_error=bool(self._state.error),
            )


__all__ = [
    "EMPTY_QUERY_MESSAGE",
    "LIST_FAILED_LABEL",
    "SEARCH_FAILED_LABEL",
    "SearchView",
    "StateListener",
]
