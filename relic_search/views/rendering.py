"""Pure mapping from ``QueryState`` to what a screen should display."""

from __future__ import annotations

import json
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from relic_search.domain.description import DescriptionLine, parse_description
from relic_search.domain.models import QueryState, RawResult, RecordResult, TextResult

LOADING_TEXT = "Searching..."
NO_MATCH_SUBTEXT = "Try adjusting your search terms"
EMPTY_DATABASE_TEXT = "No relics found in the database"


class DisplayState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    RESULTS = "results"


class RenderedItem(BaseModel):
    kind: Literal["text", "record", "raw"]
    text: str | None = None
    heading: str | None = None
    description: list[DescriptionLine] = Field(default_factory=list)
    link: str | None = None
    properties: list[tuple[str, str]] = Field(default_factory=list)
    dump: str | None = None


class SearchViewModel(BaseModel):
    display: DisplayState
    header: str | None = None
    message: str | None = None
    subtext: str | None = None
    items: list[RenderedItem] = Field(default_factory=list)

    @property
    def result_count(self) -> int:
        return len(self.items)


def results_header(count: int) -> str:
    return f"Search Results ({count} found)"


def render_item(item: TextResult | RecordResult | RawResult) -> RenderedItem:
    if isinstance(item, TextResult):
        return RenderedItem(kind="text", text=item.text)
    if isinstance(item, RecordResult):
        return RenderedItem(
            kind="record",
            heading=item.title,
            description=parse_description(item.description) if item.description else [],
            link=item.url,
            properties=list(item.extra.items()),
        )
    return RenderedItem(
        kind="raw",
        dump=json.dumps(item.value, ensure_ascii=False, indent=2, default=str),
    )


def render_state(state: QueryState) -> SearchViewModel:
    """Derive the display for ``state``; has no side effects."""

    if state.error:
        return SearchViewModel(display=DisplayState.ERROR, message=state.error)
    if state.loading:
        return SearchViewModel(display=DisplayState.LOADING, message=LOADING_TEXT)
    if not state.has_searched:
        return SearchViewModel(display=DisplayState.IDLE)

    header = results_header(len(state.results))
    if not state.results:
        if state.query.strip():
            return SearchViewModel(
                display=DisplayState.EMPTY,
                header=header,
                message=f'No results found for "{state.query}"',
                subtext=NO_MATCH_SUBTEXT,
            )
        return SearchViewModel(
            display=DisplayState.EMPTY,
            header=header,
            message=EMPTY_DATABASE_TEXT,
        )

    return SearchViewModel(
        display=DisplayState.RESULTS,
        header=header,
        items=[render_item(item) for item in state.results],
    )


__all__ = [
    "DisplayState",
    "EMPTY_DATABASE_TEXT",
    "LOADING_TEXT",
    "NO_MATCH_SUBTEXT",
    "RenderedItem",
    "SearchViewModel",
    "render_item",
    "render_state",
    "results_header",
]
