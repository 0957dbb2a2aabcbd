"""Pydantic models shared across service/view layers."""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

RECOGNIZED_FIELDS = ("title", "description", "url")


class TextResult(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class RecordResult(BaseModel):
    kind: Literal["record"] = "record"
    title: str | None = None
    description: str | None = None
    url: str | None = None
    extra: dict[str, str] = Field(default_factory=dict)


class RawResult(BaseModel):
    kind: Literal["raw"] = "raw"
    value: Any = None


ResultItem = Annotated[Union[TextResult, RecordResult, RawResult], Field(discriminator="kind")]


class RelicRecord(BaseModel):
    id: int | str
    name: str

    def to_result(self) -> RecordResult:
        return RecordResult(title=self.name, description=f"Relic ID: {self.id}")


class QueryState(BaseModel):
    """Complete interface state of one search view.

    Instances are immutable snapshots; transitions build a new state with
    ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    results: tuple[ResultItem, ...] = ()
    loading: bool = False
    error: str = ""
    has_searched: bool = False

    @model_validator(mode="after")
    def _loading_excludes_error(self) -> "QueryState":
        if self.loading and self.error:
            raise ValueError("a state cannot be loading and failed at the same time")
        return self


def display_value(value: Any) -> str:
    """Format an arbitrary JSON value for a ``key: value`` line."""

    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def _recognized(value: Any) -> str | None:
    if value is None or value is False or value == "":
        return None
    return display_value(value)


def result_item_from_payload(payload: Any) -> TextResult | RecordResult | RawResult:
    """Map one element of a search response onto its result variant."""

    if isinstance(payload, str):
        return TextResult(text=payload)
    if isinstance(payload, dict):
        extra = {
            str(key): display_value(value)
            for key, value in payload.items()
            if key not in RECOGNIZED_FIELDS
        }
        return RecordResult(
            title=_recognized(payload.get("title")),
            description=_recognized(payload.get("description")),
            url=_recognized(payload.get("url")),
            extra=extra,
        )
    return RawResult(value=payload)


__all__ = [
    "QueryState",
    "RawResult",
    "RecordResult",
    "RelicRecord",
    "ResultItem",
    "TextResult",
    "display_value",
    "result_item_from_payload",
]
