"""HTTP client for the relic search backend."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from relic_search.config import SearchServiceSettings
from relic_search.domain.models import (
    RawResult,
    RecordResult,
    RelicRecord,
    TextResult,
    result_item_from_payload,
)
from relic_search.logging import logger
from relic_search.services.exceptions import ParseError, TransportError, ValidationError

REQUEST_HEADERS = {"Content-Type": "application/json"}
EMPTY_QUERY_MESSAGE = "Please enter a search query"

_relics_adapter = TypeAdapter(list[RelicRecord])


def extract_results(body: Any) -> list[Any]:
    """Pick the result list out of a search response body.

    ``{"results": [...]}`` wins over a bare array; anything else is an empty
    result set. An empty ``results`` list is a valid, empty answer.
    """

    if isinstance(body, dict):
        results = body.get("results")
        return list(results) if isinstance(results, list) else []
    if isinstance(body, list):
        return list(body)
    return []


class SearchService:
    """Encapsulates the search and listing endpoints of the backend."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: SearchServiceSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or SearchServiceSettings()

    async def search(self, query: str) -> list[TextResult | RecordResult | RawResult]:
        query = query.strip()
        if not query:
            raise ValidationError(EMPTY_QUERY_MESSAGE)

        body = await self._get_json("search", self._settings.search_url, params={"q": query})
        items = [result_item_from_payload(entry) for entry in extract_results(body)]
        logger.info("search_completed", query=query, result_count=len(items))
        return items

    async def list_relics(self) -> list[RelicRecord]:
        body = await self._get_json("list_relics", self._settings.relics_url)
        try:
            relics = _relics_adapter.validate_python(body)
        except PydanticValidationError as exc:
            logger.warning("list_relics_invalid_payload", error=str(exc))
            raise ParseError(f"Unexpected relic listing payload: {exc.error_count()} error(s)") from exc
        logger.info("list_relics_completed", relic_count=len(relics))
        return relics

    async def _get_json(
        self,
        operation: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
    ) -> Any:
        logger.info("search_request", operation=operation, url=url, params=params)
        try:
            response = await self._client.get(url, params=params, headers=REQUEST_HEADERS)
        except httpx.HTTPError as exc:
            logger.warning("search_request_failed", operation=operation, url=url, error=str(exc))
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            logger.warning(
                "search_request_failed",
                operation=operation,
                url=url,
                status_code=response.status_code,
            )
            raise TransportError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            logger.warning("search_response_not_json", operation=operation, url=url, error=str(exc))
            raise ParseError(f"Invalid JSON response: {exc}") from exc


__all__ = ["EMPTY_QUERY_MESSAGE", "SearchService", "extract_results"]
