"""Ignition catalog client adapter.

Two calls per candidate: a name search that resolves the remote id, then a
paged DataTables listing filtered by that id. The HTTP client (cookies,
headers, timeout) is supplied by the session factory in ``client.py``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from adapters.catalog_mapper import build_entry
from core.errors import CatalogError, MalformedResponseError
from core.models import CatalogEntry, QueryType

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

# Column layout the listing endpoint expects; index 10 (updated_at) is the sort key.
LISTING_COLUMNS = [
    "addBtn",
    "artistName",
    "titleName",
    "albumName",
    "year",
    "duration",
    "tunings",
    "version",
    "author.name",
    "created_at",
    "updated_at",
    "downloads",
    "parts",
    "platforms",
    "file_pc_link",
    "file_mac_link",
    "artist.name",
    "title",
    "album",
]
SORT_COLUMN = LISTING_COLUMNS.index("updated_at")

_SEARCH_SCOPES = {
    QueryType.ARTIST: "artists",
    QueryType.CREATOR: "members",
}
_LISTING_FILTERS = {
    QueryType.ARTIST: "filter_artist[]",
    QueryType.CREATOR: "filter_member[]",
}


def _scope_for(query_type: QueryType, table: dict[QueryType, str]) -> str:
    try:
        return table[query_type]
    except KeyError:
        raise ValueError(f"Unsupported query type: {query_type!r}") from None


def _decode_json(response: httpx.Response) -> Any:
    """Return the JSON body, rejecting HTML error pages and garbage."""

    text = response.text
    if text.lstrip()[:15].lower().startswith("<!doctype html"):
        raise MalformedResponseError(f"HTML page returned by {response.request.url}")
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"Invalid JSON returned by {response.request.url}") from exc


class IgnitionCatalogClient:
    """Async client for the catalog search and listing endpoints."""

    def __init__(self, http: httpx.AsyncClient, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._http = http
        self._page_size = page_size

    async def _get_json(self, url: str, params: Any) -> Any:
        try:
            response = await self._http.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CatalogError(f"Request to {url} failed: {exc}") from exc
        return _decode_json(response)

    async def resolve_id(self, name: str, query_type: QueryType) -> Optional[int]:
        """Return the remote id of the first search hit for ``name``, if any."""

        scope = _scope_for(query_type, _SEARCH_SCOPES)
        payload = await self._get_json(
            f"/cdlc/search/{scope}",
            {"term": name, "_type": "query", "q": name},
        )
        results = payload.get("results") if isinstance(payload, dict) else None
        if not results:
            return None
        try:
            return int(results[0]["id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedResponseError(f"Unexpected search result for {name!r}") from exc

    def _listing_params(self, remote_id: int, query_type: QueryType, start: int) -> list[tuple[str, Any]]:
        params: list[tuple[str, Any]] = [("draw", 1)]
        for index, column in enumerate(LISTING_COLUMNS):
            params.append((f"columns[{index}][data]", column))
        params.extend(
            [
                ("order[0][column]", SORT_COLUMN),
                ("order[0][dir]", "desc"),
                ("start", start),
                ("length", self._page_size),
                ("search[value]", ""),
                (_scope_for(query_type, _LISTING_FILTERS), remote_id),
            ]
        )
        return params

    async def _fetch_all(self, remote_id: int, query_type: QueryType) -> list[CatalogEntry]:
        entries: list[CatalogEntry] = []
        start = 0
        while True:
            payload = await self._get_json("/", self._listing_params(remote_id, query_type, start))
            if not isinstance(payload, dict):
                raise MalformedResponseError("Listing response is not an object")
            rows = payload.get("data") or []
            entries.extend(build_entry(row) for row in rows)
            start += len(rows)
            if not rows:
                return entries
            # The server may cap the page length below what we asked for, so the
            # reported total decides when the listing is complete.
            total = payload.get("recordsFiltered")
            if total is None:
                if len(rows) < self._page_size:
                    return entries
            elif start >= int(total):
                return entries

    async def fetch_entries(self, remote_id: int, query_type: QueryType) -> list[CatalogEntry]:
        """Return every listing entry for the remote id, newest update first.

        Transport failures and unusable listings raise CatalogError; the
        orchestrator logs them and the candidate contributes nothing.
        """

        _scope_for(query_type, _LISTING_FILTERS)
        try:
            entries = await self._fetch_all(remote_id, query_type)
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedResponseError(f"Unexpected listing data for id {remote_id}: {exc}") from exc
        LOGGER.debug("Fetched %s listing entries for id %s", len(entries), remote_id)
        return entries
