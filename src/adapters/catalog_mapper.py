"""Catalog-to-core entry mapping adapter.

This keeps the Ignition JSON layout out of the core pipeline.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from core.models import CatalogEntry

REMOTE_DATE_FORMAT = "%m/%d/%Y"
# Used by the catalog when a row has no date at all.
FALLBACK_DATE = "01/01/2023"


def parse_remote_date(value: Optional[str]) -> datetime:
    """Parse an Ignition ``MM/DD/YYYY`` date as UTC midnight."""

    parsed = datetime.strptime((value or FALLBACK_DATE).strip(), REMOTE_DATE_FORMAT)
    return parsed.replace(tzinfo=timezone.utc)


def _nested_name(row: dict[str, Any], key: str) -> Optional[str]:
    nested = row.get(key)
    if isinstance(nested, dict):
        return nested.get("name")
    return None


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def build_entry(row: dict[str, Any]) -> CatalogEntry:
    """Build a core CatalogEntry from one row of the listing ``data`` array."""

    has_lyrics = row.get("has_lyrics")
    return CatalogEntry(
        id=int(row["id"]),
        artist=_nested_name(row, "artist"),
        author=_nested_name(row, "author"),
        title=row.get("title"),
        album=row.get("album"),
        created_at=parse_remote_date(row.get("created_at")),
        modified_at=parse_remote_date(row.get("updated_at")),
        url=row.get("file_pc_link") or None,
        downloads=_optional_int(row.get("downloads")),
        lead=row.get("lead"),
        rhythm=row.get("rhythm"),
        bass=row.get("bass"),
        has_lyrics=None if has_lyrics is None else bool(has_lyrics),
    )
