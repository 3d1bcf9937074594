"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

LOGGER = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "'%Artist' - '%Title' uploaded %ModifiedDate with %Downloads downloads - %URL"


@dataclass(frozen=True)
class FilterConfig:
    """Ignore/include lists used to derive the candidate names."""

    folders_to_ignore: tuple[str, ...] = ()
    artists_to_ignore: tuple[str, ...] = ()
    artists_to_include: tuple[str, ...] = ()
    creators_to_include: tuple[str, ...] = ()


@dataclass(frozen=True)
class SyncConfig:
    """Settings consumed by the reconciliation policy and the notifier."""

    filters: FilterConfig = field(default_factory=FilterConfig)
    creators_to_ignore: frozenset[str] = frozenset()
    start_date: Optional[datetime] = None
    template: str = DEFAULT_TEMPLATE


def split_list(value: Union[str, Iterable[str], None]) -> tuple[str, ...]:
    """Accept a JSON list or a '|'-separated string and return its items."""

    if not value:
        return ()
    if isinstance(value, str):
        return tuple(value.split("|"))
    return tuple(str(item) for item in value)


def normalize_names(values: Iterable[str]) -> list[str]:
    """Trim, lowercase, dedupe, and drop empty names."""

    normalized: list[str] = []
    for value in values:
        name = value.strip().lower()
        if name and name not in normalized:
            normalized.append(name)
    return normalized


def parse_cutoff(raw: Optional[str]) -> Optional[datetime]:
    """Parse the start date cutoff, returning None when unset or invalid.

    An unparsable value is logged and the cutoff is skipped rather than
    aborting the pass.
    """

    if not raw or not raw.strip():
        return None
    text = raw.strip()
    try:
        parsed = datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            LOGGER.error("Invalid start date %r; use the format yyyy-mm-dd", raw)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_sync_config(raw: dict) -> SyncConfig:
    """Build a SyncConfig from the flat ``catalog`` section of config.json."""

    filters = FilterConfig(
        folders_to_ignore=tuple(normalize_names(split_list(raw.get("folders_to_ignore")))),
        artists_to_ignore=tuple(normalize_names(split_list(raw.get("artists_to_ignore")))),
        artists_to_include=split_list(raw.get("artists_to_include")),
        creators_to_include=split_list(raw.get("creators_to_include")),
    )
    return SyncConfig(
        filters=filters,
        creators_to_ignore=frozenset(normalize_names(split_list(raw.get("creators_to_ignore")))),
        start_date=parse_cutoff(raw.get("start_date")),
        template=raw.get("new_song_format") or DEFAULT_TEMPLATE,
    )
