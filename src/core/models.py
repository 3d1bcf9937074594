"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to the catalog's JSON shapes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class QueryType(Enum):
    """Which remote search scope a candidate name is looked up in."""

    ARTIST = "artist"
    CREATOR = "creator"


class Classification(Enum):
    """Outcome of comparing a fetched entry with persisted state."""

    NOT_HANDLED = "not_handled"
    HANDLED = "handled"
    OUTDATED = "outdated"


@dataclass(frozen=True)
class LibraryItem:
    """One locally-known song, as supplied by the library inventory."""

    artist: str
    path: str


@dataclass(frozen=True)
class Candidate:
    """A single name queued for a remote catalog query."""

    name: str
    query_type: QueryType


@dataclass(frozen=True)
class CatalogEntry:
    """One remote catalog item, immutable once fetched."""

    id: int
    artist: Optional[str]
    author: Optional[str]
    title: Optional[str]
    album: Optional[str]
    created_at: datetime
    modified_at: datetime
    url: Optional[str] = None
    downloads: Optional[int] = None
    lead: Optional[str] = None
    rhythm: Optional[str] = None
    bass: Optional[str] = None
    has_lyrics: Optional[bool] = None

    @property
    def is_lead(self) -> bool:
        return bool(self.lead and self.lead.strip())

    @property
    def is_rhythm(self) -> bool:
        return bool(self.rhythm and self.rhythm.strip())

    @property
    def is_bass(self) -> bool:
        return bool(self.bass and self.bass.strip())

    @property
    def is_pc(self) -> bool:
        return bool(self.url and self.url.strip())


@dataclass(frozen=True)
class ClassificationRecord:
    """Persisted representation of an announced entry."""

    id: int
    artist: str
    title: str
    album: str
    modified_at: datetime
    created_at: datetime
    url: str
