"""Candidate derivation from the local library (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from core.config import FilterConfig, normalize_names
from core.models import Candidate, LibraryItem, QueryType


@dataclass(frozen=True)
class CandidateSet:
    """Artist and creator names to query in one pass."""

    artists: frozenset[str]
    creators: frozenset[str]

    def __len__(self) -> int:
        return len(self.artists) + len(self.creators)

    def candidates(self) -> Iterator[Candidate]:
        for name in self.artists:
            yield Candidate(name=name, query_type=QueryType.ARTIST)
        for name in self.creators:
            yield Candidate(name=name, query_type=QueryType.CREATOR)


def _normalize_path(path: str) -> str:
    return path.lower().replace("\\", "/")


def _in_ignored_folder(path: str, folders: Iterable[str]) -> bool:
    normalized = _normalize_path(path)
    return any(f"/{folder}/" in normalized for folder in folders)


def build_candidates(items: Iterable[LibraryItem], filters: FilterConfig) -> CandidateSet:
    """Derive the artist and creator candidates for a pass.

    Matching logic:
    - Library items stored below an ignored folder are skipped.
    - Artist names starting with an ignored prefix are skipped (case-insensitive).
    - Explicitly included artists are always queried.
    - Creator names are lowercased; artist names keep their case.
    """

    folders = normalize_names(filters.folders_to_ignore)
    ignored_prefixes = tuple(normalize_names(filters.artists_to_ignore))

    artists: set[str] = set()
    for item in items:
        if _in_ignored_folder(item.path, folders):
            continue
        name = item.artist or ""
        if ignored_prefixes and name.strip().lower().startswith(ignored_prefixes):
            continue
        artists.add(name)

    artists.update(filters.artists_to_include)
    artist_names = {name.strip() for name in artists if name and name.strip()}

    return CandidateSet(
        artists=frozenset(artist_names),
        creators=frozenset(normalize_names(filters.creators_to_include)),
    )
