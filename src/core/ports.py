"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for storage, catalog, and notification
adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from core.models import CatalogEntry, Classification, QueryType


class ClassificationStorePort(Protocol):
    """Storage operations required by the reconciliation policy."""

    def classify(self, entry_id: int, remote_modified_at: datetime) -> Classification:
        ...

    def insert(self, entry: CatalogEntry) -> None:
        ...

    def update_modified_at(self, entry_id: int, modified_at: datetime) -> None:
        ...

    def mark_problematic(self, url: str) -> None:
        ...

    def is_problematic(self, url: str) -> bool:
        ...


class CatalogPort(Protocol):
    """Remote catalog operations required by the orchestrator."""

    async def resolve_id(self, name: str, query_type: QueryType) -> Optional[int]:
        ...

    async def fetch_entries(self, remote_id: int, query_type: QueryType) -> Sequence[CatalogEntry]:
        ...


class NotifierPort(Protocol):
    """Notification operations required by the reconciliation policy."""

    async def send(self, entry: CatalogEntry) -> None:
        ...
