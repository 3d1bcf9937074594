"""Reconciliation of fetched catalog entries with persisted state.

This module is integration-agnostic. It only relies on ports for storage and
notifications, so the same policy runs against SQLite or in-memory fakes.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Iterable, Optional

from core.config import SyncConfig
from core.models import CatalogEntry, Classification
from core.ports import ClassificationStorePort, NotifierPort

LOGGER = logging.getLogger(__name__)


@dataclass
class _IdLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class Reconciler:
    """Classifies entries, announces new or stale ones, and records them."""

    def __init__(
        self,
        store: ClassificationStorePort,
        notifier: NotifierPort,
        config: SyncConfig,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._config = config
        self._id_locks: dict[int, _IdLock] = {}

    @asynccontextmanager
    async def _hold(self, entry_id: int) -> AsyncIterator[None]:
        """Hold the lock for one entry id; it is dropped once nobody uses it."""

        slot = self._id_locks.get(entry_id)
        if slot is None:
            slot = self._id_locks[entry_id] = _IdLock()
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if not slot.users:
                del self._id_locks[entry_id]

    def _is_ignored_creator(self, entry: CatalogEntry) -> bool:
        ignored = self._config.creators_to_ignore
        if not ignored:
            return False
        names = (entry.artist, entry.author)
        return any(name and name.strip().lower() in ignored for name in names)

    def _classify(self, entry: CatalogEntry, pending: set[int]) -> bool:
        classification = self._store.classify(entry.id, entry.modified_at)
        if classification is Classification.NOT_HANDLED:
            return True
        if classification is Classification.OUTDATED:
            pending.add(entry.id)
            return True
        return False

    async def reconcile(
        self,
        entries: Iterable[CatalogEntry],
        pending: Optional[set[int]] = None,
    ) -> list[CatalogEntry]:
        """Run one candidate's listing through the policy, in listing order.

        Returns the entries that were announced. ``pending`` is the pass-wide
        set of ids whose stored timestamp must be refreshed on write.
        """

        if pending is None:
            pending = set()
        cutoff = self._config.start_date
        announced: list[CatalogEntry] = []

        for entry in entries:
            if cutoff is not None and not entry.modified_at > cutoff:
                continue

            # Classify-through-write is held per id so concurrent candidates
            # that list the same entry cannot interleave on it.
            async with self._hold(entry.id):
                if not self._classify(entry, pending):
                    continue
                if self._is_ignored_creator(entry):
                    continue
                if not entry.is_pc:
                    continue

                await self._notifier.send(entry)
                self._store.insert(entry)
                if entry.id in pending:
                    self._store.update_modified_at(entry.id, entry.modified_at)
                    pending.discard(entry.id)

            announced.append(entry)
            LOGGER.debug("Announced entry %s (%s - %s)", entry.id, entry.artist, entry.title)

        return announced
