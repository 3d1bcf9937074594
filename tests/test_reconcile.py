from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

from core.config import SyncConfig, parse_cutoff
from core.models import CatalogEntry, Classification
from core.reconcile import Reconciler


class FakeStore:
    def __init__(self) -> None:
        self.records: dict[int, CatalogEntry] = {}
        self.modified: dict[int, datetime] = {}
        self.inserted: list[int] = []
        self.updated: list[tuple[int, datetime]] = []

    def classify(self, entry_id: int, remote_modified_at: datetime) -> Classification:
        if entry_id not in self.modified:
            return Classification.NOT_HANDLED
        if remote_modified_at > self.modified[entry_id]:
            return Classification.OUTDATED
        return Classification.HANDLED

    def insert(self, entry: CatalogEntry) -> None:
        self.inserted.append(entry.id)
        if entry.id not in self.records:
            self.records[entry.id] = entry
            self.modified[entry.id] = entry.modified_at

    def update_modified_at(self, entry_id: int, modified_at: datetime) -> None:
        self.updated.append((entry_id, modified_at))
        if entry_id in self.modified:
            self.modified[entry_id] = modified_at

    def mark_problematic(self, url: str) -> None:
        raise AssertionError("not used by the reconciler")

    def is_problematic(self, url: str) -> bool:
        raise AssertionError("not used by the reconciler")


class FakeNotifier:
    def __init__(self) -> None:
        self.sent: list[CatalogEntry] = []

    async def send(self, entry: CatalogEntry) -> None:
        self.sent.append(entry)


def _entry(
    entry_id: int,
    modified: datetime,
    *,
    url: Optional[str] = "https://example.test/file",
    artist: str = "Artist1",
    author: str = "creator",
) -> CatalogEntry:
    return CatalogEntry(
        id=entry_id,
        artist=artist,
        author=author,
        title=f"Song {entry_id}",
        album="Album",
        created_at=modified,
        modified_at=modified,
        url=url,
    )


def _day(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def test_new_entry_is_announced_and_entry_without_url_is_dropped() -> None:
    store = FakeStore()
    notifier = FakeNotifier()
    reconciler = Reconciler(store, notifier, SyncConfig())

    entries = [_entry(1, _day(2021, 1, 1)), _entry(2, _day(2021, 2, 1), url="")]
    announced = asyncio.run(reconciler.reconcile(entries))

    assert [entry.id for entry in announced] == [1]
    assert [entry.id for entry in notifier.sent] == [1]
    assert store.inserted == [1]
    assert 2 not in store.records


def test_handled_entry_is_skipped() -> None:
    store = FakeStore()
    store.insert(_entry(1, _day(2021, 1, 1)))
    store.inserted.clear()
    notifier = FakeNotifier()
    reconciler = Reconciler(store, notifier, SyncConfig())

    asyncio.run(reconciler.reconcile([_entry(1, _day(2021, 1, 1))]))

    assert notifier.sent == []
    assert store.inserted == []


def test_outdated_entry_is_announced_and_timestamp_refreshed() -> None:
    store = FakeStore()
    store.insert(_entry(1, _day(2021, 1, 1)))
    notifier = FakeNotifier()
    reconciler = Reconciler(store, notifier, SyncConfig())
    pending: set[int] = set()

    asyncio.run(reconciler.reconcile([_entry(1, _day(2021, 3, 1))], pending))

    assert [entry.id for entry in notifier.sent] == [1]
    assert store.updated == [(1, _day(2021, 3, 1))]
    assert store.modified[1] == _day(2021, 3, 1)
    assert pending == set()


def test_outdated_entry_dropped_by_filters_stays_pending() -> None:
    store = FakeStore()
    store.insert(_entry(1, _day(2021, 1, 1)))
    reconciler = Reconciler(store, FakeNotifier(), SyncConfig())
    pending: set[int] = set()

    asyncio.run(reconciler.reconcile([_entry(1, _day(2021, 3, 1), url=None)], pending))

    assert pending == {1}
    assert store.updated == []


def test_cutoff_drops_entries_not_strictly_after() -> None:
    store = FakeStore()
    notifier = FakeNotifier()
    config = SyncConfig(start_date=parse_cutoff("2020-01-01"))
    reconciler = Reconciler(store, notifier, config)

    entries = [
        _entry(1, _day(2019, 12, 31)),
        _entry(2, _day(2020, 1, 1)),
        _entry(3, _day(2020, 1, 2)),
    ]
    asyncio.run(reconciler.reconcile(entries))

    assert [entry.id for entry in notifier.sent] == [3]


def test_malformed_cutoff_is_skipped(caplog) -> None:
    assert parse_cutoff("01-2020-99") is None
    assert "Invalid start date" in caplog.text

    notifier = FakeNotifier()
    config = SyncConfig(start_date=parse_cutoff("not a date"))
    reconciler = Reconciler(FakeStore(), notifier, config)
    asyncio.run(reconciler.reconcile([_entry(1, _day(2001, 1, 1))]))

    assert [entry.id for entry in notifier.sent] == [1]


def test_ignored_creators_are_dropped_case_insensitively() -> None:
    store = FakeStore()
    notifier = FakeNotifier()
    config = SyncConfig(creators_to_ignore=frozenset({"spammer"}))
    reconciler = Reconciler(store, notifier, config)

    entries = [
        _entry(1, _day(2021, 1, 1), author="Spammer"),
        _entry(2, _day(2021, 1, 1), artist="SPAMMER"),
        _entry(3, _day(2021, 1, 1)),
    ]
    asyncio.run(reconciler.reconcile(entries))

    assert [entry.id for entry in notifier.sent] == [3]
    assert store.inserted == [3]


def test_same_id_across_concurrent_listings_is_announced_once() -> None:
    store = FakeStore()
    notifier = FakeNotifier()
    reconciler = Reconciler(store, notifier, SyncConfig())

    async def _run() -> None:
        pending: set[int] = set()
        await asyncio.gather(
            reconciler.reconcile([_entry(1, _day(2021, 1, 1))], pending),
            reconciler.reconcile([_entry(1, _day(2021, 1, 1))], pending),
        )

    asyncio.run(_run())

    assert [entry.id for entry in notifier.sent] == [1]
    assert store.inserted == [1]


class SlowNotifier(FakeNotifier):
    async def send(self, entry: CatalogEntry) -> None:
        await asyncio.sleep(0.01)
        self.sent.append(entry)


def test_entry_locks_are_released_after_contention() -> None:
    store = FakeStore()
    notifier = SlowNotifier()
    reconciler = Reconciler(store, notifier, SyncConfig())

    async def _run() -> None:
        pending: set[int] = set()
        listing = [_entry(1, _day(2021, 1, 1)), _entry(2, _day(2021, 1, 1))]
        await asyncio.gather(*(reconciler.reconcile(listing, pending) for _ in range(3)))

    asyncio.run(_run())

    assert sorted(entry.id for entry in notifier.sent) == [1, 2]
    assert store.inserted == [1, 2]
    assert reconciler._id_locks == {}
