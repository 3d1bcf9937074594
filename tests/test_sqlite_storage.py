from __future__ import annotations

import threading
from datetime import datetime, timezone

from adapters.sqlite_storage import SQLiteClassificationStore
from core.models import CatalogEntry, Classification


def _ts(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _entry(entry_id: int, modified: int, artist: str = "A") -> CatalogEntry:
    return CatalogEntry(
        id=entry_id,
        artist=artist,
        author="creator",
        title="Song",
        album="Album",
        created_at=_ts(10),
        modified_at=_ts(modified),
        url="https://example.test/file",
    )


def _store(tmp_path) -> SQLiteClassificationStore:
    store = SQLiteClassificationStore(str(tmp_path / "forgewatch.sqlite"))
    store.init_db()
    return store


def test_init_db_is_idempotent(tmp_path) -> None:
    store = _store(tmp_path)
    store.insert(_entry(1, 100))
    store.init_db()
    assert store.get_record(1) is not None


def test_classify_unknown_id_is_not_handled(tmp_path) -> None:
    store = _store(tmp_path)
    assert store.classify(5, _ts(0)) is Classification.NOT_HANDLED
    assert store.classify(5, _ts(10_000)) is Classification.NOT_HANDLED


def test_classify_compares_modified_dates(tmp_path) -> None:
    store = _store(tmp_path)
    store.insert(_entry(5, 100))
    assert store.classify(5, _ts(50)) is Classification.HANDLED
    assert store.classify(5, _ts(100)) is Classification.HANDLED
    assert store.classify(5, _ts(150)) is Classification.OUTDATED


def test_insert_keeps_first_seen_fields(tmp_path) -> None:
    store = _store(tmp_path)
    store.insert(_entry(1, 100, artist="A"))
    store.insert(_entry(1, 300, artist="B"))
    record = store.get_record(1)
    assert record is not None
    assert record.artist == "A"
    assert record.modified_at == _ts(100)


def test_update_modified_at_moves_the_threshold(tmp_path) -> None:
    store = _store(tmp_path)
    store.insert(_entry(5, 100))
    store.update_modified_at(5, _ts(150))
    assert store.classify(5, _ts(120)) is Classification.HANDLED
    assert store.classify(5, _ts(200)) is Classification.OUTDATED


def test_update_modified_at_missing_id_is_noop(tmp_path) -> None:
    store = _store(tmp_path)
    store.update_modified_at(99, _ts(150))
    assert store.get_record(99) is None
    assert store.classify(99, _ts(150)) is Classification.NOT_HANDLED


def test_problematic_urls(tmp_path) -> None:
    store = _store(tmp_path)
    url = "https://example.test/broken"
    assert not store.is_problematic(url)
    store.mark_problematic(url)
    store.mark_problematic(url)
    assert store.is_problematic(url)
    assert not store.is_problematic("https://example.test/other")


def test_state_survives_reopen(tmp_path) -> None:
    store = _store(tmp_path)
    store.insert(_entry(7, 100))
    store.mark_problematic("https://example.test/broken")

    reopened = _store(tmp_path)
    assert reopened.classify(7, _ts(100)) is Classification.HANDLED
    assert reopened.is_problematic("https://example.test/broken")


def test_concurrent_inserts_do_not_corrupt(tmp_path) -> None:
    store = _store(tmp_path)

    def _worker(offset: int) -> None:
        for entry_id in range(20):
            store.insert(_entry(entry_id, 100 + offset, artist=f"worker-{offset}"))

    threads = [threading.Thread(target=_worker, args=(offset,)) for offset in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for entry_id in range(20):
        record = store.get_record(entry_id)
        assert record is not None
        assert record.artist.startswith("worker-")
