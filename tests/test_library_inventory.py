from __future__ import annotations

from adapters.library_inventory import load_inventory
from core.models import LibraryItem


def test_load_inventory_reads_csv(tmp_path) -> None:
    path = tmp_path / "library.csv"
    path.write_text(
        "artist,path\n"
        "Artist1,C:\\dlc\\artist1.psarc\n"
        " ,C:\\dlc\\blank.psarc\n"
        "Artist2,/dlc/artist2.psarc\n",
        encoding="utf-8",
    )

    assert load_inventory(str(path)) == [
        LibraryItem(artist="Artist1", path="C:\\dlc\\artist1.psarc"),
        LibraryItem(artist="Artist2", path="/dlc/artist2.psarc"),
    ]


def test_load_inventory_missing_file(tmp_path) -> None:
    assert load_inventory(str(tmp_path / "missing.csv")) == []
