"""Library inventory adapter.

Reads the local song library from a CSV export with ``artist`` and ``path``
columns. Building that export is the job of the library scanner.
"""

from __future__ import annotations

import csv
import logging
import os

from core.models import LibraryItem

LOGGER = logging.getLogger(__name__)


def load_inventory(csv_path: str) -> list[LibraryItem]:
    """Return all library items listed in the CSV export."""

    if not os.path.exists(csv_path):
        LOGGER.warning("Library export not found: %s", csv_path)
        return []

    items: list[LibraryItem] = []
    with open(csv_path, "r", encoding="utf-8", newline="") as handle:
        for row in csv.DictReader(handle):
            artist = (row.get("artist") or "").strip()
            if not artist:
                continue
            items.append(LibraryItem(artist=artist, path=row.get("path") or ""))
    LOGGER.info("Loaded %s library items from %s", len(items), csv_path)
    return items
