"""Shared notification formatting helpers.

Keeping formatting here prevents drift between notifiers and keeps messages
consistent regardless of where they are delivered.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Callable

from core.config import DEFAULT_TEMPLATE
from core.models import CatalogEntry

# Closed set of supported placeholders. Anything else is left as written.
FIELD_ACCESSORS: dict[str, Callable[[CatalogEntry], Any]] = {
    "ID": lambda entry: entry.id,
    "Artist": lambda entry: entry.artist,
    "Author": lambda entry: entry.author,
    "Title": lambda entry: entry.title,
    "Album": lambda entry: entry.album,
    "Lead": lambda entry: entry.lead,
    "Rhythm": lambda entry: entry.rhythm,
    "Bass": lambda entry: entry.bass,
    "CreationDate": lambda entry: entry.created_at,
    "ModifiedDate": lambda entry: entry.modified_at,
    "Downloads": lambda entry: entry.downloads,
    "IsVocals": lambda entry: entry.has_lyrics,
    "URL": lambda entry: entry.url,
    "IsLead": lambda entry: entry.is_lead,
    "IsRhythm": lambda entry: entry.is_rhythm,
    "IsBass": lambda entry: entry.is_bass,
    "IsPC": lambda entry: entry.is_pc,
}

# Longest names first, so no placeholder is cut short by a shorter name.
PLACEHOLDER_PATTERN = re.compile(
    "%(" + "|".join(re.escape(name) for name in sorted(FIELD_ACCESSORS, key=len, reverse=True)) + ")"
)


def format_value(value: Any) -> str:
    """Return the display form of a single entry field."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    return str(value)


def render_template(template: str, entry: CatalogEntry) -> str:
    """Substitute every recognized ``%Field`` placeholder in the template."""

    if not template:
        template = DEFAULT_TEMPLATE

    def _substitute(match: re.Match) -> str:
        return format_value(FIELD_ACCESSORS[match.group(1)](entry))

    return PLACEHOLDER_PATTERN.sub(_substitute, template)
