"""Error types raised by catalog adapters and handled by the core."""

from __future__ import annotations


class CatalogError(Exception):
    """The remote catalog could not be reached or answered with an error."""


class MalformedResponseError(CatalogError):
    """The remote catalog answered with something other than JSON data."""
