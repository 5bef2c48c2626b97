"""
Errors that stop ATLAS from starting.

Everything else (bad HDI rows, odd catalog fields, empty query results) is
handled where it happens and never reaches these types.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AtlasError(Exception):
    source: str
    message: str

    def __str__(self) -> str:
        return f"[{self.source}] {self.message}"


class CatalogError(AtlasError):
    """The country catalog could not be fetched or decoded."""


class FavoritesError(AtlasError):
    """The favorites file exists but cannot be read, decoded or written."""
