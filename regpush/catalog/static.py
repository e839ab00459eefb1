"""In-memory catalog backend.

Holds a fixed list of entries.  Useful when the caller already has the
registry data at hand, and as a test double.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeVar

from regpush.catalog import Catalog

T = TypeVar("T")


class StaticCatalog(Catalog[T]):
    """Catalog over a fixed sequence of entries."""

    def __init__(self, entries: Iterable[T] = ()) -> None:
        self._entries = tuple(entries)

    def list(self) -> list[T]:
        return list(self._entries)
