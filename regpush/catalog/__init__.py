"""Registry and credential catalog abstraction.

A catalog is anything that can list entries.  The push flow never talks
to a storage backend directly; it receives a :class:`Catalogs` bundle and
calls :meth:`Catalog.list` on it.  Use :func:`from_file` to obtain the
YAML-backed implementation, or :class:`~regpush.catalog.static.StaticCatalog`
for fixed in-memory entries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar


class CatalogError(Exception):
    """Raised when a catalog cannot be listed."""


@dataclass(frozen=True)
class RegistryEntry:
    """One known registry endpoint."""

    id: str
    server_address: str


@dataclass(frozen=True)
class CredentialEntry:
    """Stored credential for the registry identified by *registry_id*."""

    registry_id: str
    public_value: str
    secret_value: str

    def __repr__(self) -> str:
        return (
            f"CredentialEntry(registry_id={self.registry_id!r}, "
            f"public_value={self.public_value!r}, secret_value='***')"
        )


T = TypeVar("T")


class Catalog(ABC, Generic[T]):
    """Abstract base class for a listable catalog."""

    @abstractmethod
    def list(self) -> list[T]:
        """Return every entry.  Raises :class:`CatalogError` on failure."""


@dataclass(frozen=True)
class Catalogs:
    """The registry and credential catalogs used to resolve a push."""

    registries: Catalog[RegistryEntry]
    credentials: Catalog[CredentialEntry]


def from_file(path: str | Path) -> Catalogs:
    """Return catalogs reading registries and credentials from *path*.

    The file is re-read on every listing; see
    :class:`~regpush.catalog.yamlfile.YamlCatalog` for the format.
    """
    from regpush.catalog.yamlfile import YamlCatalog
    path = Path(path)
    return Catalogs(
        registries=YamlCatalog(path, "registries"),
        credentials=YamlCatalog(path, "credentials"),
    )
