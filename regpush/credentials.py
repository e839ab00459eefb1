"""Registry credential lookup for an image reference.

Matches the image's registry host against the registry catalog, then
picks the credential stored for that registry.  A missing registry or
credential is not an error: the push goes ahead anonymously.
"""

from __future__ import annotations

from dataclasses import dataclass

from regpush import log
from regpush.catalog import Catalogs, CredentialEntry, RegistryEntry
from regpush.reference import split_host_name


@dataclass(frozen=True)
class Credentials:
    """Username/secret pair.  Falsy when both are empty (anonymous)."""

    username: str = ""
    secret: str = ""

    def __bool__(self) -> bool:
        return bool(self.username or self.secret)

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, secret='***')"


ANONYMOUS = Credentials()


def _missing(image: str) -> None:
    log.warn(
        f"Cannot find registry credential for '{image}', "
        "You probably need to add it in registries configuration."
    )


def find_registry(entries: list[RegistryEntry], host: str) -> RegistryEntry | None:
    """Return the first entry whose server address equals *host*."""
    for entry in entries:
        if entry.server_address == host:
            return entry
    return None


def find_credential(
    entries: list[CredentialEntry], registry_id: str
) -> CredentialEntry | None:
    """Return the first credential stored for *registry_id*."""
    for entry in entries:
        if entry.registry_id == registry_id:
            return entry
    return None


def resolve_credentials(catalogs: Catalogs, image: str) -> Credentials:
    """Return the credentials to push *image* with.

    Catalog listing errors propagate unchanged.  The credential catalog
    is only listed once a registry has matched.
    """
    registries = catalogs.registries.list()
    host, _ = split_host_name(image)

    registry = find_registry(registries, host)
    if registry is None:
        _missing(image)
        return ANONYMOUS
    log.debug(f"Registry {registry.id} matches host {host}")

    credential = find_credential(catalogs.credentials.list(), registry.id)
    if credential is None:
        _missing(image)
        return ANONYMOUS
    return Credentials(
        username=credential.public_value,
        secret=credential.secret_value,
    )
