"""Shared fixtures for regpush tests."""

from __future__ import annotations

import argparse

from regpush.catalog import Catalogs, CredentialEntry, RegistryEntry
from regpush.catalog.static import StaticCatalog

SAMPLE_CATALOG = (
    "registries:\n"
    "  - id: 1sr1\n"
    "    server_address: registry.example.com:5000\n"
    "  - id: 1sr2\n"
    "    server_address: index.docker.io\n"
    "credentials:\n"
    "  - registry_id: 1sr1\n"
    "    public_value: deploy\n"
    "    secret_value: s3cret\n"
)


def make_registry(**kwargs) -> RegistryEntry:
    """Factory for RegistryEntry with sensible defaults."""
    defaults = {
        "id": "1sr1",
        "server_address": "registry.example.com:5000",
    }
    defaults.update(kwargs)
    return RegistryEntry(**defaults)


def make_credential(**kwargs) -> CredentialEntry:
    """Factory for CredentialEntry with sensible defaults."""
    defaults = {
        "registry_id": "1sr1",
        "public_value": "deploy",
        "secret_value": "s3cret",
    }
    defaults.update(kwargs)
    return CredentialEntry(**defaults)


def make_catalogs(registries=None, credentials=None) -> Catalogs:
    """Factory for in-memory Catalogs, one matching registry and credential by default."""
    if registries is None:
        registries = [make_registry()]
    if credentials is None:
        credentials = [make_credential()]
    return Catalogs(
        registries=StaticCatalog(registries),
        credentials=StaticCatalog(credentials),
    )


def make_args(**kwargs) -> argparse.Namespace:
    """Factory for argparse.Namespace with common defaults."""
    defaults = {
        "verbose": False,
        "config": None,
        "catalog": None,
        "docker_host": None,
        "timeout": None,
        "command": "push",
        "images": [],
    }
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)
