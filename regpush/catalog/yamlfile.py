"""YAML file catalog backend.

Reads one section of a YAML document on every :meth:`YamlCatalog.list`
call.  Nothing is cached, so edits to the file (or to referenced
environment variables) take effect on the next push::

    registries:
      - id: 1sr1
        server_address: registry.example.com:5000
    credentials:
      - registry_id: 1sr1
        public_value: deploy
        secret_value_env: REGISTRY_TOKEN

A credential takes its secret from ``secret_value`` or, when absent, from
the environment variable named by ``secret_value_env``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from regpush import log
from regpush.catalog import Catalog, CatalogError, CredentialEntry, RegistryEntry

SECTIONS = ("registries", "credentials")


def _load_document(path: Path) -> dict[str, Any]:
    try:
        with open(path) as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise CatalogError(f"cannot read catalog {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise CatalogError(f"invalid YAML in catalog {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise CatalogError(f"catalog {path} must be a mapping, got {type(data).__name__}")
    return data


def _require(item: dict[str, Any], key: str, where: str) -> str:
    value = item.get(key)
    if value is None or value == "":
        raise CatalogError(f"{where}: missing required key '{key}'")
    return str(value)


def _parse_registry(item: Any, where: str) -> RegistryEntry:
    if not isinstance(item, dict):
        raise CatalogError(f"{where}: expected a mapping")
    return RegistryEntry(
        id=_require(item, "id", where),
        server_address=_require(item, "server_address", where),
    )


def _parse_credential(item: Any, where: str) -> CredentialEntry:
    if not isinstance(item, dict):
        raise CatalogError(f"{where}: expected a mapping")
    secret = item.get("secret_value")
    if secret is None:
        env_name = item.get("secret_value_env")
        if env_name:
            secret = os.environ.get(str(env_name))
            if secret is None:
                log.warn(f"{where}: environment variable {env_name} is not set")
    return CredentialEntry(
        registry_id=_require(item, "registry_id", where),
        public_value=str(item.get("public_value") or ""),
        secret_value=str(secret or ""),
    )


_PARSERS = {
    "registries": _parse_registry,
    "credentials": _parse_credential,
}


class YamlCatalog(Catalog[Any]):
    """Catalog backed by one section of a YAML file."""

    def __init__(self, path: str | Path, section: str) -> None:
        if section not in SECTIONS:
            raise ValueError(f"unknown catalog section: {section}")
        self.path = Path(path)
        self.section = section

    def list(self) -> list[Any]:
        data = _load_document(self.path)
        items = data.get(self.section) or []
        if not isinstance(items, list):
            raise CatalogError(f"{self.path}: '{self.section}' must be a list")
        parse = _PARSERS[self.section]
        entries = [
            parse(item, f"{self.path}: {self.section}[{i}]")
            for i, item in enumerate(items)
        ]
        log.debug(f"Listed {len(entries)} {self.section} from {self.path}")
        return entries
