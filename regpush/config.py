"""regpush configuration loading.

This module has ZERO side effects beyond reading files and the
environment.  It returns a plain dataclass; it does not contact the
runtime or read the catalog.

Precedence, lowest first: built-in defaults, the YAML config file,
environment variables, then CLI flags (applied by :mod:`regpush.cli`).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

_DEFAULT_CATALOG = Path("registries.yaml")
_LOCAL_CONFIG = Path(".regpush.yaml")


class ConfigError(Exception):
    """Raised for unreadable or invalid configuration."""


@dataclass
class Config:
    """Runtime settings for a push session."""

    catalog: Path = _DEFAULT_CATALOG
    docker_host: str | None = None
    timeout: float | None = None


def _user_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config"
    )
    return Path(base) / "regpush" / "config.yaml"


def _find_config_file(base: Path) -> Path | None:
    """Return the first existing config file, local before per-user."""
    for candidate in (base / _LOCAL_CONFIG, _user_config_path()):
        if candidate.is_file():
            return candidate
    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return data


def parse_timeout(value: Any, source: str) -> float | None:
    """Return *value* as positive seconds, or None when unset."""
    if value is None or value == "":
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source}: timeout must be a number, got {value!r}") from None
    if timeout <= 0:
        raise ConfigError(f"{source}: timeout must be positive, got {value!r}")
    return timeout


def load(path: Path | None = None, base: Path | None = None) -> Config:
    """Load configuration.

    Parameters
    ----------
    path:
        Explicit config file.  When omitted, ``.regpush.yaml`` in *base*
        and then ``$XDG_CONFIG_HOME/regpush/config.yaml`` are tried; having
        neither is fine.
    base:
        Directory relative paths are resolved against.  Defaults to the
        current working directory.
    """
    base = base or Path.cwd()
    cfg = Config(catalog=base / _DEFAULT_CATALOG)

    config_file = path or _find_config_file(base)
    if config_file is not None:
        data = _read_yaml(config_file)
        if data.get("catalog"):
            catalog = Path(str(data["catalog"])).expanduser()
            cfg.catalog = catalog if catalog.is_absolute() else config_file.parent / catalog
        if data.get("docker_host"):
            cfg.docker_host = str(data["docker_host"])
        if "timeout" in data:
            cfg.timeout = parse_timeout(data["timeout"], str(config_file))

    env = os.environ
    if env.get("REGPUSH_CATALOG"):
        cfg.catalog = Path(env["REGPUSH_CATALOG"]).expanduser()
    if env.get("DOCKER_HOST"):
        cfg.docker_host = env["DOCKER_HOST"]
    if "REGPUSH_TIMEOUT" in env:
        cfg.timeout = parse_timeout(env["REGPUSH_TIMEOUT"], "REGPUSH_TIMEOUT")

    return cfg
