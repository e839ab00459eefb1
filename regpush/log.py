"""Logging module for regpush.

Provides colored, prefixed output on stdout/stderr and an opt-in debug
level.  No external dependencies -- stdlib only.
"""

from __future__ import annotations

import sys

# ANSI color codes -- only used when stdout is a terminal.
_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "cyan": "\033[36m",
}

_use_color: bool | None = None
_verbose: bool = False


def _color_enabled() -> bool:
    global _use_color
    if _use_color is None:
        _use_color = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    return _use_color


def set_color(enabled: bool) -> None:
    """Override automatic color detection."""
    global _use_color
    _use_color = enabled


def set_verbose(enabled: bool) -> None:
    """Enable or disable :func:`debug` output."""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    return _verbose


def _c(name: str) -> str:
    """Return the ANSI escape for *name* if color is enabled, else empty string."""
    if _color_enabled():
        return _COLORS.get(name, "")
    return ""


# ── Public API ────────────────────────────────────────────────────────

def step(message: str) -> None:
    """Print a bold step header.  e.g. ``=== Pushing ghcr.io/org/app ===``"""
    sys.stdout.write(
        f"{_c('bold')}{_c('cyan')}=== {message} ==={_c('reset')}\n"
    )
    sys.stdout.flush()


def debug(message: str) -> None:
    if not _verbose:
        return
    sys.stderr.write(f"{_c('dim')}[debug]{_c('reset')} {message}\n")
    sys.stderr.flush()


def info(message: str) -> None:
    sys.stdout.write(f"{_c('blue')}[info]{_c('reset')} {message}\n")
    sys.stdout.flush()


def warn(message: str) -> None:
    sys.stderr.write(f"{_c('yellow')}[warn]{_c('reset')} {message}\n")
    sys.stderr.flush()


def error(message: str) -> None:
    sys.stderr.write(f"{_c('red')}[error]{_c('reset')} {message}\n")
    sys.stderr.flush()


def success(message: str) -> None:
    sys.stdout.write(f"{_c('green')}[ok]{_c('reset')} {message}\n")
    sys.stdout.flush()
