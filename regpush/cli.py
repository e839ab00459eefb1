"""Command-line interface for regpush.

Parses arguments, loads configuration, and dispatches to the push or
resolve command.  This is the only place where exceptions become exit
statuses.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import regpush
from regpush import catalog as catalog_mod
from regpush import log
from regpush.config import Config, parse_timeout
from regpush.config import load as load_config
from regpush.credentials import resolve_credentials
from regpush.push import auth_and_push
from regpush.reference import split_host_name

# ── Helpers ───────────────────────────────────────────────────────────

def _make_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with all subcommands."""

    parser = argparse.ArgumentParser(
        prog="regpush",
        description="Push container images with credentials from a registry catalog",
        epilog="Run 'regpush <command> --help' for subcommand-specific options.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"regpush {regpush.VERSION}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="enable debug logging",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        type=Path,
        default=None,
        help="config file (default: .regpush.yaml, then ~/.config/regpush/config.yaml)",
    )
    parser.add_argument(
        "--catalog",
        metavar="FILE",
        type=Path,
        default=None,
        help="registry/credential catalog YAML (default: registries.yaml)",
    )
    parser.add_argument(
        "--docker-host",
        metavar="URL",
        default=None,
        help="container runtime endpoint (default: $DOCKER_HOST)",
    )
    parser.add_argument(
        "--timeout",
        metavar="SEC",
        default=None,
        help="transport timeout in seconds (default: none)",
    )

    sub = parser.add_subparsers(dest="command", title="commands")

    # -- push --
    push_parser = sub.add_parser(
        "push",
        help="push image(s) using credentials from the catalog",
        description="Resolve registry credentials and push each image in order.",
    )
    push_parser.add_argument("images", nargs="+", metavar="IMAGE")

    # -- resolve --
    resolve_parser = sub.add_parser(
        "resolve",
        help="show which registry and credential an image would use",
        description="Resolve the registry credential for an image without pushing.",
    )
    resolve_parser.add_argument("image", metavar="IMAGE")

    return parser


def _apply_overrides(cfg: Config, args: argparse.Namespace) -> Config:
    """Apply CLI overrides (--catalog, --docker-host, --timeout) to the config."""
    if args.catalog is not None:
        cfg.catalog = args.catalog
    if args.docker_host is not None:
        cfg.docker_host = args.docker_host
    if args.timeout is not None:
        cfg.timeout = parse_timeout(args.timeout, "--timeout")
    return cfg


def _dispatch_push(cfg: Config, args: argparse.Namespace) -> int:
    """Push every image, stopping at the first failure."""
    catalogs = catalog_mod.from_file(cfg.catalog)
    for image in args.images:
        log.step(f"Pushing {image}")
        auth_and_push(
            catalogs,
            image,
            base_url=cfg.docker_host,
            timeout=cfg.timeout,
        )
    return 0


def _dispatch_resolve(cfg: Config, args: argparse.Namespace) -> int:
    """Print the host, path and credential user for an image."""
    catalogs = catalog_mod.from_file(cfg.catalog)
    host, path = split_host_name(args.image)
    creds = resolve_credentials(catalogs, args.image)
    print(f"host:     {host}")
    print(f"path:     {path}")
    print(f"username: {creds.username if creds else '(anonymous)'}")
    return 0


_DISPATCHERS: dict[str, callable] = {
    "push": _dispatch_push,
    "resolve": _dispatch_resolve,
}


# ── Entry point ───────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> None:
    """Parse arguments, load config, dispatch to subcommand.

    Parameters
    ----------
    argv:
        Argument list for testing.  Defaults to ``sys.argv[1:]``.
    """
    parser = _make_parser()
    args = parser.parse_args(argv)

    log.set_verbose(args.verbose)

    if args.command is None:
        parser.print_help(sys.stderr)
        sys.exit(2)

    try:
        cfg = _apply_overrides(load_config(args.config), args)
    except Exception as exc:
        log.error(f"failed to load configuration: {exc}")
        sys.exit(1)
    log.debug(f"catalog: {cfg.catalog}, runtime: {cfg.docker_host or '$DOCKER_HOST'}")

    dispatcher = _DISPATCHERS[args.command]
    try:
        rc = dispatcher(cfg, args)
    except KeyboardInterrupt:
        log.warn("interrupted")
        sys.exit(130)
    except Exception as exc:
        log.error(f"{args.command} failed: {exc}")
        if log.is_verbose():
            import traceback
            traceback.print_exc()
        sys.exit(1)

    sys.exit(rc)
