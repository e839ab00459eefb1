"""Image reference parsing.

Splits ``[host[:port]/]repository[:tag]`` into the registry host and the
repository path.  Pure string handling: no network access, never raises.
"""

from __future__ import annotations

# Registry used when a reference carries no host segment (``nginx``,
# ``myorg/app:1.0``).
DEFAULT_REGISTRY = "index.docker.io"


def split_host_name(image: str) -> tuple[str, str]:
    """Return ``(host, path)`` for *image*.

    The segment before the first ``/`` is a host only if it contains a
    ``.`` or ``:``, or is exactly ``localhost``.  Otherwise the image lives
    on :data:`DEFAULT_REGISTRY` and *path* is the whole reference.

    >>> split_host_name("myrepo/app:latest")
    ('index.docker.io', 'myrepo/app:latest')
    >>> split_host_name("registry.example.com:5000/app")
    ('registry.example.com:5000', 'app')
    """
    head, sep, rest = image.partition("/")
    if not sep:
        return DEFAULT_REGISTRY, image
    if "." not in head and ":" not in head and head != "localhost":
        return DEFAULT_REGISTRY, image
    return head, rest
