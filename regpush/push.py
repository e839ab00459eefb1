"""Credential lookup and push orchestration for a single image.

1. Resolves registry credentials for the image's host from the catalogs.
2. Encodes them into an ``X-Registry-Auth`` token.
3. Connects to the container runtime and negotiates the API version.
4. Starts the push and interprets the status stream to completion.

Every failure propagates to the caller as an exception; nothing is
retried.  A fresh runtime client is used per call.
"""

from __future__ import annotations

from contextlib import closing

from regpush import log, runtime
from regpush.auth import encode_auth
from regpush.catalog import Catalogs
from regpush.credentials import resolve_credentials
from regpush.stream import interpret


def auth_and_push(
    catalogs: Catalogs,
    image: str,
    *,
    base_url: str | None = None,
    timeout: float | None = None,
) -> None:
    """Find the registry credential for *image* and push it.

    Parameters
    ----------
    catalogs:
        Registry and credential catalogs to resolve credentials from.
    image:
        Image reference, e.g. ``registry.example.com:5000/app:1.0``.
    base_url:
        Runtime endpoint (``unix:///var/run/docker.sock``, ``tcp://...``).
        Defaults to the ``DOCKER_HOST`` environment.
    timeout:
        Transport timeout in seconds, ``None`` for no timeout.
    """
    creds = resolve_credentials(catalogs, image)
    if creds:
        log.debug(f"Pushing {image} as {creds.username}")
    else:
        log.debug(f"Pushing {image} anonymously")
    token = encode_auth(creds.username, creds.secret)

    with closing(runtime.connect(base_url, timeout=timeout)) as api:
        version = runtime.negotiate_version(api)
        stream = runtime.push(api, image, token, version)
        interpret(stream, image)
