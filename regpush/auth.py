"""Registry auth token encoding.

The container runtime expects registry credentials as a base64url
encoded JSON object in the ``X-Registry-Auth`` header.
"""

from __future__ import annotations

import base64
import binascii
import json


class AuthEncodeError(Exception):
    """Raised when credentials cannot be serialized into a token."""


def encode_auth(username: str, secret: str) -> str:
    """Return the transport token for *username* / *secret*."""
    if not isinstance(username, str) or not isinstance(secret, str):
        raise AuthEncodeError(
            "username and secret must be strings, got "
            f"{type(username).__name__} and {type(secret).__name__}"
        )
    try:
        payload = json.dumps({"username": username, "password": secret})
        raw = payload.encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError) as exc:
        raise AuthEncodeError(f"cannot serialize registry credentials: {exc}") from exc
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_auth(token: str) -> tuple[str, str]:
    """Return ``(username, secret)`` from a token made by :func:`encode_auth`."""
    try:
        data = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise ValueError(f"malformed registry auth token: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("malformed registry auth token: not a JSON object")
    return data.get("username", ""), data.get("password", "")
