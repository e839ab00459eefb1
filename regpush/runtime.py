"""Thin wrapper around the container runtime's HTTP API.

This module has no credential or catalog logic.  It opens a client to the
local Docker-compatible endpoint, negotiates the API version and starts a
push, handing back the raw status stream.  Interpreting that stream is
:mod:`regpush.stream`'s job.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote

import docker
import docker.errors
import requests
from docker.constants import DEFAULT_DOCKER_API_VERSION
from docker.utils import kwargs_from_env, parse_repository_tag, version_lt

from regpush import log

# The API-Version ping header appeared in 1.25; older engines omit it.
LEGACY_API_VERSION = "1.24"
_VERSION_RE = re.compile(r"^\d+(\.\d+)*$")


class RuntimeAPIError(Exception):
    """Base class for failures talking to the runtime endpoint."""


class ConnectError(RuntimeAPIError):
    """Raised when no client can be created for the runtime endpoint."""


class PingError(RuntimeAPIError):
    """Raised when the endpoint's API version cannot be queried."""


class PushRequestError(RuntimeAPIError):
    """Raised when the runtime refuses to start a push."""

    def __init__(self, image: str, reason: str, status_code: int | None = None) -> None:
        self.image = image
        self.reason = reason
        self.status_code = status_code
        prefix = f"HTTP {status_code}: " if status_code else ""
        super().__init__(f"Cannot push image '{image}': {prefix}{reason}")


@dataclass(frozen=True)
class NegotiatedVersion:
    """API versions supported by the client and reported by the server."""

    client: str
    server: str

    @property
    def downgraded(self) -> bool:
        return version_lt(self.server, self.client)

    @property
    def effective(self) -> str:
        """The version requests are issued with."""
        return self.server if self.downgraded else self.client


class PushStream:
    """Newline-delimited status stream of a running push.

    Iterating yields raw lines.  :meth:`close` releases the HTTP response
    and must be called on every exit path.
    """

    def __init__(self, response: requests.Response) -> None:
        self._response = response

    def __iter__(self):
        return iter(self._response.raw)

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> PushStream:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def connect(
    base_url: str | None = None,
    *,
    timeout: float | None = None,
) -> docker.APIClient:
    """Return a client for the runtime endpoint.

    With no *base_url* the standard ``DOCKER_HOST`` / ``DOCKER_TLS_VERIFY``
    / ``DOCKER_CERT_PATH`` environment is used.  ``timeout=None`` disables
    the transport timeout.
    """
    try:
        kwargs = kwargs_from_env()
        if base_url is not None:
            kwargs["base_url"] = base_url
        api = docker.APIClient(
            version=DEFAULT_DOCKER_API_VERSION,
            timeout=timeout,
            **kwargs,
        )
    except docker.errors.DockerException as exc:
        raise ConnectError(f"cannot connect to container runtime: {exc}") from exc
    log.debug(f"Connected to {api.base_url}")
    return api


def ping_version(api: docker.APIClient) -> str:
    """Return the API version reported by ``GET /_ping``."""
    try:
        response = api.get(f"{api.base_url}/_ping", timeout=api.timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as exc:
        raise PingError(f"cannot ping container runtime: {exc}") from exc
    version = response.headers.get("API-Version")
    if not version:
        return LEGACY_API_VERSION
    if not _VERSION_RE.match(version):
        log.warn(
            f"Runtime reported unparseable API version {version!r}, "
            f"assuming {LEGACY_API_VERSION}"
        )
        return LEGACY_API_VERSION
    return version


def negotiate_version(
    api: docker.APIClient,
    client_version: str = DEFAULT_DOCKER_API_VERSION,
) -> NegotiatedVersion:
    """Query the endpoint and settle on an API version both sides speak."""
    negotiated = NegotiatedVersion(client=client_version, server=ping_version(api))
    if negotiated.downgraded:
        log.debug(
            f"Runtime speaks API {negotiated.server}, "
            f"downgrading from {negotiated.client}"
        )
    return negotiated


def _error_reason(response: requests.Response) -> str:
    try:
        message = response.json().get("message")
    except (ValueError, AttributeError):
        message = None
    return message or response.reason or response.text.strip()


def push(
    api: docker.APIClient,
    image: str,
    token: str,
    version: NegotiatedVersion,
) -> PushStream:
    """Start pushing *image* and return its status stream.

    *token* is sent verbatim as ``X-Registry-Auth``.  Requests use the
    negotiated :attr:`NegotiatedVersion.effective` version.
    """
    repository, tag = parse_repository_tag(image)
    url = (
        f"{api.base_url}/v{version.effective}/images/"
        f"{quote(repository, safe='/:')}/push"
    )
    params = {"tag": tag} if tag else {}
    log.debug(f"POST {url} {params}")
    try:
        response = api.post(
            url,
            params=params,
            headers={"X-Registry-Auth": token},
            stream=True,
            timeout=api.timeout,
        )
    except requests.exceptions.RequestException as exc:
        raise PushRequestError(image, str(exc)) from exc

    if response.status_code >= 400:
        try:
            reason = _error_reason(response)
        finally:
            response.close()
        raise PushRequestError(image, reason, response.status_code)
    return PushStream(response)
