"""Push status stream decoding and interpretation.

The runtime reports push progress as newline-delimited JSON objects::

    {"status":"The push refers to repository [registry.example.com/app]"}
    {"id":"5f70bf18a086","status":"Pushing","progress":"[==>   ] 1.2MB/9MB"}
    {"id":"5f70bf18a086","status":"Pushed"}
    {"errorDetail":{"message":"denied"},"error":"denied"}

Records are consumed one at a time in arrival order.  Pure progress
updates are not logged; the first error record ends the push.
"""

from __future__ import annotations

import json
from collections.abc import Generator, Iterable, Iterator
from contextlib import closing
from dataclasses import dataclass
from typing import Any

from regpush import log

_decoder = json.JSONDecoder()


class StreamDecodeError(Exception):
    """Raised when the status stream contains something that is not a record."""


class PushFailedError(Exception):
    """Raised when the runtime reports an error record for a push."""

    def __init__(self, image: str, detail: str = "") -> None:
        self.image = image
        self.detail = detail
        super().__init__(f"Push image '{image}' FAIL")


@dataclass(frozen=True)
class StatusRecord:
    """One decoded status message."""

    id: str = ""
    status: str = ""
    progress: str = ""
    error: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StatusRecord:
        error = None
        detail = data.get("errorDetail")
        if data.get("error") or detail is not None:
            message = data.get("error")
            if not message and isinstance(detail, dict):
                message = detail.get("message")
            error = str(message or "unknown error")

        progress = data.get("progress") or ""
        if not progress and data.get("progressDetail"):
            # Some engines only send the structured form.
            progress = json.dumps(data["progressDetail"], sort_keys=True)

        return cls(
            id=str(data.get("id") or ""),
            status=str(data.get("status") or ""),
            progress=str(progress),
            error=error,
        )

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_progress(self) -> bool:
        return bool(self.progress)

    def message(self) -> str:
        """Return the status text, prefixed with ``id: `` when present."""
        if self.id:
            return f"{self.id}: {self.status}"
        return self.status


def _incomplete(exc: json.JSONDecodeError, text: str) -> bool:
    """True when *text* may just be a record whose remainder is still to come."""
    return exc.msg.startswith("Unterminated string") or exc.pos >= len(text.rstrip())


def _decode_buffer(text: str, lineno: int) -> Generator[StatusRecord, None, str]:
    """Yield every complete record in *text* and return the unparsed tail."""
    pos = 0
    end = len(text)
    while True:
        while pos < end and text[pos].isspace():
            pos += 1
        if pos >= end:
            return ""
        try:
            value, pos = _decoder.raw_decode(text, pos)
        except json.JSONDecodeError as exc:
            if _incomplete(exc, text):
                return text[pos:]
            raise StreamDecodeError(
                f"malformed status record on line {lineno}: {exc.msg}"
            ) from exc
        if not isinstance(value, dict):
            raise StreamDecodeError(
                f"status record on line {lineno} is a {type(value).__name__}, expected an object"
            )
        yield StatusRecord.from_dict(value)


def decode_records(stream: Iterable[bytes]) -> Iterator[StatusRecord]:
    """Yield status records from *stream* until it is exhausted.

    *stream* is anything yielding lines of bytes (a file object, a
    :class:`~regpush.runtime.PushStream`).  Reading is lazy: a record is
    decoded only when the caller asks for it.  A record may span several
    lines.  Malformed input raises :class:`StreamDecodeError`; a clean end
    of input just ends iteration.
    """
    pending = ""
    for lineno, raw in enumerate(stream, start=1):
        try:
            line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        except UnicodeDecodeError as exc:
            raise StreamDecodeError(f"status line {lineno} is not valid UTF-8") from exc
        pending = yield from _decode_buffer(pending + line, lineno)
    if pending.strip():
        raise StreamDecodeError("status stream ended inside a record")


def interpret(stream: Any, image: str) -> None:
    """Consume the status stream of a push of *image*.

    Logs status transitions, stops at the first error record and raises
    :class:`PushFailedError`.  *stream* is closed on every exit path.
    """
    with closing(stream):
        for record in decode_records(stream):
            if record.is_error:
                log.error(record.error)
                raise PushFailedError(image, record.error)
            if not record.is_progress and record.status:
                log.info(record.message())
    log.success(f"Push image '{image}' SUCCESS")
