"""Request body negotiation.

A request payload is either one of the recognized wire-body variants below,
which are sent as-is, or a structured value (mapping, list, pydantic model)
which is JSON-encoded. Each variant carries its own content-type rule.
"""

from __future__ import annotations

import json
import secrets
from collections.abc import AsyncIterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar
from urllib.parse import urlencode

from pydantic import BaseModel


if TYPE_CHECKING:
    import httpx


__all__ = [
    "JSON_CONTENT_TYPE",
    "BinaryBody",
    "BinaryViewBody",
    "FilePart",
    "MultipartBody",
    "PreparedBody",
    "StreamBody",
    "TextBody",
    "UrlEncodedBody",
    "WireBody",
    "json_default",
    "prepare_body",
]


JSON_CONTENT_TYPE = "application/json"
FORM_URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True, slots=True)
class PreparedBody:
    """Keyword arguments for ``httpx.AsyncClient.build_request``."""

    content: str | bytes | AsyncIterable[bytes] | None = None
    files: list[tuple[str, Any]] | None = None

    def as_request_kwargs(self) -> dict[str, Any]:
        """Return only the keyword arguments that are set."""
        kwargs: dict[str, Any] = {}
        if self.content is not None:
            kwargs["content"] = self.content
        if self.files is not None:
            kwargs["files"] = self.files
        return kwargs


class _WireBodyBase:
    # Content type applied when the caller did not set one.
    default_content_type: ClassVar[str | None] = None

    def apply_content_type(self, headers: httpx.Headers) -> None:
        if self.default_content_type and "content-type" not in headers:
            headers["Content-Type"] = self.default_content_type

    def prepare(self) -> PreparedBody:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class TextBody(_WireBodyBase):
    """A pre-serialized textual body, assumed to be JSON unless told otherwise."""

    text: str

    default_content_type: ClassVar[str | None] = JSON_CONTENT_TYPE

    def prepare(self) -> PreparedBody:
        return PreparedBody(content=self.text)


@dataclass(frozen=True, slots=True)
class BinaryBody(_WireBodyBase):
    """Raw bytes sent verbatim."""

    data: bytes

    def prepare(self) -> PreparedBody:
        return PreparedBody(content=self.data)


@dataclass(frozen=True, slots=True)
class BinaryViewBody(_WireBodyBase):
    """A mutable or zero-copy view over binary data."""

    data: bytearray | memoryview

    def prepare(self) -> PreparedBody:
        return PreparedBody(content=bytes(self.data))


@dataclass(frozen=True, slots=True)
class UrlEncodedBody(_WireBodyBase):
    """Form parameters encoded as ``application/x-www-form-urlencoded``."""

    params: Mapping[str, Any] | Sequence[tuple[str, Any]]

    default_content_type: ClassVar[str | None] = FORM_URLENCODED_CONTENT_TYPE

    def prepare(self) -> PreparedBody:
        return PreparedBody(content=urlencode(self.params, doseq=True))


@dataclass(frozen=True, slots=True)
class StreamBody(_WireBodyBase):
    """An async byte stream consumed once by the transport."""

    stream: AsyncIterable[bytes]

    def prepare(self) -> PreparedBody:
        return PreparedBody(content=self.stream)


@dataclass(frozen=True, slots=True)
class FilePart:
    """One file field of a multipart body."""

    filename: str
    content: Any  # bytes or a binary file object
    content_type: str


@dataclass(frozen=True, slots=True)
class MultipartBody(_WireBodyBase):
    """A multipart/form-data body: file fields followed by settings fields.

    Any content type set by the caller or the defaults is replaced by
    ``multipart/form-data`` with a fresh boundary, which httpx then uses to
    encode the parts. The per-request header also overrides a
    ``Content-Type`` default of an injected ``httpx.AsyncClient``.
    """

    files: tuple[tuple[str, FilePart], ...]
    fields: tuple[tuple[str, str], ...] = ()

    def apply_content_type(self, headers: httpx.Headers) -> None:
        boundary = secrets.token_hex(16)
        headers["Content-Type"] = f"multipart/form-data; boundary={boundary}"

    def prepare(self) -> PreparedBody:
        # (None, value) renders a plain form field without a filename
        parts: list[tuple[str, Any]] = [
            (name, (part.filename, part.content, part.content_type))
            for name, part in self.files
        ]
        parts.extend((key, (None, value)) for key, value in self.fields)
        return PreparedBody(files=parts)


type WireBody = (
    TextBody
    | BinaryBody
    | BinaryViewBody
    | MultipartBody
    | UrlEncodedBody
    | StreamBody
)


def _to_wire_body(payload: object) -> WireBody | None:
    """Wrap native payload types into their wire-body variant."""
    if isinstance(payload, _WireBodyBase):
        return payload  # type: ignore[return-value]
    if isinstance(payload, str):
        return TextBody(payload)
    if isinstance(payload, bytes):
        return BinaryBody(payload)
    if isinstance(payload, bytearray | memoryview):
        return BinaryViewBody(payload)
    if isinstance(payload, AsyncIterable):
        return StreamBody(payload)
    return None


def _encode_json(payload: object) -> str:
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(exclude_none=True, by_alias=True)
    return json.dumps(payload, default=json_default)


def json_default(value: object) -> Any:  # noqa: ANN401
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True, by_alias=True)
    isoformat = getattr(value, "isoformat", None)
    if callable(isoformat):
        return isoformat()
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def prepare_body(payload: object, headers: httpx.Headers) -> PreparedBody | None:
    """Turn a request payload into a wire body, adjusting headers.

    Args:
        payload: None, a wire-body variant (or str/bytes/bytearray/memoryview/
            async byte iterator), or any JSON-serializable value.
        headers: Outgoing request headers, mutated in place.

    Returns:
        The prepared body, or None when there is no payload.
    """
    if payload is None:
        return None

    wire_body = _to_wire_body(payload)
    if wire_body is not None:
        wire_body.apply_content_type(headers)
        return wire_body.prepare()

    # Structured values are always sent as JSON, whatever the caller set.
    headers["Content-Type"] = JSON_CONTENT_TYPE
    return PreparedBody(content=_encode_json(payload))
