"""Decoding of successful responses and normalization of failed ones."""

from __future__ import annotations

from dataclasses import dataclass
from email.message import Message
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Self

import httpx
import structlog

from docling_serve_client.client.exceptions import DoclingError


if TYPE_CHECKING:
    from collections.abc import AsyncIterator


__all__ = [
    "BinaryResult",
    "BlobResult",
    "ResponseMode",
    "decode_response",
    "normalize_error",
]


_logger = structlog.get_logger(__name__)


class ResponseMode(StrEnum):
    """How the body of a successful response is decoded.

    Attributes:
        JSON: Parse as JSON (no value for 204 or empty bodies).
        BINARY: Read the whole body into a ``BinaryResult``.
        BLOB: Return a ``BlobResult`` streaming the body without buffering.
        TEXT: Decode the body as text.
        VOID: Discard the body.
    """

    JSON = "json"
    BINARY = "binary"
    BLOB = "blob"
    TEXT = "text"
    VOID = "void"


def _content_disposition_filename(headers: httpx.Headers) -> str | None:
    value = headers.get("content-disposition")
    if not value:
        return None
    message = Message()
    message["content-disposition"] = value
    filename = message.get_filename()
    return filename or None


@dataclass(frozen=True, slots=True)
class BinaryResult:
    """A fully buffered binary response, e.g. a ZIP archive of results.

    Attributes:
        content: The response body.
        content_type: The response media type, if the server sent one.
        filename: Filename from ``Content-Disposition``, if any.
    """

    content: bytes
    content_type: str | None = None
    filename: str | None = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> Self:
        """Build from a response whose body has been read."""
        return cls(
            content=response.content,
            content_type=response.headers.get("content-type"),
            filename=_content_disposition_filename(response.headers),
        )


class BlobResult:
    """An unbuffered handle on a streaming response body.

    The handle owns the underlying response and must be closed, either
    explicitly with ``aclose()`` or by using it as an async context manager.

    Example:
        ```python
        async with await client.request(
            "GET", "/v1/result/abc", mode=ResponseMode.BLOB
        ) as blob:
            async for chunk in blob.aiter_bytes():
                out.write(chunk)
        ```
    """

    def __init__(self, response: httpx.Response) -> None:
        """Wrap an open streaming response."""
        self._response = response

    @property
    def content_type(self) -> str | None:
        """The response media type, if the server sent one."""
        return self._response.headers.get("content-type")

    @property
    def filename(self) -> str | None:
        """Filename from ``Content-Disposition``, if any."""
        return _content_disposition_filename(self._response.headers)

    @property
    def headers(self) -> httpx.Headers:
        """The response headers."""
        return self._response.headers

    def aiter_bytes(self, chunk_size: int | None = None) -> AsyncIterator[bytes]:
        """Iterate over the body in chunks."""
        return self._response.aiter_bytes(chunk_size=chunk_size)

    async def aread(self) -> bytes:
        """Read the remaining body into memory."""
        return await self._response.aread()

    async def aclose(self) -> None:
        """Close the underlying response."""
        await self._response.aclose()

    async def __aenter__(self) -> Self:
        """Enter async context."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context and close the response."""
        await self.aclose()


async def decode_response(response: httpx.Response, mode: ResponseMode) -> Any:  # noqa: ANN401
    """Decode a successful streaming response according to ``mode``.

    The response is closed afterwards, except in ``BLOB`` mode where the
    returned handle takes ownership of it. JSON errors on a successful
    response propagate to the caller.

    Args:
        response: An open response obtained with ``stream=True``.
        mode: The declared response mode.

    Returns:
        The decoded value.
    """
    if mode is ResponseMode.BLOB:
        return BlobResult(response)

    try:
        match mode:
            case ResponseMode.BINARY:
                await response.aread()
                return BinaryResult.from_response(response)
            case ResponseMode.TEXT:
                await response.aread()
                return response.text
            case ResponseMode.VOID:
                return None
            case _:
                if response.status_code == httpx.codes.NO_CONTENT:
                    return None
                if response.headers.get("content-length") == "0":
                    return None
                await response.aread()
                return response.json()
    finally:
        await response.aclose()


def _is_json_media_type(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def normalize_error(
    method: str,
    path: str,
    response: httpx.Response,
) -> DoclingError:
    """Build the error for a non-2xx response.

    The body is drained and parsed on a best-effort basis: any failure
    while reading or parsing it leaves ``body`` as None instead of raising.

    Args:
        method: HTTP method of the request.
        path: Request path as given to the client.
        response: The failed (streaming) response.

    Returns:
        The normalized error, ready to be raised.
    """
    headers = httpx.Headers(response.headers)
    content_type = headers.get("content-type", "")
    body: object | None = None
    try:
        await response.aread()
        if _is_json_media_type(content_type):
            body = response.json()
        else:
            text = response.text
            body = text or None
    except Exception as exc:  # noqa: BLE001
        _logger.debug(
            "error_body_unreadable",
            path=path,
            status_code=response.status_code,
            error=str(exc),
        )
        body = None
    finally:
        # Closing can fail the same way the read did
        try:
            await response.aclose()
        except Exception:  # noqa: BLE001
            _logger.debug("error_response_close_failed", path=path)

    return DoclingError(
        f"Request to {path} failed with status {response.status_code}",
        status=response.status_code,
        status_text=response.reason_phrase,
        body=body,
        headers=headers,
        method=method,
        path=path,
    )
