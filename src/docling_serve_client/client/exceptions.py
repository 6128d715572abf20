"""Custom exceptions for the docling-serve API client."""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    import httpx


__all__ = [
    "DoclingError",
    "DoclingServeClientError",
    "InvalidInputError",
]


class DoclingServeClientError(Exception):
    """Base exception for all errors raised by this library.

    Transport failures (connection errors, timeouts, cancellation) are not
    wrapped and therefore do not inherit from this class.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message


class InvalidInputError(DoclingServeClientError, ValueError):
    """Raised when a request cannot be built from the given arguments."""


class DoclingError(DoclingServeClientError):
    """Raised for every non-2xx response from docling-serve.

    Attributes:
        status: HTTP status code.
        status_text: HTTP reason phrase.
        body: Best-effort parsed response body (JSON value or text), or
            None when the body was empty or could not be read.
        headers: Response headers.
        method: HTTP method of the failed request, uppercased.
        path: Request path (or absolute URL) as given to the client.
    """

    def __init__(  # noqa: PLR0913
        self,
        message: str,
        *,
        status: int,
        status_text: str,
        headers: httpx.Headers,
        method: str,
        path: str,
        body: object | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
            status: HTTP status code.
            status_text: HTTP reason phrase.
            headers: Response headers.
            method: HTTP method of the request.
            path: Request path as given to the client.
            body: Parsed response body, if any.
        """
        super().__init__(message)
        self.status = status
        self.status_text = status_text
        self.body = body
        self.headers = headers
        self.method = method.upper()
        self.path = path

    def __str__(self) -> str:
        """Return string representation with method and status text."""
        if self.status_text:
            return f"{self.message} ({self.method} {self.status_text})"
        return f"{self.message} ({self.method})"
