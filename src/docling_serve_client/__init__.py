"""Typed async client for the docling-serve document conversion service."""

from __future__ import annotations

# client before config: config.exceptions builds on client.exceptions
from docling_serve_client.client import (
    BinaryResult,
    BlobResult,
    ConvertDocumentsRequest,
    DoclingError,
    DoclingServeClient,
    DoclingServeClientError,
    FileDescriptor,
    InvalidInputError,
    ResponseType,
    create_docling_serve_client,
)
from docling_serve_client.config import (
    ClientConfig,
    ConfigurationError,
    Settings,
    load_settings,
)


__all__ = [
    "BinaryResult",
    "BlobResult",
    "ClientConfig",
    "ConfigurationError",
    "ConvertDocumentsRequest",
    "DoclingError",
    "DoclingServeClient",
    "DoclingServeClientError",
    "FileDescriptor",
    "InvalidInputError",
    "ResponseType",
    "Settings",
    "__version__",
    "create_docling_serve_client",
    "load_settings",
]

__version__ = "0.1.0"
