"""Observability module (structured logging)."""

from __future__ import annotations

from docling_serve_client.observability.logging import (
    LogFormat,
    LogLevel,
    configure_logging,
    generate_request_id,
    get_logger,
)


__all__ = [
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "generate_request_id",
    "get_logger",
]
