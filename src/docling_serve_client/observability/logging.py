"""Structured logging configuration for docling-serve-client.

The library itself only obtains loggers; applications that want its output
call ``configure_logging`` once at startup. Output is rendered with
structlog, either as colorized console lines, logfmt, or JSON, with ISO 8601
UTC timestamps.
"""

from __future__ import annotations

import logging
import sys
import uuid
from enum import StrEnum

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import TimeStamper, add_log_level


__all__ = [
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "generate_request_id",
    "get_logger",
]


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_stdlib_level(self) -> int:
        """Convert to stdlib logging level.

        Returns:
            The corresponding logging module level constant.
        """
        level: int = getattr(logging, self.name)
        return level


class LogFormat(StrEnum):
    """Log output format.

    Attributes:
        CONSOLE: Human-readable console output with colors.
        LOGFMT: key=value lines for log shippers.
        JSON: One JSON object per line.
    """

    CONSOLE = "console"
    LOGFMT = "logfmt"
    JSON = "json"


_LOGFMT_KEY_ORDER = ["timestamp", "level", "event", "request_id"]


def generate_request_id() -> str:
    """Generate a short unique ID to correlate the logs of one request.

    Returns:
        The first 8 hex characters of a random UUID.
    """
    return uuid.uuid4().hex[:8]


def _create_renderer(log_format: LogFormat) -> structlog.typing.Processor:
    match log_format:
        case LogFormat.CONSOLE:
            return structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        case LogFormat.JSON:
            return structlog.processors.JSONRenderer()
        case _:
            return structlog.processors.LogfmtRenderer(
                key_order=_LOGFMT_KEY_ORDER,
                drop_missing=True,
                bool_as_flag=False,
            )


def _detect_format() -> LogFormat:
    is_tty = (
        sys.stderr is not None
        and hasattr(sys.stderr, "isatty")
        and sys.stderr.isatty()
    )
    return LogFormat.CONSOLE if is_tty else LogFormat.LOGFMT


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    *,
    log_format: LogFormat | str | None = None,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level, as a LogLevel or its string value.
        log_format: Output format. If None, console output is used when
            stderr is a TTY and logfmt otherwise.

    Example:
        >>> from docling_serve_client.observability import configure_logging
        >>> configure_logging(level="debug", log_format="json")
    """
    if isinstance(level, str):
        level = LogLevel(level.lower())
    if isinstance(log_format, str):
        log_format = LogFormat(log_format.lower())
    if log_format is None:
        log_format = _detect_format()

    processors: list[structlog.typing.Processor] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if log_format is LogFormat.JSON:
        processors.append(structlog.processors.format_exc_info)
    processors.append(_create_renderer(log_format))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level.to_stdlib_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # httpx and httpcore log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level.to_stdlib_level(),
        force=True,
    )


def get_logger(
    name: str | None = None,
    **initial_context: object,
) -> structlog.BoundLogger:
    """Get a structured logger, optionally with bound context.

    Example:
        >>> logger = get_logger(__name__, component="client")
        >>> logger.info("starting")
        2024-01-15T10:30:45.123456Z [info] starting component=client
    """
    log: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        log = log.bind(**initial_context)
    return log
