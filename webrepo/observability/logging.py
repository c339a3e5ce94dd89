"""Structured logging configuration."""

import logging
import sys
import uuid
from typing import TextIO

import structlog


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the application.

    Stage records from the call executor are plain structlog events, so
    they render as JSON lines or as colored console output.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )
    # httpx logs every request at INFO; stage records already cover it
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance.

    Args:
        name: Optional logger name.

    Returns:
        Bound logger instance.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def bind_call_context(call_id: str | None = None) -> str:
    """Bind a correlation id to all subsequent log records of this context.

    Args:
        call_id: Identifier to bind, generated when omitted.

    Returns:
        The bound identifier.
    """
    call_id = call_id or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(call_id=call_id)
    return call_id


def clear_call_context() -> None:
    """Remove the correlation id from log records."""
    structlog.contextvars.unbind_contextvars("call_id")
