"""Observability: structured logging setup."""

from webrepo.observability.logging import (
    bind_call_context,
    clear_call_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "bind_call_context",
    "clear_call_context",
    "configure_logging",
    "get_logger",
]
