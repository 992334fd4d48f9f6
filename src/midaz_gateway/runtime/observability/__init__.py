"""Observability: structured logging with context propagation."""

from .logging import (
    BoundLogger,
    CapturingRenderer,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogRenderer,
    NoOpRenderer,
    configure_logging,
    get_logger,
    log_context,
)

__all__ = [
    "BoundLogger", "LogEntry", "LogRenderer",
    "ConsoleRenderer", "JsonRenderer", "NoOpRenderer", "CapturingRenderer",
    "configure_logging", "get_logger", "log_context",
]
