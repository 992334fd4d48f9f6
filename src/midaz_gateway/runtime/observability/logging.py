"""Structured logging for gateway calls.

Loggers are immutable: bind() hands back a copy with extra fields. Fields set
through log_context() follow the current task across awaits, so every line
written while a request is in flight carries its operation and resource.

Both renderers write to stderr by default; the stdio MCP transport owns stdout.
Values under credential-like keys are masked before they reach any renderer.

    >>> configure_logging(format="json", level="DEBUG")
    >>> log = get_logger("token_manager")
    >>> with log_context(operation="list", resource="accounts"):
    ...     log.info("token cached", ttl=300)
"""

from __future__ import annotations

import logging
import sys
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

import orjson

from midaz_gateway.foundation.errors import JsonDict, JsonValue

if TYPE_CHECKING:
    from types import TracebackType

MASK = "***"
SENSITIVE_KEYS = frozenset({"authorization", "access_token", "api_key", "client_secret", "token", "key"})

_scope: ContextVar[JsonDict] = ContextVar("midaz_log_scope", default={})


def _mask(fields: JsonDict) -> JsonDict:
    return {k: MASK if k.lower() in SENSITIVE_KEYS and v is not None else v for k, v in fields.items()}


@dataclass(slots=True, frozen=True)
class LogEntry:
    """One emitted line: when, how severe, what happened, and its fields."""

    at: datetime
    level: str
    event: str
    context: JsonDict

    def as_record(self) -> JsonDict:
        return {"timestamp": self.at.isoformat(), "level": self.level, "event": self.event, **self.context}


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class _LogState:
    renderer: LogRenderer | None = None
    threshold: int = logging.INFO

    def sink(self) -> LogRenderer:
        if self.renderer is None:
            self.renderer = ConsoleRenderer()
        return self.renderer


# Set once by configure_logging() at startup, outside any task
_state = _LogState()


@dataclass(slots=True, frozen=True)
class BoundLogger:
    """Logger carrying a fixed set of fields.

    Example:
        >>> log = BoundLogger(context={"logger": "gateway"})
        >>> log.bind(resource="ledgers").info("request received")
        # => 10:30:45.120 [info] request received logger="gateway" resource="ledgers"
    """

    context: JsonDict = field(default_factory=dict)

    def bind(self, **kw: JsonValue) -> BoundLogger:
        return replace(self, context={**self.context, **kw})

    def debug(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.DEBUG, event, kw)

    def info(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.INFO, event, kw)

    def warning(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.WARNING, event, kw)

    def error(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.ERROR, event, kw)

    def exception(self, event: str, **kw: JsonValue) -> None:
        """Error line with the active traceback attached under `exc_info`."""
        self._emit(logging.ERROR, event, {**kw, "exc_info": traceback.format_exc()})

    def _emit(self, level: int, event: str, fields: JsonDict) -> None:
        if level < _state.threshold:
            return
        context = _mask({**_scope.get(), **self.context, **fields})
        _state.sink().render(LogEntry(datetime.now(UTC), logging.getLevelName(level).lower(), event, context))


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────

_ANSI = {"reset": "\033[0m", "dim": "\033[2m", "bold": "\033[1m", "key": "\033[36m",
         "str": "\033[33m", "num": "\033[34m", "debug": "\033[2m", "info": "\033[32m",
         "warning": "\033[33m", "error": "\033[31m", "critical": "\033[31m"}


@dataclass(slots=True)
class ConsoleRenderer:
    """`HH:MM:SS.mmm [level] event key=value ...`, colored only on a terminal."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def _paint(self, style: str, text: str) -> str:
        return f"{_ANSI[style]}{text}{_ANSI['reset']}" if self.colors else text

    def _value(self, value: object) -> str:
        if isinstance(value, str):
            return self._paint("str", f'"{value}"')
        if isinstance(value, bool):
            return self._paint("num", "true" if value else "false")
        if isinstance(value, int | float):
            return self._paint("num", str(value))
        if isinstance(value, dict | list | tuple):
            return self._paint("dim", orjson.dumps(value, default=str).decode())
        return repr(value)

    def render(self, entry: LogEntry) -> None:
        fields = dict(entry.context)
        trace = fields.pop("exc_info", None)
        line = " ".join([
            self._paint("dim", entry.at.strftime("%H:%M:%S.%f")[:-3]),
            self._paint(entry.level, f"[{entry.level}]"),
            self._paint("bold", entry.event),
            *(f"{self._paint('key', k)}={self._value(v)}" for k, v in sorted(fields.items())),
        ])
        self.output.write(line + "\n")
        if trace:
            self.output.write(self._paint("error", str(trace)) + "\n")


@dataclass(slots=True)
class JsonRenderer:
    """One JSON object per line, for log shippers."""

    output: TextIO = field(default_factory=lambda: sys.stderr)

    def render(self, entry: LogEntry) -> None:
        self.output.write(orjson.dumps(entry.as_record(), default=str).decode() + "\n")


class NoOpRenderer:
    """Discards everything."""

    def render(self, entry: LogEntry) -> None:
        return None


@dataclass(slots=True)
class CapturingRenderer:
    """Keeps entries in memory so tests can assert on emitted events."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self, level: str | None = None) -> list[str]:
        return [e.event for e in self.entries if level in (None, e.level)]


# ─────────────────────────────────────────────────────────────────────────────
# Setup
# ─────────────────────────────────────────────────────────────────────────────


def configure_logging(
    format: str = "console",  # noqa: A002 - mirrors the MIDAZ_LOG_FORMAT setting
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
    renderer: LogRenderer | None = None,
) -> LogRenderer:
    """Select the process-wide renderer and threshold; returns the renderer in use.

    An explicit `renderer` wins over `format`. Unknown level names fall back to INFO.
    """
    threshold = logging.getLevelName(level.upper())
    _state.threshold = threshold if isinstance(threshold, int) else logging.INFO
    if renderer is None:
        stream = output or sys.stderr
        match format:
            case "console":
                renderer = ConsoleRenderer(output=stream, colors=colors)
            case "json":
                renderer = JsonRenderer(output=stream)
            case "none":
                renderer = NoOpRenderer()
            case other:
                raise ValueError(f"Unknown log format {other!r}; expected console, json or none")
    _state.renderer = renderer
    return renderer


def get_logger(name: str | None = None, **fields: JsonValue) -> BoundLogger:
    """Logger pre-bound with `fields`, plus `logger=name` when a name is given."""
    return BoundLogger(context={**fields, "logger": name} if name else dict(fields))


class log_context:
    """Adds fields to every line logged inside the `with` block."""

    __slots__ = ("_fields", "_reset")

    def __init__(self, **fields: JsonValue) -> None:
        self._fields = fields
        self._reset = None

    def __enter__(self) -> log_context:
        self._reset = _scope.set({**_scope.get(), **self._fields})
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None,
    ) -> None:
        if self._reset is not None:
            _scope.reset(self._reset)
            self._reset = None
