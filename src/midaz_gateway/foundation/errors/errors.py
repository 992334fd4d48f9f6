"""Error codes and the structured error that tools hand back to the agent.

Gateway envelopes carry an ErrorCode; tool-level failures outside the
envelope (unknown tool, unparsable arguments, crashes) are rendered from a
GatewayError so the agent always receives text it can act on.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class ErrorCode(StrEnum):
    """Failure categories surfaced as `errorCode` and used for retry decisions."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    NOT_FOUND = "NOT_FOUND"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    CACHE_CORRUPTION = "CACHE_CORRUPTION"
    UNKNOWN = "UNKNOWN"


# Transient backend conditions; everything else fails on the first attempt
RETRYABLE_CODES: frozenset[ErrorCode] = frozenset({ErrorCode.SERVER_ERROR, ErrorCode.NETWORK_ERROR})

# Checked in order against "<TypeName> <message>", lowercased
_KEYWORDS: tuple[tuple[tuple[str, ...], ErrorCode], ...] = (
    (("timeout", "timed out"), ErrorCode.TIMEOUT),
    (("connect", "network", "transport", "unreachable"), ErrorCode.NETWORK_ERROR),
    (("invalidtag", "decrypt"), ErrorCode.CACHE_CORRUPTION),
    (("auth", "credential", "unauthorized"), ErrorCode.AUTH_ERROR),
    (("validation",), ErrorCode.VALIDATION_ERROR),
    (("notfound", "not found"), ErrorCode.NOT_FOUND),
)


def classify_exception(exc: BaseException) -> ErrorCode:
    """Best-effort ErrorCode for an arbitrary exception."""
    match exc:
        case GatewayException():
            return exc.error.code
        case TimeoutError():
            return ErrorCode.TIMEOUT
        case ConnectionError():
            return ErrorCode.NETWORK_ERROR
    signature = f"{type(exc).__name__} {exc}".lower()
    return next(
        (code for words, code in _KEYWORDS if any(w in signature for w in words)),
        ErrorCode.UNKNOWN,
    )


class GatewayError(BaseModel):
    """A failure attributed to one component.

    Attributes:
        component: Where it failed, e.g. "token_manager" or a tool name
        message: What went wrong, in words an agent can act on
        code: Category used for retry decisions and reporting
        recoverable: Whether trying again (or fixing input) could help
        details: Extra diagnostic text such as a formatted traceback
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={"examples": [{
            "component": "retry_executor",
            "message": "Server error after 3 retries: 503",
            "code": "SERVER_ERROR",
            "recoverable": True,
        }]},
    )

    component: Annotated[str, Field(min_length=1)]
    message: Annotated[str, Field(min_length=1)]
    code: ErrorCode = ErrorCode.UNKNOWN
    recoverable: bool = True
    details: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _stringify(cls, v: object) -> object:
        return str(v) if isinstance(v, BaseException) else v

    @computed_field
    @property
    def is_retryable(self) -> bool:
        return self.code in RETRYABLE_CODES

    @computed_field
    @property
    def is_auth_error(self) -> bool:
        return self.code is ErrorCode.AUTH_ERROR

    @classmethod
    def create(
        cls,
        component: str,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        *,
        recoverable: bool = True,
        details: str | None = None,
    ) -> Self:
        return cls(component=component, message=message, code=code, recoverable=recoverable, details=details)

    @classmethod
    def from_exception(
        cls,
        component: str,
        exc: BaseException,
        prefix: str = "",
        *,
        recoverable: bool = True,
        include_trace: bool = True,
    ) -> Self:
        """Wrap a caught exception; the code is inferred via classify_exception()."""
        text = str(exc) or type(exc).__name__
        return cls.create(
            component,
            f"{prefix}: {text}" if prefix else text,
            classify_exception(exc),
            recoverable=recoverable,
            details="".join(traceback.format_exception(exc)) if include_trace else None,
        )

    def render(self) -> str:
        """Markdown text returned to the agent in place of a result."""
        lines = [f"**Gateway Error ({self.component}):** {self.message} [{self.code}]"]
        if self.recoverable:
            lines.append("_Check the request and try again, or run it with mode='test' first._")
        if self.details:
            lines.append(f"```\n{self.details}\n```")
        return "\n".join(lines)

    __str__ = render


class GatewayException(Exception):
    """Raisable carrier for a GatewayError."""

    def __init__(self, error: GatewayError) -> None:
        super().__init__(error.message)
        self.error = error

    @classmethod
    def create(
        cls, component: str, message: str, code: ErrorCode = ErrorCode.UNKNOWN, *, recoverable: bool = True,
    ) -> Self:
        return cls(GatewayError.create(component, message, code, recoverable=recoverable))


class CacheCorruptionError(GatewayException):
    """A cached token failed to decrypt and has to be evicted."""

    def __init__(self, message: str) -> None:
        super().__init__(GatewayError.create("token_cipher", message, ErrorCode.CACHE_CORRUPTION))
