"""JSON aliases and the failure value carried inside Err results.

An ErrorTrace records what failed plus each step it passed through, so an
auth failure reads as `Authentication failed: 401 [AUTH_ERROR]` followed by
`auth:get_token`, `gateway:execute` and so on.
"""

from __future__ import annotations

from typing import Annotated, Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .errors import ErrorCode

JsonValue: TypeAlias = str | int | float | bool | None | list[Any] | dict[str, Any]
JsonDict: TypeAlias = dict[str, Any]


class ErrorContext(BaseModel):
    """One step a failure passed through, with optional key/value annotations."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    operation: Annotated[str, Field(min_length=1)]
    metadata: JsonDict = Field(default_factory=dict)

    def __str__(self) -> str:
        if not self.metadata:
            return self.operation
        return f"{self.operation} ({', '.join(f'{k}={v}' for k, v in self.metadata.items())})"


class ErrorTrace(BaseModel):
    """Immutable failure description; with_operation() returns an extended copy."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    message: Annotated[str, Field(min_length=1)]
    error_code: ErrorCode | None = None
    recoverable: bool = True
    details: str | None = Field(default=None, repr=False)
    contexts: tuple[ErrorContext, ...] = ()

    @computed_field
    @property
    def root_operation(self) -> str | None:
        """Where the failure started."""
        return self.contexts[0].operation if self.contexts else None

    def with_operation(self, operation: str, **metadata: JsonValue) -> ErrorTrace:
        step = ErrorContext(operation=operation, metadata=metadata)
        return self.model_copy(update={"contexts": (*self.contexts, step)})

    def format(self, *, include_details: bool = False) -> str:
        head = f"{self.message} [{self.error_code}]" if self.error_code else self.message
        lines = [head, *(f"  at {ctx}" for ctx in self.contexts)]
        if include_details and self.details:
            lines.append(self.details)
        return "\n".join(lines)

    __str__ = format


def trace(
    message: str,
    *,
    code: ErrorCode | str | None = None,
    recoverable: bool = True,
    details: str | None = None,
) -> ErrorTrace:
    """Shorthand ErrorTrace constructor; string codes are coerced to ErrorCode."""
    return ErrorTrace(
        message=message,
        error_code=ErrorCode(code) if code is not None else None,
        recoverable=recoverable,
        details=details,
    )
