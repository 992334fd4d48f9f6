"""Retry policy for backend calls.

Decides from an HTTP status (or a transport failure) whether an attempt
succeeded, failed for good, or is worth another try, and how long to wait.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Callable

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_serializer,
    field_validator,
)

from midaz_gateway.foundation.errors import RETRYABLE_CODES, ErrorCode

from .backoff import Backoff, ExponentialBackoff

if TYPE_CHECKING:
    from midaz_gateway.foundation.config import RetrySettings


def classify_status(status: int) -> ErrorCode | None:
    """Map an HTTP status to an error code; None for 2xx."""
    match status:
        case s if 200 <= s < 300:
            return None
        case 404:
            return ErrorCode.NOT_FOUND
        case 401 | 403:
            return ErrorCode.AUTH_ERROR
        case s if 400 <= s < 500:
            return ErrorCode.CLIENT_ERROR
        case _:
            return ErrorCode.SERVER_ERROR  # 5xx, and unexpected 1xx/3xx


class RetryPolicy(BaseModel):
    """Bounded retry with backoff for transient backend failures.

    Attributes:
        max_retries: Retries after the first attempt (0 = single attempt)
        backoff: Backoff strategy for delay calculation
        retryable_codes: Error codes that trigger a retry
        on_retry: Optional callback (attempt, code, delay) fired before each sleep

    Example:
        >>> policy = RetryPolicy(max_retries=3, backoff=ExponentialBackoff(jitter_max=0))
        >>> policy.should_retry(ErrorCode.SERVER_ERROR, attempt=0)
        True
        >>> policy.get_delay(2)
        4.0
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
    )

    max_retries: Annotated[int, Field(ge=0, le=10)] = 3
    backoff: Backoff = Field(default_factory=ExponentialBackoff, repr=False)
    retryable_codes: frozenset[ErrorCode] = RETRYABLE_CODES
    on_retry: Callable[[int, ErrorCode, float], None] | None = Field(default=None, exclude=True, repr=False)

    @field_validator("retryable_codes", mode="before")
    @classmethod
    def _normalize_codes(cls, v: frozenset[ErrorCode] | set[str] | list[str] | tuple[str, ...]) -> frozenset[ErrorCode]:
        """Accept strings and convert to ErrorCode enum."""
        return frozenset(ErrorCode(c) if isinstance(c, str) else c for c in v)

    @field_serializer("retryable_codes")
    def _serialize_codes(self, v: frozenset[ErrorCode]) -> list[str]:
        return sorted(c.value for c in v)

    @computed_field
    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_settings(cls, settings: RetrySettings, **overrides: object) -> RetryPolicy:
        backoff = ExponentialBackoff(
            base=settings.base_delay, max_delay=settings.max_delay, jitter_max=settings.jitter_max,
        )
        return cls(max_retries=settings.max_retries, backoff=backoff, **overrides)

    def should_retry(self, code: ErrorCode | str, attempt: int) -> bool:
        """True when `code` is retryable and `attempt` (0-indexed) has retries left."""
        if attempt >= self.max_retries:
            return False
        return ErrorCode(code) in self.retryable_codes

    def get_delay(self, attempt: int) -> float:
        return self.backoff.delay(attempt)

    def notify(self, attempt: int, code: ErrorCode, delay: float) -> None:
        if self.on_retry is not None:
            self.on_retry(attempt, code, delay)

    def __hash__(self) -> int:
        return hash((self.max_retries, self.retryable_codes))


NO_RETRY = RetryPolicy(max_retries=0)
DEFAULT_RETRY = RetryPolicy()
