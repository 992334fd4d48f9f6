"""Authenticated backend calls with bounded, backed-off retry.

2xx returns at once, 4xx fails at once, 5xx and transport failures are retried
up to `max_retries` times. Worst case is max_retries + 1 sequential requests.
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Any, Awaitable, Callable

import httpx
import orjson
from pydantic import BaseModel, ConfigDict, Field, computed_field

from midaz_gateway.foundation.errors import ErrorCode, JsonDict
from midaz_gateway.runtime.observability import get_logger
from midaz_gateway.runtime.retry import DEFAULT_RETRY, RetryPolicy, classify_status

log = get_logger("retry_executor")

Sleep = Callable[[float], Awaitable[None]]


class ApiResult(BaseModel):
    """Outcome of one logical backend call (after any retries)."""

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")

    success: bool
    data: Any = Field(default=None, repr=False)
    error: str | None = None
    details: Any = Field(default=None, repr=False)
    status_code: Annotated[int, Field(ge=0)]
    attempts: Annotated[int, Field(ge=1)] = 1
    code: ErrorCode | None = None

    @computed_field
    @property
    def is_network_error(self) -> bool:
        return self.status_code == 0


def parse_body(response: httpx.Response) -> Any:
    """JSON when the content-type says so and it decodes, raw text otherwise."""
    if "application/json" in response.headers.get("content-type", ""):
        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError:
            return response.text
    return response.text


class RetryExecutor:
    """Sends one request, retrying transient failures per the policy.

    Args:
        client: HTTP client (owned by the caller)
        policy: Retry bounds and backoff
        sleep: Awaitable sleep, swapped out in tests

    Example:
        >>> executor = RetryExecutor(client, RetryPolicy(max_retries=3))
        >>> result = await executor.execute("GET", url, token)
        >>> result.success, result.attempts
        (True, 1)
    """

    __slots__ = ("_client", "_policy", "_sleep")

    def __init__(self, client: httpx.AsyncClient, policy: RetryPolicy = DEFAULT_RETRY, *, sleep: Sleep = asyncio.sleep) -> None:
        self._client = client
        self._policy = policy
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def execute(self, method: str, url: str, token: str, body: JsonDict | None = None) -> ApiResult:
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        max_retries = self._policy.max_retries

        for attempt in range(max_retries + 1):
            try:
                response = await self._client.request(method, url, headers=headers, json=body)
            except httpx.TransportError as e:
                if await self._backoff(attempt, ErrorCode.NETWORK_ERROR, url=url, error=str(e) or type(e).__name__):
                    continue
                log.error("network error, retries exhausted", url=url, attempts=attempt + 1)
                return ApiResult(
                    success=False, error=f"Network error after {max_retries} retries: {str(e) or type(e).__name__}",
                    status_code=0, attempts=attempt + 1, code=ErrorCode.NETWORK_ERROR,
                )

            data = parse_body(response)
            code = classify_status(response.status_code)
            if code is None:
                return ApiResult(success=True, data=data, status_code=response.status_code, attempts=attempt + 1)
            if response.is_client_error:
                return ApiResult(
                    success=False, error=f"Client error: {response.status_code}", details=data,
                    status_code=response.status_code, attempts=attempt + 1, code=code,
                )
            if await self._backoff(attempt, code, url=url, status=response.status_code):
                continue
            log.error("server error, retries exhausted", url=url, status=response.status_code, attempts=attempt + 1)
            return ApiResult(
                success=False, error=f"Server error after {max_retries} retries: {response.status_code}",
                details=data, status_code=response.status_code, attempts=attempt + 1, code=code,
            )

        raise AssertionError("retry loop exited without a result")  # pragma: no cover

    async def _backoff(self, attempt: int, code: ErrorCode, **ctx: Any) -> bool:
        """Sleep before the next attempt if the policy allows one."""
        if not self._policy.should_retry(code, attempt):
            return False
        delay = self._policy.get_delay(attempt)
        log.warning("backend call failed, retrying", attempt=attempt + 1, delay_s=round(delay, 3), code=str(code), **ctx)
        self._policy.notify(attempt, code, delay)
        await self._sleep(delay)
        return True
