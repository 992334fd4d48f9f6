"""Resource gateway: validates, previews or executes one operation.

    request ─► validate ─► rejected envelope
                  │
                  ├─ test ────► route preview (no network, no auth)
                  │
                  └─ execute ─► token ─► route ─► retried call ─► envelope

Every path ends in a GatewayResponse; unexpected exceptions are caught at the
top, logged, and returned with troubleshooting tips.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any, Callable, Self

import httpx
from pydantic import ValidationError

from midaz_gateway.auth import TokenCipher, TokenManager
from midaz_gateway.foundation.config import GatewaySettings, get_settings
from midaz_gateway.foundation.errors import ErrorCode, JsonDict, classify_exception
from midaz_gateway.io.cache import TokenCache
from midaz_gateway.runtime.executor import RetryExecutor, Sleep
from midaz_gateway.runtime.observability import get_logger, log_context
from midaz_gateway.runtime.retry import RetryPolicy

from .advisor import troubleshooting_tips
from .models import GatewayResponse, Mode, Operation, OperationParams, OperationRequest, Resource
from .routing import EndpointRouter
from .validation import validate_operation

if TYPE_CHECKING:
    from types import TracebackType

DRY_RUN_NOTE = "This is a dry-run. Use mode='execute' for real API call."
AUTH_FAILED = "Authentication failed"

log = get_logger("gateway")


def expected_structure(operation: Operation, resource: Resource) -> str | JsonDict:
    match operation:
        case Operation.LIST:
            return {"data": f"Array of {resource}", "pagination": "Pagination metadata", "total": "Total count"}
        case Operation.GET:
            return f"Single {resource.singular} object"
        case Operation.CREATE:
            return f"Created {resource.singular} with generated ID"
        case Operation.UPDATE:
            return f"Updated {resource.singular} object"
        case Operation.DELETE:
            return "Deletion confirmation"


class ResourceGateway:
    """Entry point for `{operation, resource, mode, params}` requests.

    Owns its HTTP client unless one is injected; use as an async context
    manager or call aclose() when done.

    Args:
        settings: Gateway settings (defaults to get_settings())
        client: Shared HTTP client; not closed by the gateway
        cache: Token cache (a fresh one with the configured TTL by default)
        cipher: Token cipher (keyed from the configured encryption key by default)
        policy: Retry policy (built from settings.retry by default)
        sleep: Awaitable used for backoff waits
        clock: Time source for responseTime, in seconds

    Example:
        >>> async with ResourceGateway() as gateway:
        ...     resp = await gateway.handle(OperationRequest(operation="list", resource="organizations"))
        ...     resp.expected_response["endpoint"]
        'http://localhost:3000/v1/organizations'
    """

    def __init__(
        self,
        settings: GatewaySettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        cache: TokenCache | None = None,
        cipher: TokenCipher | None = None,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.backend.timeout)
        self._clock = clock
        self.router = EndpointRouter(settings.backend.onboarding_url, settings.backend.transaction_url)

        key = settings.auth.cache_encryption_key
        self.tokens = TokenManager(
            settings.auth,
            settings.backend.token_url,
            self._client,
            cache or TokenCache(ttl=settings.cache.token_ttl),
            cipher or TokenCipher.from_material(key.get_secret_value() if key is not None else None),
        )
        self.executor = RetryExecutor(self._client, policy or RetryPolicy.from_settings(settings.retry), sleep=sleep)

    # ─────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────

    async def handle(self, request: OperationRequest) -> GatewayResponse:
        """Run one request to completion. Never raises."""
        with log_context(operation=str(request.operation), resource=str(request.resource), mode=str(request.mode)):
            try:
                return await self._dispatch(request)
            except Exception as e:  # noqa: BLE001 - every failure becomes an envelope
                log.exception("gateway operation failed", error=str(e))
                return GatewayResponse(
                    success=False,
                    operation=request.operation,
                    resource=request.resource,
                    mode=request.mode,
                    error=str(e) or type(e).__name__,
                    error_code=classify_exception(e),
                    troubleshooting=troubleshooting_tips(e),
                )

    async def handle_raw(self, payload: JsonDict) -> JsonDict:
        """Shape-check a raw mapping, run it, and return the camelCase envelope."""
        try:
            request = OperationRequest.model_validate(payload)
        except ValidationError as e:
            return self.shape_error(payload, e).to_payload()
        return (await self.handle(request)).to_payload()

    @staticmethod
    def shape_error(payload: JsonDict, exc: ValidationError) -> GatewayResponse:
        """Envelope for input that does not fit the request schema."""
        problems = [f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}" for err in exc.errors()]
        return GatewayResponse(
            success=False,
            operation=str(payload.get("operation", "unknown")),
            resource=str(payload.get("resource", "unknown")),
            mode=str(payload.get("mode", Mode.TEST)),
            error=f"Invalid request: {'; '.join(problems)}",
            error_code=ErrorCode.VALIDATION_ERROR,
            details=problems,
        )

    def preview(self, operation: Operation, resource: Resource, params: OperationParams) -> JsonDict:
        """What execute mode would call, built from the same router."""
        route = self.router.route(operation, resource, params)
        preview: JsonDict = {
            "operation": str(operation),
            "resource": str(resource),
            "endpoint": route.url,
            "method": route.method,
            "expectedStructure": expected_structure(operation, resource),
        }
        if operation.carries_payload:
            preview["payload"] = params.data
        return preview

    async def aclose(self) -> None:
        self.tokens.cache.close()
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ─────────────────────────────────────────────────────────────────
    # Steps
    # ─────────────────────────────────────────────────────────────────

    async def _dispatch(self, request: OperationRequest) -> GatewayResponse:
        op, res, params = request.operation, request.resource, request.params
        report = validate_operation(op, res, params)
        if not report.valid:
            log.info("request rejected", errors=report.errors)
            return GatewayResponse(
                success=False, operation=op, resource=res, mode=request.mode,
                error=report.error, error_code=ErrorCode.VALIDATION_ERROR, validation=report.details,
            )

        match request.mode:
            case Mode.TEST:
                return GatewayResponse(
                    success=True, operation=op, resource=res, mode=Mode.TEST,
                    validation=report.details, expected_response=self.preview(op, res, params), note=DRY_RUN_NOTE,
                )
            case Mode.EXECUTE:
                return await self._execute(op, res, params)

    async def _execute(self, op: Operation, res: Resource, params: OperationParams) -> GatewayResponse:
        started = self._clock()
        token = await self.tokens.get_token()
        if token.is_err():
            failure = token.unwrap_err()
            return GatewayResponse(
                success=False, operation=op, resource=res, mode=Mode.EXECUTE,
                error=AUTH_FAILED, error_code=ErrorCode.AUTH_ERROR, details=failure.message,
                troubleshooting=troubleshooting_tips(f"auth {failure.message}"),
            )

        route = self.router.route(op, res, params)
        body = params.data if op.carries_payload else None
        result = await self.executor.execute(route.method, route.url, token.unwrap(), body)
        if result.status_code == 401:
            # Rejected token: make the next call re-authenticate
            self.tokens.invalidate()

        elapsed_ms = int((self._clock() - started) * 1000)
        response: dict[str, Any] = {
            "success": result.success, "operation": op, "resource": res, "mode": Mode.EXECUTE,
            "status_code": result.status_code, "attempts": result.attempts, "response_time": elapsed_ms,
        }
        if result.success:
            return GatewayResponse(data=result.data, **response)
        log.warning("backend call failed", status=result.status_code, attempts=result.attempts, error=result.error)
        return GatewayResponse(
            error=result.error, error_code=result.code, details=result.details,
            troubleshooting=troubleshooting_tips(result.error), **response,
        )
