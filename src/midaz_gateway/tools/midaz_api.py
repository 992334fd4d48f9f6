"""The `midaz_api` tool: unified CRUD access to ledger resources."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import orjson
from pydantic import ValidationError

from midaz_gateway.foundation.errors import JsonDict
from midaz_gateway.gateway import Mode, Operation, OperationParams, OperationRequest, Resource, ResourceGateway

from .base import BaseTool, ToolMetadata


def dumps(payload: JsonDict) -> str:
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2, default=str).decode()


class MidazApiTool(BaseTool[OperationRequest]):
    """Wraps a ResourceGateway; every call answers with the JSON envelope.

    Args:
        gateway: Gateway to dispatch to
        owns_gateway: Close the gateway in aclose()
    """

    metadata = ToolMetadata(
        name="midaz_api",
        description=(
            "Unified Midaz API interface with real authentication and CRUD operations. "
            "Supports test (dry-run) and execute modes with proper error context and exponential backoff."
        ),
        category="api",
        requires_api_key=True,
    )
    params_schema = OperationRequest

    __slots__ = ("_gateway", "_owns_gateway")

    def __init__(self, gateway: ResourceGateway, *, owns_gateway: bool = False) -> None:
        self._gateway = gateway
        self._owns_gateway = owns_gateway

    @property
    def gateway(self) -> ResourceGateway:
        return self._gateway

    async def _arun(self, params: OperationRequest) -> str:
        return dumps((await self._gateway.handle(params)).to_payload())

    def _invalid_params(self, raw: dict[str, Any], exc: ValidationError) -> str:
        return dumps(self._gateway.shape_error(raw, exc).to_payload())

    def handler(self) -> Callable[..., Awaitable[str]]:
        """Coroutine with an explicit signature for MCP registration."""

        async def midaz_api(
            operation: Operation,
            resource: Resource,
            mode: Mode = Mode.TEST,
            params: OperationParams | None = None,
        ) -> str:
            raw: JsonDict = {"operation": operation, "resource": resource, "mode": mode}
            if params is not None:
                raw["params"] = params
            return await self.acall(**raw)

        midaz_api.__doc__ = self.metadata.description
        return midaz_api

    async def aclose(self) -> None:
        if self._owns_gateway:
            await self._gateway.aclose()
