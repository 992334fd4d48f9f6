"""Core tool abstractions: BaseTool and ToolMetadata.

A tool pairs a pydantic parameter schema with an async implementation that
returns text for the calling model. Raw arguments are shape-checked here; bad
input comes back as a structured error string, never as an exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from midaz_gateway.foundation.errors import ErrorCode, GatewayError, GatewayException
from midaz_gateway.runtime.observability import get_logger

log = get_logger("tools")


class ToolMetadata(BaseModel):
    """Metadata describing a tool's capabilities and requirements.

    Attributes:
        name: Unique identifier (snake_case, e.g., "midaz_api")
        description: What the tool does (shown to the model for selection)
        category: Grouping category (e.g., "api", "docs")
        requires_api_key: Whether the tool needs backend credentials in execute mode
        enabled: Whether the tool is currently exposed
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=10)
    category: str = Field(default="general")
    requires_api_key: bool = Field(default=False)
    enabled: bool = Field(default=True)


TParams = TypeVar("TParams", bound=BaseModel)


class BaseTool(ABC, Generic[TParams]):
    """Abstract base class for all tools.

    Subclasses define `metadata`, `params_schema` and implement `_arun`.

    Example:
        >>> class EchoParams(BaseModel):
        ...     text: str
        ...
        >>> class EchoTool(BaseTool[EchoParams]):
        ...     metadata = ToolMetadata(name="echo", description="Echo the given text back")
        ...     params_schema = EchoParams
        ...
        ...     async def _arun(self, params: EchoParams) -> str:
        ...         return params.text
    """

    metadata: ClassVar[ToolMetadata]
    params_schema: ClassVar[type[BaseModel]]

    # ─────────────────────────────────────────────────────────────────
    # Error Handling
    # ─────────────────────────────────────────────────────────────────

    def _error(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN, *, recoverable: bool = True) -> str:
        return GatewayError.create(self.metadata.name, message, code, recoverable=recoverable).render()

    def _invalid_params(self, raw: dict[str, Any], exc: ValidationError) -> str:
        """Text returned when raw arguments fail the schema."""
        return self._error(f"Invalid parameters: {exc}", ErrorCode.VALIDATION_ERROR, recoverable=False)

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    @abstractmethod
    async def _arun(self, params: TParams) -> str:
        """Tool implementation; may raise, arun() converts failures to text."""
        ...

    async def arun(self, params: TParams) -> str:
        try:
            return await self._arun(params)
        except GatewayException as e:
            return e.error.render()
        except Exception as e:  # noqa: BLE001 - tools answer in text
            log.exception("tool execution failed", tool=self.metadata.name)
            return GatewayError.from_exception(self.metadata.name, e, "Execution failed", include_trace=False).render()

    async def acall(self, **kwargs: Any) -> str:
        """Validate raw keyword arguments against the schema, then run."""
        try:
            params = self.params_schema.model_validate(kwargs)
        except ValidationError as e:
            return self._invalid_params(kwargs, e)
        return await self.arun(params)  # type: ignore[arg-type]

    def handler(self) -> Callable[..., Awaitable[str]]:
        """Coroutine exposed to MCP clients. Override to publish a typed signature."""

        async def run(params: dict[str, Any]) -> str:
            return await self.acall(**params)

        run.__name__ = self.metadata.name
        run.__doc__ = self.metadata.description
        return run

    async def aclose(self) -> None:
        """Release resources held by the tool."""

    def json_schema(self) -> dict[str, Any]:
        return self.params_schema.model_json_schema(by_alias=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.metadata.name!r})"
