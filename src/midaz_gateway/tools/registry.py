"""Registry for tool discovery and invocation."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel

from midaz_gateway.foundation.errors import ErrorCode, GatewayError

from .base import BaseTool


class ToolRegistry:
    """Tools by name, with lookup, listing and by-name invocation.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(MidazApiTool(gateway))
        >>> "midaz_api" in registry
        True
        >>> text = await registry.execute("midaz_api", {"operation": "list", "resource": "organizations"})
    """

    __slots__ = ("_tools",)

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool[BaseModel]] = {}

    def register(self, tool: BaseTool[Any]) -> None:
        name = tool.metadata.name
        if name in self._tools:
            raise ValueError(f"Tool '{name}' already registered. Use unregister() first.")
        self._tools[name] = tool

    def unregister(self, name: str) -> bool:
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> BaseTool[BaseModel] | None:
        return self._tools.get(name)

    def list_tools(self, category: str | None = None, *, enabled_only: bool = True) -> list[dict[str, Any]]:
        """Tool name, description, category and parameter schema, for listings and prompts."""
        return [
            {
                "name": t.metadata.name,
                "description": t.metadata.description,
                "category": t.metadata.category,
                "parameters": t.json_schema(),
            }
            for t in self._tools.values()
            if (category is None or t.metadata.category == category) and (t.metadata.enabled or not enabled_only)
        ]

    async def execute(self, name: str, params: dict[str, Any]) -> str:
        """Invoke a tool by name. Unknown names come back as an error string."""
        tool = self._tools.get(name)
        if tool is None:
            return GatewayError.create(name, f"Tool '{name}' not found", ErrorCode.NOT_FOUND, recoverable=False).render()
        return await tool.acall(**params)

    async def aclose(self) -> None:
        for tool in self._tools.values():
            await tool.aclose()

    def __iter__(self) -> Iterator[BaseTool[BaseModel]]:
        return iter(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
