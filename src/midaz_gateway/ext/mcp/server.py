"""MCP server exposing registry tools over stdio, SSE or streamable HTTP.

Example:
    >>> server = MCPServer("midaz-gateway", registry)
    >>> server.run(transport="sse", port=8080)

Requires: pip install midaz-gateway[mcp]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from midaz_gateway.runtime.observability import get_logger

if TYPE_CHECKING:
    from midaz_gateway.tools import ToolRegistry

Transport = Literal["stdio", "sse", "streamable-http"]
TRANSPORTS: tuple[Transport, ...] = ("stdio", "sse", "streamable-http")

log = get_logger("mcp_server")


# ═══════════════════════════════════════════════════════════════════════════════
# FastMCP Adapter
# ═══════════════════════════════════════════════════════════════════════════════


class MCPServer:
    """FastMCP-backed server publishing every enabled tool of a registry.

    Args:
        name: Server name announced to MCP clients
        registry: Tools to publish
    """

    __slots__ = ("_name", "_registry", "_mcp")

    def __init__(self, name: str, registry: ToolRegistry) -> None:
        self._name = name
        self._registry = registry
        self._mcp = self._create_server()

    @property
    def name(self) -> str:
        return self._name

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def fastmcp(self) -> Any:
        """Underlying FastMCP instance."""
        return self._mcp

    def _create_server(self) -> Any:
        try:
            from fastmcp import FastMCP
        except ImportError as e:
            raise ImportError(
                "MCP integration requires fastmcp. "
                "Install with: pip install midaz-gateway[mcp]"
            ) from e

        mcp = FastMCP(self._name)
        for tool in self._registry:
            if not tool.metadata.enabled:
                continue
            mcp.tool(name=tool.metadata.name, description=tool.metadata.description)(tool.handler())
            log.debug("tool published", tool=tool.metadata.name)
        return mcp

    def list_tools(self) -> list[dict[str, Any]]:
        return self._registry.list_tools()

    async def invoke(self, tool_name: str, params: dict[str, Any]) -> str:
        """Invoke a tool by name; failures come back as text, never raised."""
        return await self._registry.execute(tool_name, params)

    def run(self, transport: Transport = "stdio", *, host: str = "127.0.0.1", port: int = 8080) -> None:
        """Start the server (blocking).

        Args:
            transport: "stdio" (CLI clients), "sse" or "streamable-http"
            host: Host for HTTP transports
            port: Port for HTTP transports
        """
        log.info("starting MCP server", transport=transport, tools=len(self._registry))
        if transport == "stdio":
            self._mcp.run()
        else:
            self._mcp.run(transport=transport, host=host, port=port)
