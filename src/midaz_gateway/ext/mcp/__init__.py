"""MCP integration: publish gateway tools to MCP clients (requires the `mcp` extra)."""

from .server import TRANSPORTS, MCPServer, Transport

__all__ = ["MCPServer", "Transport", "TRANSPORTS"]
