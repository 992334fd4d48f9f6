"""Tool layer: tool abstractions, the registry and the midaz_api tool."""

from .base import BaseTool, ToolMetadata
from .midaz_api import MidazApiTool
from .registry import ToolRegistry

__all__ = ["BaseTool", "ToolMetadata", "MidazApiTool", "ToolRegistry"]
