"""Tool package exports."""

from .base import Tool, ToolContext, ToolDefinition, ToolParameter, ToolResponse
from .compensation import FlightCompensationTool
from .registry import ToolRegistry

__all__ = [
    "Tool",
    "ToolContext",
    "ToolDefinition",
    "ToolParameter",
    "ToolResponse",
    "FlightCompensationTool",
    "ToolRegistry",
]
