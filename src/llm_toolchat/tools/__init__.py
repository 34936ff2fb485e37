"""Tool registry, call extraction and dispatch."""

from .registry import FunctionHandler, ToolContext, ToolHandler, ToolRegistry
from .dispatch import ToolDispatcher, extract_tool_calls
from .builtin import default_registry, default_tools

__all__ = [
    "FunctionHandler",
    "ToolContext",
    "ToolHandler",
    "ToolRegistry",
    "ToolDispatcher",
    "extract_tool_calls",
    "default_registry",
    "default_tools",
]
