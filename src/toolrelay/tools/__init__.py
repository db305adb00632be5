"""
Tools package exports.
"""

from .base import Permission, RegisteredTool, ToolParameter, ToolResult, ToolSchema, object_schema
from .dispatcher import ToolDispatcher
from .registry import ToolRegistry

__all__ = [
    "Permission",
    "RegisteredTool",
    "ToolParameter",
    "ToolResult",
    "ToolSchema",
    "object_schema",
    "ToolDispatcher",
    "ToolRegistry",
]
