"""
Tool metadata, schemas, and results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..exceptions import ToolValidationError

JsonSchema = Dict[str, Any]

_SUPPORTED_TYPES = {"string", "integer", "number", "boolean", "array", "object"}


def _python_type_to_json(param_type: Union[type, str]) -> str:
    """Map a Python type to a JSON schema type string."""
    if isinstance(param_type, str):
        return param_type
    type_map = {
        str: "string",
        int: "integer",
        float: "number",
        bool: "boolean",
        list: "array",
        dict: "object",
    }
    return type_map.get(param_type, "string")


class Permission(str, Enum):
    """
    Permission tier of a tool.

    ``SAFE`` tools may run without confirmation. ``UNSAFE`` tools need the
    caller to obtain confirmation first; the registry only classifies.
    """

    SAFE = "safe"
    UNSAFE = "unsafe"


@dataclass
class ToolParameter:
    """
    Schema definition for a single tool parameter.

    Attributes:
        name: Parameter name as it appears in the model's JSON arguments.
        param_type: Python type (str, int, float, bool, list, dict) or a JSON schema type name.
        description: Human-readable description shown to the model.
        required: Whether the model must supply it (default: True).
        enum: Optional list of allowed values.
        default: Optional documented default.
        items: Optional JSON schema for array elements.

    Example:
        >>> ToolParameter(
        ...     name="status",
        ...     param_type=str,
        ...     description="New task status",
        ...     enum=["pending", "in_progress", "completed"],
        ... ).to_schema()["enum"]
        ['pending', 'in_progress', 'completed']
    """

    name: str
    param_type: Union[type, str]
    description: str
    required: bool = True
    enum: Optional[List[Any]] = None
    default: Any = None
    items: Optional[JsonSchema] = None

    def to_schema(self) -> JsonSchema:
        """Convert parameter definition to a JSON Schema property."""
        schema: JsonSchema = {
            "type": _python_type_to_json(self.param_type),
            "description": self.description,
        }
        if self.enum:
            schema["enum"] = self.enum
        if self.default is not None:
            schema["default"] = self.default
        if self.items is not None:
            schema["items"] = self.items
        return schema


def object_schema(parameters: List[ToolParameter]) -> JsonSchema:
    """Build a JSON Schema ``object`` from a list of parameters."""
    return {
        "type": "object",
        "properties": {param.name: param.to_schema() for param in parameters},
        "required": [param.name for param in parameters if param.required],
    }


@dataclass
class ToolSchema:
    """
    Declarative description of a tool: what the model sees plus its permission tier.

    Attributes:
        name: Unique identifier for the tool.
        description: What the tool does (shown to the model).
        parameters: JSON Schema ``object`` describing the arguments.
        permission: Permission tier. Default: ``Permission.SAFE``.

    Raises:
        ToolValidationError: If the definition is invalid.
    """

    name: str
    description: str
    parameters: JsonSchema = field(default_factory=lambda: object_schema([]))
    permission: Permission = Permission.SAFE

    def __post_init__(self) -> None:
        self.permission = Permission(self.permission)
        self._validate()

    def _validate(self) -> None:
        """Catch definition errors at registration time instead of at dispatch."""
        if not self.name or not self.name.strip():
            raise ToolValidationError(
                tool_name="<unnamed>",
                field_name="name",
                issue="Tool name cannot be empty",
                suggestion="Provide a descriptive name for the tool",
            )

        if not self.description or not self.description.strip():
            raise ToolValidationError(
                tool_name=self.name,
                field_name="description",
                issue="Tool description cannot be empty",
                suggestion="Provide a clear description explaining what the tool does",
            )

        if self.parameters.get("type") != "object":
            raise ToolValidationError(
                tool_name=self.name,
                field_name="parameters",
                issue="Parameter schema must be a JSON Schema object",
                suggestion="Build it with object_schema([...])",
            )

        properties = self.parameters.get("properties", {})
        for param_name, prop in properties.items():
            prop_type = prop.get("type")
            if prop_type is not None and prop_type not in _SUPPORTED_TYPES:
                raise ToolValidationError(
                    tool_name=self.name,
                    field_name=param_name,
                    issue=f"Unsupported parameter type: {prop_type}",
                    suggestion=f"Use one of: {', '.join(sorted(_SUPPORTED_TYPES))}",
                )

        missing = [name for name in self.parameters.get("required", []) if name not in properties]
        if missing:
            raise ToolValidationError(
                tool_name=self.name,
                field_name=", ".join(missing),
                issue="Required parameter(s) not declared in properties",
                suggestion=f"Declared parameters: {', '.join(properties) or '(none)'}",
            )

    def to_openai(self) -> JsonSchema:
        """Return the function-tool wire form sent to the model."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass
class ToolResult:
    """Outcome of a dispatched tool call, fed back to the model as tool output."""

    content: str
    is_error: bool = False

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(content=message, is_error=True)


HandlerResult = Union[ToolResult, str, Dict[str, Any], List[Any], None]
ToolHandler = Callable[[Dict[str, Any]], Union[HandlerResult, Awaitable[HandlerResult]]]


@dataclass
class RegisteredTool:
    """A schema bound to its handler. Owned by ``ToolRegistry``."""

    schema: ToolSchema
    handler: ToolHandler
    enabled: bool = True

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def permission(self) -> Permission:
        return self.schema.permission


__all__ = [
    "JsonSchema",
    "Permission",
    "ToolParameter",
    "object_schema",
    "ToolSchema",
    "ToolResult",
    "ToolHandler",
    "RegisteredTool",
]
