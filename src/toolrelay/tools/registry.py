"""
Registry for managing and discovering tools.
"""

from __future__ import annotations

import inspect
import logging
from typing import Callable, Dict, List, Optional, Tuple

from ..exceptions import ToolNotFoundError
from .base import JsonSchema, Permission, RegisteredTool, ToolHandler, ToolSchema, object_schema

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Central mapping from tool name to schema, handler, and permission.

    One registry is created at startup, populated by the category registration
    functions, and passed to the dispatcher. Registering a name that already
    exists replaces it entirely (last write wins); each replacement is counted
    in ``overwrite_count`` and logged.
    """

    # Some models namespace tool names; lookups accept and strip these prefixes.
    name_prefixes: Tuple[str, ...] = ("repo_browser.",)

    def __init__(self) -> None:
        self._tools: Dict[str, RegisteredTool] = {}
        self.overwrite_count = 0

    def resolve_name(self, name: str) -> str:
        """Return ``name`` with any known model-added prefix removed."""
        for prefix in self.name_prefixes:
            if name.startswith(prefix):
                return name[len(prefix) :]
        return name

    def register(self, schema: ToolSchema, handler: ToolHandler) -> RegisteredTool:
        """
        Register ``handler`` under ``schema.name``.

        Args:
            schema: Tool description, including its permission tier.
            handler: Callable taking the parsed argument dict. May be async.

        Returns:
            The stored RegisteredTool.
        """
        if schema.name in self._tools:
            self.overwrite_count += 1
            logger.warning("Tool '%s' re-registered; replacing previous definition", schema.name)
        registered = RegisteredTool(schema=schema, handler=handler)
        self._tools[schema.name] = registered
        return registered

    def tool(
        self,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        parameters: Optional[JsonSchema] = None,
        permission: Permission = Permission.SAFE,
    ) -> Callable[[ToolHandler], ToolHandler]:
        """
        Decorator to register a function as a tool in this registry.

        The tool name defaults to the function name and the description to the
        first line of its docstring. The function is returned unchanged.
        """

        def decorator(func: ToolHandler) -> ToolHandler:
            doc = inspect.getdoc(func) or ""
            schema = ToolSchema(
                name=name or func.__name__,
                description=description or (doc.splitlines()[0] if doc else ""),
                parameters=parameters or object_schema([]),
                permission=permission,
            )
            self.register(schema, func)
            return func

        return decorator

    def get(self, name: str) -> RegisteredTool:
        """
        Get a tool by name. Model-added prefixes such as ``repo_browser.`` are accepted.

        Raises:
            ToolNotFoundError: If no tool is registered under ``name``.
        """
        try:
            return self._tools[self.resolve_name(name)]
        except KeyError:
            raise ToolNotFoundError(name, self._tools.keys()) from None

    def has(self, name: str) -> bool:
        return self.resolve_name(name) in self._tools

    def names(self) -> List[str]:
        """Registered tool names in registration order."""
        return list(self._tools)

    def list_tools(self) -> List[RegisteredTool]:
        return list(self._tools.values())

    def schemas(self) -> List[JsonSchema]:
        """Wire-form schemas for every registered tool."""
        return [registered.schema.to_openai() for registered in self._tools.values()]

    def permission_of(self, name: str) -> Permission:
        return self.get(name).permission

    def requires_confirmation(self, name: str) -> bool:
        """True when the caller must confirm before dispatching ``name``."""
        return self.permission_of(name) == Permission.UNSAFE

    def by_permission(self, permission: Permission) -> List[str]:
        permission = Permission(permission)
        return [name for name, registered in self._tools.items() if registered.permission == permission]

    # Enabled flags only filter what is offered to the model; dispatch ignores them.
    def enable(self, name: str) -> None:
        self.get(name).enabled = True

    def disable(self, name: str) -> None:
        self.get(name).enabled = False

    def is_enabled(self, name: str) -> bool:
        return self.get(name).enabled

    def enabled_schemas(self) -> List[JsonSchema]:
        return [
            registered.schema.to_openai()
            for registered in self._tools.values()
            if registered.enabled
        ]

    def reset(self) -> None:
        """Drop every registration. Intended for test isolation."""
        self._tools.clear()
        self.overwrite_count = 0

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        return len(self._tools)


__all__ = ["ToolRegistry"]
