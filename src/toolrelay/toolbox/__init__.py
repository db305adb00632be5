"""
Toolrelay Toolbox - built-in tool categories for a coding assistant.

Each category exposes a ``register_*_tools(registry)`` function that registers
a fixed set of tools in declaration order:

- file: read_file, create_file, edit_file, delete_file, list_files
- search: search_files
- shell: execute_command
- task: create_tasks, update_tasks

Usage:
    from toolrelay import ToolRegistry
    from toolrelay.toolbox import initialize_all_tools

    registry = ToolRegistry()
    initialize_all_tools(registry)
"""

from pathlib import Path
from typing import Callable, Dict, Optional

from ..tools import ToolRegistry
from .file_tools import register_file_tools
from .search_tools import register_search_tools
from .shell_tools import register_shell_tools
from .task_tools import register_task_tools

__all__ = [
    "register_file_tools",
    "register_search_tools",
    "register_shell_tools",
    "register_task_tools",
    "initialize_all_tools",
    "register_category",
    "CATEGORIES",
]

CATEGORIES: Dict[str, Callable[..., None]] = {
    "file": register_file_tools,
    "search": register_search_tools,
    "shell": register_shell_tools,
    "task": register_task_tools,
}


def register_category(registry: ToolRegistry, category: str, root: Optional[Path] = None) -> None:
    """
    Register a single category by name.

    Raises:
        ValueError: If category is invalid
    """
    if category not in CATEGORIES:
        valid_categories = ", ".join(CATEGORIES)
        raise ValueError(f"Invalid category '{category}'. Valid categories: {valid_categories}")

    if category == "task":
        register_task_tools(registry)
    else:
        CATEGORIES[category](registry, root)


def initialize_all_tools(registry: ToolRegistry, root: Optional[Path] = None) -> None:
    """Register every category. Called once at startup."""
    for category in CATEGORIES:
        register_category(registry, category, root)
