"""
File operation tools: read, create, edit, delete, and list.

Paths are resolved against the registration root (the working directory by
default). ``edit_file`` refuses to touch a file that has not been read through
``read_file`` first, so the model always edits against content it has seen.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any, Dict, Optional, Set

from ..tools import Permission, ToolParameter, ToolRegistry, ToolResult, ToolSchema, object_schema

MAX_READ_BYTES = 50 * 1024 * 1024

_PATH_HINT = (
    'For files in the current directory use just the filename (e.g. "app.py"); '
    'for subdirectories use "src/app.py". Do not use absolute paths.'
)

READ_FILE_SCHEMA = ToolSchema(
    name="read_file",
    description=(
        "Read file contents with an optional line range. Required before edit_file. "
        'Example: {"file_path": "src/app.py", "start_line": 10, "end_line": 20}'
    ),
    parameters=object_schema(
        [
            ToolParameter("file_path", str, f"Path to the file. {_PATH_HINT}"),
            ToolParameter("start_line", int, "Starting line number (1-indexed)", required=False),
            ToolParameter("end_line", int, "Ending line number (1-indexed)", required=False),
        ]
    ),
    permission=Permission.SAFE,
)

CREATE_FILE_SCHEMA = ToolSchema(
    name="create_file",
    description=(
        "Create a new file or directory. Fails if the path exists unless overwrite=true; "
        "use edit_file to change existing files. "
        'Example: {"file_path": "src/helpers.py", "content": "def helper():\\n    return True\\n"}'
    ),
    parameters=object_schema(
        [
            ToolParameter("file_path", str, f"Path for the new file or directory. {_PATH_HINT}"),
            ToolParameter("content", str, 'File content (use "" for directories)'),
            ToolParameter(
                "file_type",
                str,
                "Create a file or a directory",
                required=False,
                enum=["file", "directory"],
                default="file",
            ),
            ToolParameter("overwrite", bool, "Overwrite an existing file", required=False, default=False),
        ]
    ),
    permission=Permission.UNSAFE,
)

EDIT_FILE_SCHEMA = ToolSchema(
    name="edit_file",
    description=(
        "Edit an existing file by replacing exact text. Call read_file first. "
        "Matching is exact, whitespace included. "
        'Example: {"file_path": "src/app.py", "old_text": "x = 1", "new_text": "x = 2"}'
    ),
    parameters=object_schema(
        [
            ToolParameter("file_path", str, f"Path to an existing file. {_PATH_HINT}"),
            ToolParameter("old_text", str, "Exact text to find"),
            ToolParameter("new_text", str, "Replacement text"),
        ]
    ),
    permission=Permission.UNSAFE,
)

DELETE_FILE_SCHEMA = ToolSchema(
    name="delete_file",
    description=(
        "Delete a file, or a directory with all of its contents. "
        'Example: {"file_path": "src/old_module.py"}'
    ),
    parameters=object_schema(
        [ToolParameter("file_path", str, f"Path to delete. {_PATH_HINT}")]
    ),
    permission=Permission.UNSAFE,
)

LIST_FILES_SCHEMA = ToolSchema(
    name="list_files",
    description=(
        "List files and directories with their types and sizes. "
        'Example: {"directory": "src", "pattern": "*.py"}'
    ),
    parameters=object_schema(
        [
            ToolParameter("directory", str, 'Directory to list ("." for current)', required=False, default="."),
            ToolParameter("pattern", str, 'Glob pattern to filter entries (e.g. "*.py")', required=False),
            ToolParameter("recursive", bool, "Include subdirectories", required=False, default=False),
        ]
    ),
    permission=Permission.SAFE,
)


def _error(message: str) -> ToolResult:
    return ToolResult.error(f"❌ Error: {message}")


def _string_arg(args: Dict[str, Any], name: str) -> Optional[str]:
    value = args.get(name)
    return value if isinstance(value, str) else None


class FileTools:
    """Handlers for the file category, sharing a root and the set of files read so far."""

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = root
        self.read_files: Set[Path] = set()

    def _resolve(self, file_path: str) -> Path:
        base = self.root or Path.cwd()
        return (base / file_path).resolve()

    def read_file(self, args: Dict[str, Any]) -> ToolResult:
        file_path = _string_arg(args, "file_path")
        if not file_path:
            return _error("file_path is required")
        start_line = args.get("start_line")
        end_line = args.get("end_line")
        for name, value in (("start_line", start_line), ("end_line", end_line)):
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, int) or value < 1
            ):
                return _error(f"{name} must be a positive integer")

        path = self._resolve(file_path)
        if not path.exists():
            return _error(f"File not found: {file_path}")
        if not path.is_file():
            return _error(f"{file_path} is not a file")
        if path.stat().st_size > MAX_READ_BYTES:
            return _error("File too large (max 50MB)")

        try:
            content = path.read_text(encoding="utf-8")
        except PermissionError:
            return _error(f"Permission denied reading {file_path}")
        except UnicodeDecodeError:
            return _error(f"{file_path} is not a UTF-8 text file")

        self.read_files.add(path)
        if start_line is None:
            return ToolResult(content=content)

        lines = content.split("\n")
        if start_line > len(lines):
            return _error("Start line exceeds file length")
        end = min(len(lines), end_line) if end_line is not None else len(lines)
        return ToolResult(content="\n".join(lines[start_line - 1 : end]))

    def create_file(self, args: Dict[str, Any]) -> ToolResult:
        file_path = _string_arg(args, "file_path")
        content = args.get("content", "")
        file_type = args.get("file_type", "file")
        if not file_path:
            return _error("file_path is required")
        if not isinstance(content, str):
            return _error("content must be a string")
        if file_type not in ("file", "directory"):
            return _error("file_type must be 'file' or 'directory'")

        path = self._resolve(file_path)
        if path.exists() and not args.get("overwrite", False):
            return _error(
                f"File {file_path} already exists. Use edit_file to modify or set overwrite=true."
            )

        if file_type == "directory":
            path.mkdir(parents=True, exist_ok=True)
            return ToolResult(content=f"Created directory {file_path}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return ToolResult(content=f"Created file {file_path} with {len(content.splitlines())} lines")

    def edit_file(self, args: Dict[str, Any]) -> ToolResult:
        file_path = _string_arg(args, "file_path")
        old_text = _string_arg(args, "old_text")
        new_text = _string_arg(args, "new_text")
        if not file_path or old_text is None or new_text is None:
            return _error("file_path, old_text and new_text are required strings")

        path = self._resolve(file_path)
        if path not in self.read_files:
            return _error(f"Read {file_path} with read_file before editing it")
        if not path.is_file():
            return _error(f"File not found: {file_path}")

        content = path.read_text(encoding="utf-8")
        if old_text not in content:
            return _error(
                f"Could not find exact match for old_text in {file_path}. "
                "Text matching is exact - check whitespace."
            )
        path.write_text(content.replace(old_text, new_text, 1), encoding="utf-8")
        return ToolResult(content=f"Edited {file_path} - replaced text")

    def delete_file(self, args: Dict[str, Any]) -> ToolResult:
        file_path = _string_arg(args, "file_path")
        if not file_path:
            return _error("file_path is required")

        path = self._resolve(file_path)
        if not path.exists():
            return _error(f"File not found: {file_path}")
        if path.is_dir():
            shutil.rmtree(path)
            self.read_files = {read for read in self.read_files if path not in read.parents}
            return ToolResult(content=f"Deleted directory {file_path} and all contents")
        path.unlink()
        self.read_files.discard(path)
        return ToolResult(content=f"Deleted file {file_path}")

    def list_files(self, args: Dict[str, Any]) -> ToolResult:
        directory = args.get("directory") or "."
        pattern = args.get("pattern") or "*"
        recursive = bool(args.get("recursive", False))
        if not isinstance(directory, str) or not isinstance(pattern, str):
            return _error("directory and pattern must be strings")

        path = self._resolve(directory)
        if not path.exists():
            return _error(f"Directory not found: {directory}")
        if not path.is_dir():
            return _error(f"{directory} is not a directory")

        glob_func = path.rglob if recursive else path.glob
        entries = [
            {
                "name": str(item.relative_to(path)),
                "type": "directory" if item.is_dir() else "file",
                "size": item.stat().st_size,
            }
            for item in sorted(glob_func(pattern))
        ]
        return ToolResult(content=json.dumps(entries, indent=2))


def register_file_tools(registry: ToolRegistry, root: Optional[Path] = None) -> None:
    """Register read_file, create_file, edit_file, delete_file, and list_files."""
    tools = FileTools(root)
    registry.register(READ_FILE_SCHEMA, tools.read_file)
    registry.register(CREATE_FILE_SCHEMA, tools.create_file)
    registry.register(EDIT_FILE_SCHEMA, tools.edit_file)
    registry.register(DELETE_FILE_SCHEMA, tools.delete_file)
    registry.register(LIST_FILES_SCHEMA, tools.list_files)


__all__ = ["FileTools", "register_file_tools"]
