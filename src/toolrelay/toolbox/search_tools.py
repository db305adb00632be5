"""
Code search tool.
"""

from __future__ import annotations

import fnmatch
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..tools import Permission, ToolParameter, ToolRegistry, ToolResult, ToolSchema, object_schema

DEFAULT_EXCLUDE_DIRS = [".git", "node_modules", "__pycache__", ".venv", "dist", "build"]

SEARCH_FILES_SCHEMA = ToolSchema(
    name="search_files",
    description=(
        "Search for text or regex patterns in files across the project. "
        'Example: {"pattern": "def handle_.*", "pattern_type": "regex", "file_pattern": "*.py"}'
    ),
    parameters=object_schema(
        [
            ToolParameter("pattern", str, "Text or regex pattern to search for"),
            ToolParameter("file_pattern", str, 'Glob filter on file names (e.g. "*.py")', required=False),
            ToolParameter("directory", str, "Directory to search in", required=False, default="."),
            ToolParameter("case_sensitive", bool, "Case sensitive search", required=False, default=True),
            ToolParameter(
                "pattern_type",
                str,
                "substring (plain text) or regex",
                required=False,
                enum=["substring", "regex"],
                default="substring",
            ),
            ToolParameter(
                "exclude_dirs",
                list,
                "Directory names to skip",
                required=False,
                items={"type": "string"},
            ),
            ToolParameter("max_results", int, "Maximum number of matches to return", required=False, default=100),
        ]
    ),
    permission=Permission.SAFE,
)


def _compile(pattern: str, pattern_type: str, case_sensitive: bool) -> "re.Pattern[str]":
    flags = 0 if case_sensitive else re.IGNORECASE
    if pattern_type == "regex":
        return re.compile(pattern, flags)
    return re.compile(re.escape(pattern), flags)


def search_files(args: Dict[str, Any], root: Optional[Path] = None) -> ToolResult:
    """Walk ``directory`` and return ``path:line: text`` for every matching line."""
    pattern = args.get("pattern")
    if not isinstance(pattern, str) or not pattern:
        return ToolResult.error("❌ Error: pattern is required")
    pattern_type = args.get("pattern_type", "substring")
    if pattern_type not in ("substring", "regex"):
        return ToolResult.error("❌ Error: pattern_type must be 'substring' or 'regex'")
    max_results = args.get("max_results", 100)
    if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results < 1:
        return ToolResult.error("❌ Error: max_results must be a positive integer")

    try:
        regex = _compile(pattern, pattern_type, bool(args.get("case_sensitive", True)))
    except re.error as exc:
        return ToolResult.error(f"❌ Error: Invalid regex: {exc}")

    base = root or Path.cwd()
    directory = base / (args.get("directory") or ".")
    if not directory.is_dir():
        return ToolResult.error(f"❌ Error: Directory not found: {args.get('directory')}")

    file_pattern = args.get("file_pattern")
    excluded = set(args.get("exclude_dirs") or DEFAULT_EXCLUDE_DIRS)
    matches: List[str] = []

    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for filename in sorted(filenames):
            if file_pattern and not fnmatch.fnmatch(filename, file_pattern):
                continue
            path = Path(dirpath) / filename
            try:
                with path.open(encoding="utf-8") as handle:
                    for line_number, line in enumerate(handle, start=1):
                        if regex.search(line):
                            rel_path = path.relative_to(directory)
                            matches.append(f"{rel_path}:{line_number}: {line.strip()}")
                            if len(matches) >= max_results:
                                return ToolResult(content="\n".join(matches))
            except (UnicodeDecodeError, OSError):
                # Binary or unreadable files are skipped.
                continue

    if not matches:
        return ToolResult(content="No matches found")
    return ToolResult(content="\n".join(matches))


def register_search_tools(registry: ToolRegistry, root: Optional[Path] = None) -> None:
    """Register search_files."""
    registry.register(SEARCH_FILES_SCHEMA, lambda args: search_files(args, root))


__all__ = ["search_files", "register_search_tools"]
