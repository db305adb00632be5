"""
Shell execution tool.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..tools import Permission, ToolParameter, ToolRegistry, ToolResult, ToolSchema, object_schema

DEFAULT_TIMEOUT = 30
MAX_TIMEOUT = 300
MAX_OUTPUT_CHARS = 20_000

EXECUTE_COMMAND_SCHEMA = ToolSchema(
    name="execute_command",
    description=(
        "Run a shell command or Python snippet that completes and exits (tests, builds, "
        "short scripts). Never start servers or other long-running processes. "
        'Example: {"command": "pytest -q", "command_type": "bash"}'
    ),
    parameters=object_schema(
        [
            ToolParameter("command", str, "Command to execute"),
            ToolParameter(
                "command_type",
                str,
                "bash (shell), python (inline code), setup or run (shell)",
                enum=["bash", "python", "setup", "run"],
            ),
            ToolParameter("working_directory", str, "Directory to run in", required=False),
            ToolParameter("timeout", int, "Max execution time in seconds (1-300)", required=False),
        ]
    ),
    permission=Permission.UNSAFE,
)


def _truncate(text: str) -> str:
    if len(text) <= MAX_OUTPUT_CHARS:
        return text
    return text[:MAX_OUTPUT_CHARS] + f"\n... [truncated {len(text) - MAX_OUTPUT_CHARS} characters]"


def execute_command(args: Dict[str, Any], root: Optional[Path] = None) -> ToolResult:
    """Run the command and report exit code, stdout and stderr."""
    command = args.get("command")
    command_type = args.get("command_type")
    if not isinstance(command, str) or not command.strip():
        return ToolResult.error("❌ Error: command is required")
    if command_type not in ("bash", "python", "setup", "run"):
        return ToolResult.error("❌ Error: command_type must be one of bash, python, setup, run")

    timeout = args.get("timeout", DEFAULT_TIMEOUT)
    if (
        isinstance(timeout, bool)
        or not isinstance(timeout, int)
        or not 1 <= timeout <= MAX_TIMEOUT
    ):
        return ToolResult.error(f"❌ Error: timeout must be an integer between 1 and {MAX_TIMEOUT}")

    cwd = root or Path.cwd()
    if args.get("working_directory"):
        cwd = cwd / args["working_directory"]
    if not cwd.is_dir():
        return ToolResult.error(f"❌ Error: Working directory not found: {cwd}")

    argv: Union[str, List[str]] = command
    if command_type == "python":
        argv = [sys.executable, "-c", command]

    try:
        completed = subprocess.run(
            argv,
            shell=command_type != "python",
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return ToolResult.error(f"❌ Error: Command timed out after {timeout} seconds")

    output = [f"Exit code: {completed.returncode}"]
    if completed.stdout:
        output.append(f"stdout:\n{_truncate(completed.stdout)}")
    if completed.stderr:
        output.append(f"stderr:\n{_truncate(completed.stderr)}")
    return ToolResult(content="\n".join(output), is_error=completed.returncode != 0)


def register_shell_tools(registry: ToolRegistry, root: Optional[Path] = None) -> None:
    """Register execute_command."""
    registry.register(EXECUTE_COMMAND_SCHEMA, lambda args: execute_command(args, root))


__all__ = ["execute_command", "register_shell_tools"]
