"""
Task tracking tools: break a request into tasks and report progress on them.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..tools import Permission, ToolParameter, ToolRegistry, ToolResult, ToolSchema, object_schema

TASK_STATUSES = ["pending", "in_progress", "completed"]

CREATE_TASKS_SCHEMA = ToolSchema(
    name="create_tasks",
    description=(
        "Break a complex request into an ordered task list. Replaces any existing list. "
        'Example: {"user_query": "Build login", "tasks": [{"id": "1", "description": "Create user model"}]}'
    ),
    parameters=object_schema(
        [
            ToolParameter("user_query", str, "Original user request being broken down"),
            ToolParameter(
                "tasks",
                list,
                "List of actionable subtasks",
                items={
                    "type": "object",
                    "properties": {
                        "id": {"type": "string", "description": "Unique task identifier"},
                        "description": {"type": "string", "description": "Actionable task description"},
                        "status": {"type": "string", "enum": TASK_STATUSES, "default": "pending"},
                    },
                    "required": ["id", "description"],
                },
            ),
        ]
    ),
    permission=Permission.SAFE,
)

UPDATE_TASKS_SCHEMA = ToolSchema(
    name="update_tasks",
    description=(
        "Update task status and notes. "
        'Example: {"task_updates": [{"id": "1", "status": "completed", "notes": "Done"}]}'
    ),
    parameters=object_schema(
        [
            ToolParameter(
                "task_updates",
                list,
                "Status updates for specific tasks",
                items={
                    "type": "object",
                    "properties": {
                        "id": {"type": "string", "description": "ID of the task to update"},
                        "status": {"type": "string", "enum": TASK_STATUSES},
                        "notes": {"type": "string", "description": "Optional progress notes"},
                    },
                    "required": ["id", "status"],
                },
            )
        ]
    ),
    permission=Permission.SAFE,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Task:
    id: str
    description: str
    status: str = "pending"
    notes: Optional[str] = None
    updated_at: str = field(default_factory=_now)


@dataclass
class TaskList:
    user_query: str
    tasks: List[Task]
    created_at: str = field(default_factory=_now)

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)


class TaskTools:
    """Handlers for the task category; holds the current task list in memory."""

    def __init__(self) -> None:
        self.current: Optional[TaskList] = None

    def create_tasks(self, args: Dict[str, Any]) -> ToolResult:
        user_query = args.get("user_query")
        raw_tasks = args.get("tasks")
        if not isinstance(user_query, str) or not isinstance(raw_tasks, list):
            return ToolResult.error("❌ Error: user_query (string) and tasks (array) are required")

        tasks = []
        for raw in raw_tasks:
            if not isinstance(raw, dict) or "id" not in raw or "description" not in raw:
                return ToolResult.error("❌ Error: every task needs an id and a description")
            status = raw.get("status") or "pending"
            if status not in TASK_STATUSES:
                return ToolResult.error(f"❌ Error: invalid status '{status}'")
            tasks.append(Task(id=str(raw["id"]), description=str(raw["description"]), status=status))

        self.current = TaskList(user_query=user_query, tasks=tasks)
        return ToolResult(content=f"Created task list with {len(tasks)} tasks\n{self.current.to_json()}")

    def update_tasks(self, args: Dict[str, Any]) -> ToolResult:
        updates = args.get("task_updates")
        if not isinstance(updates, list):
            return ToolResult.error("❌ Error: task_updates (array) is required")
        if self.current is None:
            return ToolResult.error("❌ Error: No active task list. Create tasks first.")

        by_id = {task.id: task for task in self.current.tasks}
        updated = 0
        for update in updates:
            if not isinstance(update, dict):
                continue
            task = by_id.get(str(update.get("id")))
            if task is None:
                continue
            status = update.get("status")
            if status:
                if status not in TASK_STATUSES:
                    return ToolResult.error(f"❌ Error: invalid status '{status}'")
                task.status = status
            if update.get("notes"):
                task.notes = update["notes"]
            task.updated_at = _now()
            updated += 1

        return ToolResult(content=f"Updated {updated} tasks\n{self.current.to_json()}")


def register_task_tools(registry: ToolRegistry) -> None:
    """Register create_tasks and update_tasks."""
    tools = TaskTools()
    registry.register(CREATE_TASKS_SCHEMA, tools.create_tasks)
    registry.register(UPDATE_TASKS_SCHEMA, tools.update_tasks)


__all__ = ["Task", "TaskList", "TaskTools", "register_task_tools"]
