"""Tool registry for the Google Tasks MCP server.

Each tool pairs an MCP descriptor (name, description, JSON input schema) with
a pydantic model that validates its arguments and a handler that calls
TasksClient. The registry is built once at import time and never changes.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from mcp.types import Tool
from pydantic import BaseModel, field_validator

from gtasks_mcp.client import TasksClient
from gtasks_mcp.config import DEFAULT_TASKLIST

# =============================================================================
# Argument models
# =============================================================================


class ToolArguments(BaseModel):
    """Base for tool argument models. Unknown keys are ignored."""


class DefaultListArguments(ToolArguments):
    """Arguments whose task list falls back to the user's default list."""

    tasklist_id: str = DEFAULT_TASKLIST

    @field_validator("tasklist_id", mode="before")
    @classmethod
    def _default_tasklist(cls, value: Any) -> Any:
        # Agents often send null or "" for "no preference"
        return value or DEFAULT_TASKLIST


class TaskReference(ToolArguments):
    tasklist_id: str
    task_id: str


class ListTaskListsArguments(ToolArguments):
    pass


class ListTasksArguments(DefaultListArguments):
    show_completed: bool = False
    due_min: str | None = None
    due_max: str | None = None


class GetTaskArguments(TaskReference):
    pass


class CreateTaskArguments(DefaultListArguments):
    title: str
    notes: str | None = None
    due: str | None = None
    parent: str | None = None


class UpdateTaskArguments(TaskReference):
    title: str | None = None
    notes: str | None = None
    due: str | None = None
    status: Literal["needsAction", "completed"] | None = None


class CompleteTaskArguments(TaskReference):
    pass


class DeleteTaskArguments(TaskReference):
    pass


class MoveTaskArguments(TaskReference):
    parent: str | None = None
    previous: str | None = None


# =============================================================================
# Handlers
# =============================================================================


async def _list_task_lists(client: TasksClient, args: ListTaskListsArguments) -> Any:
    return await client.list_task_lists()


async def _list_tasks(client: TasksClient, args: ListTasksArguments) -> Any:
    return await client.list_tasks(
        args.tasklist_id,
        show_completed=args.show_completed,
        due_min=args.due_min,
        due_max=args.due_max,
    )


async def _get_task(client: TasksClient, args: GetTaskArguments) -> Any:
    return await client.get_task(args.tasklist_id, args.task_id)


async def _create_task(client: TasksClient, args: CreateTaskArguments) -> Any:
    return await client.create_task(
        args.tasklist_id,
        args.title,
        notes=args.notes,
        due=args.due,
        parent=args.parent,
    )


async def _update_task(client: TasksClient, args: UpdateTaskArguments) -> Any:
    return await client.update_task(
        args.tasklist_id,
        args.task_id,
        title=args.title,
        notes=args.notes,
        due=args.due,
        status=args.status,
    )


async def _complete_task(client: TasksClient, args: CompleteTaskArguments) -> Any:
    return await client.complete_task(args.tasklist_id, args.task_id)


async def _delete_task(client: TasksClient, args: DeleteTaskArguments) -> Any:
    return await client.delete_task(args.tasklist_id, args.task_id)


async def _move_task(client: TasksClient, args: MoveTaskArguments) -> Any:
    return await client.move_task(
        args.tasklist_id,
        args.task_id,
        parent=args.parent,
        previous=args.previous,
    )


# =============================================================================
# Registry
# =============================================================================


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool.

    Attributes:
        tool: MCP descriptor returned by list_tools.
        arguments_model: Pydantic model validating the call arguments.
        handler: Coroutine performing the operation.
    """

    tool: Tool
    arguments_model: type[ToolArguments]
    handler: Callable[[TasksClient, Any], Awaitable[Any]]


_TASKLIST_ID = {"type": "string", "description": "Task list ID."}
_DEFAULT_TASKLIST_ID = {
    "type": "string",
    "description": "Task list ID. Use '@default' for the default list.",
    "default": DEFAULT_TASKLIST,
}


def _task_ref_properties(task_description: str = "Task ID.") -> dict[str, Any]:
    return {
        "tasklist_id": dict(_TASKLIST_ID),
        "task_id": {"type": "string", "description": task_description},
    }


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        tool=Tool(
            name="list_task_lists",
            description="Get all Google Task lists for the authenticated user.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": [],
            },
        ),
        arguments_model=ListTaskListsArguments,
        handler=_list_task_lists,
    ),
    ToolSpec(
        tool=Tool(
            name="list_tasks",
            description="Get tasks from a task list. Use tasklist_id='@default' for the default list.",
            inputSchema={
                "type": "object",
                "properties": {
                    "tasklist_id": dict(_DEFAULT_TASKLIST_ID),
                    "show_completed": {
                        "type": "boolean",
                        "description": "Include completed tasks (default: false)",
                        "default": False,
                    },
                    "due_min": {
                        "type": "string",
                        "description": "Only return tasks due on or after this date (RFC3339 format)",
                    },
                    "due_max": {
                        "type": "string",
                        "description": "Only return tasks due on or before this date (RFC3339 format)",
                    },
                },
                "required": [],
            },
        ),
        arguments_model=ListTasksArguments,
        handler=_list_tasks,
    ),
    ToolSpec(
        tool=Tool(
            name="get_task",
            description="Get a single task by its ID.",
            inputSchema={
                "type": "object",
                "properties": _task_ref_properties(),
                "required": ["tasklist_id", "task_id"],
            },
        ),
        arguments_model=GetTaskArguments,
        handler=_get_task,
    ),
    ToolSpec(
        tool=Tool(
            name="create_task",
            description="Create a new task in a task list.",
            inputSchema={
                "type": "object",
                "properties": {
                    "tasklist_id": dict(_DEFAULT_TASKLIST_ID),
                    "title": {"type": "string", "description": "Task title."},
                    "notes": {"type": "string", "description": "Task description / notes."},
                    "due": {
                        "type": "string",
                        "description": "Due date in RFC3339 format (e.g., '2026-03-01T00:00:00.000Z')",
                    },
                    "parent": {
                        "type": "string",
                        "description": "Parent task ID for creating subtasks.",
                    },
                },
                "required": ["title"],
            },
        ),
        arguments_model=CreateTaskArguments,
        handler=_create_task,
    ),
    ToolSpec(
        tool=Tool(
            name="update_task",
            description="Update an existing task. Only provided fields are changed.",
            inputSchema={
                "type": "object",
                "properties": {
                    **_task_ref_properties("Task ID to update."),
                    "title": {"type": "string", "description": "New task title."},
                    "notes": {"type": "string", "description": "New task notes."},
                    "due": {"type": "string", "description": "New due date in RFC3339 format."},
                    "status": {
                        "type": "string",
                        "description": "Task status: 'needsAction' or 'completed'",
                        "enum": ["needsAction", "completed"],
                    },
                },
                "required": ["tasklist_id", "task_id"],
            },
        ),
        arguments_model=UpdateTaskArguments,
        handler=_update_task,
    ),
    ToolSpec(
        tool=Tool(
            name="complete_task",
            description="Mark a task as completed.",
            inputSchema={
                "type": "object",
                "properties": _task_ref_properties("Task ID to complete."),
                "required": ["tasklist_id", "task_id"],
            },
        ),
        arguments_model=CompleteTaskArguments,
        handler=_complete_task,
    ),
    ToolSpec(
        tool=Tool(
            name="delete_task",
            description="Permanently delete a task. This cannot be undone.",
            inputSchema={
                "type": "object",
                "properties": _task_ref_properties("Task ID to delete."),
                "required": ["tasklist_id", "task_id"],
            },
        ),
        arguments_model=DeleteTaskArguments,
        handler=_delete_task,
    ),
    ToolSpec(
        tool=Tool(
            name="move_task",
            description="Move a task (reorder within a list or reparent under another task).",
            inputSchema={
                "type": "object",
                "properties": {
                    **_task_ref_properties("Task ID to move."),
                    "parent": {
                        "type": "string",
                        "description": "New parent task ID (omit to make it a top-level task).",
                    },
                    "previous": {
                        "type": "string",
                        "description": "Sibling task ID after which this task is placed (omit to move it first).",
                    },
                },
                "required": ["tasklist_id", "task_id"],
            },
        ),
        arguments_model=MoveTaskArguments,
        handler=_move_task,
    ),
)

TOOL_REGISTRY: dict[str, ToolSpec] = {spec.tool.name: spec for spec in TOOL_SPECS}
