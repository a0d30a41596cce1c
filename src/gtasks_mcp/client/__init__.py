"""Google Tasks data-access layer."""

from gtasks_mcp.client.normalize import normalize_task, normalize_task_list
from gtasks_mcp.client.tasks_client import TasksClient

__all__ = ["TasksClient", "normalize_task", "normalize_task_list"]
