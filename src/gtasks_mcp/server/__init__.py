"""MCP server implementation for Google Tasks.

Provides 8 tools for AI agents:
- list_task_lists: Get all task lists
- list_tasks: Get tasks from a list, with completion and due-date filters
- get_task: Get a single task
- create_task: Create a task or subtask
- update_task: Change title, notes, due date or status
- complete_task: Mark a task as completed
- delete_task: Permanently delete a task
- move_task: Reorder or reparent a task

Transport: Stdio
Authentication: OAuth 2.0 with automatic token refresh
"""

from gtasks_mcp.server.tasks_server import GoogleTasksServer, main

__all__ = ["GoogleTasksServer", "main"]
