"""Normalization of Google Tasks API records into a fixed shape.

The API omits optional fields instead of sending nulls. These helpers fill
the gaps so every task has the same keys regardless of what Google returned.
Applying them to an already-normalized record returns an equal record.
"""

from typing import Any


def normalize_task_list(item: dict[str, Any]) -> dict[str, Any]:
    """Reduce a raw TaskList resource to id, title and updated."""
    return {
        "id": item.get("id"),
        "title": item.get("title"),
        "updated": item.get("updated"),
    }


def normalize_task(item: dict[str, Any]) -> dict[str, Any]:
    """Format a raw Task resource for consistent output.

    Args:
        item: Raw task data from the API (or a previously normalized task).

    Returns:
        Task dictionary where title/notes default to "" and
        due/completed/parent/position default to None. status and updated
        pass through unchanged.
    """
    return {
        "id": item.get("id"),
        "title": item.get("title") or "",
        "notes": item.get("notes") or "",
        "status": item.get("status"),
        "due": item.get("due") or None,
        "completed": item.get("completed") or None,
        "parent": item.get("parent") or None,
        "position": item.get("position") or None,
        "updated": item.get("updated"),
    }
