"""Unit tests for task record normalization."""

import pytest

from gtasks_mcp.client.normalize import normalize_task, normalize_task_list

TASK_KEYS = {
    "id",
    "title",
    "notes",
    "status",
    "due",
    "completed",
    "parent",
    "position",
    "updated",
}


@pytest.mark.unit
class TestNormalizeTask:
    def test_should_fill_defaults_for_sparse_record(self) -> None:
        raw = {
            "kind": "tasks#task",
            "id": "task_001",
            "status": "needsAction",
            "updated": "2026-02-10T14:00:00.000Z",
        }

        task = normalize_task(raw)

        assert set(task) == TASK_KEYS
        assert task["title"] == ""
        assert task["notes"] == ""
        assert task["due"] is None
        assert task["completed"] is None
        assert task["parent"] is None
        assert task["position"] is None
        assert task["status"] == "needsAction"
        assert task["updated"] == "2026-02-10T14:00:00.000Z"

    def test_should_keep_populated_fields(self) -> None:
        raw = {
            "id": "task_002",
            "title": "Review PR #123",
            "notes": "Check the new authentication logic",
            "status": "completed",
            "due": "2026-02-15T00:00:00.000Z",
            "completed": "2026-02-14T08:30:00.000Z",
            "parent": "task_001",
            "position": "00000000000000000001",
            "updated": "2026-02-14T08:30:00.000Z",
            "selfLink": "https://tasks.googleapis.com/tasks/v1/lists/x/tasks/task_002",
        }

        task = normalize_task(raw)

        assert task == {key: raw[key] for key in TASK_KEYS}

    def test_should_be_idempotent(self) -> None:
        once = normalize_task({"id": "task_003", "status": "needsAction", "title": "Buy milk"})

        assert normalize_task(once) == once

    def test_should_pass_status_through_unchanged(self) -> None:
        assert normalize_task({"id": "t"})["status"] is None


@pytest.mark.unit
class TestNormalizeTaskList:
    def test_should_keep_only_id_title_updated(self) -> None:
        raw = {
            "kind": "tasks#taskList",
            "id": "list_default",
            "title": "My Tasks",
            "updated": "2026-02-01T10:00:00.000Z",
            "selfLink": "https://tasks.googleapis.com/tasks/v1/users/@me/lists/list_default",
        }

        assert normalize_task_list(raw) == {
            "id": "list_default",
            "title": "My Tasks",
            "updated": "2026-02-01T10:00:00.000Z",
        }
