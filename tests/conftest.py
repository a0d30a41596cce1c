"""Shared pytest fixtures for gtasks-mcp tests.

This module provides reusable fixtures for OAuth tokens, token storage, and
an in-memory stand-in for the Google Tasks REST API served through
httpx.MockTransport.
"""

import itertools
import json
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from gtasks_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata
from gtasks_mcp.client import TasksClient
from gtasks_mcp.config import TASKS_API_BASE

# =============================================================================
# Token Fixtures
# =============================================================================


@pytest.fixture
def valid_token() -> OAuthToken:
    """Create a valid, non-expired OAuth token."""
    return OAuthToken(
        access_token="test_access_token_abc123",
        refresh_token="test_refresh_token_xyz789",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=["https://www.googleapis.com/auth/tasks"],
        token_type="Bearer",
    )


@pytest.fixture
def expired_token() -> OAuthToken:
    """Create an expired OAuth token."""
    return OAuthToken(
        access_token="expired_access_token",
        refresh_token="test_refresh_token",
        expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
        scopes=["https://www.googleapis.com/auth/tasks"],
        token_type="Bearer",
    )


@pytest.fixture
def token_metadata() -> TokenMetadata:
    return TokenMetadata(
        service_name="gtasks-mcp",
        provider="google",
        created_at=datetime.now(timezone.utc) - timedelta(days=1),
    )


@pytest.fixture
def stored_token(valid_token: OAuthToken, token_metadata: TokenMetadata) -> StoredToken:
    return StoredToken(version=1, metadata=token_metadata, token=valid_token)


# =============================================================================
# Token Storage Fixtures
# =============================================================================


@pytest.fixture
def temp_token_path(tmp_path: Path) -> Path:
    """Get the path for a temporary tokens.json file."""
    token_dir = tmp_path / ".gtasks-mcp"
    token_dir.mkdir(parents=True, mode=0o700)
    return token_dir / "tokens.json"


@pytest.fixture
def token_storage(temp_token_path: Path):
    """Create a TokenStorage instance with temporary storage."""
    from gtasks_mcp.auth.token_storage import TokenStorage

    return TokenStorage(token_path=temp_token_path)


@pytest.fixture
def oauth_manager(token_storage):
    """Create an OAuthManager with temporary storage."""
    from gtasks_mcp.auth.oauth_manager import OAuthManager

    return OAuthManager(storage=token_storage)


@pytest.fixture
def mock_google_credentials() -> MagicMock:
    """Create a mock Google OAuth2 Credentials object."""
    mock_creds = MagicMock()
    mock_creds.token = "mock_access_token"
    mock_creds.refresh_token = "mock_refresh_token"
    mock_creds.expiry = datetime.now(timezone.utc) + timedelta(hours=1)
    mock_creds.expired = False
    mock_creds.valid = True
    return mock_creds


# =============================================================================
# Fake Google Tasks API
# =============================================================================

_API_PREFIX = httpx.URL(TASKS_API_BASE).path
_TASK_PATH = re.compile(
    rf"^{re.escape(_API_PREFIX)}/lists/(?P<list>[^/]+)/tasks(?:/(?P<task>[^/]+)(?P<move>/move)?)?$"
)


def _google_error(status: int, message: str) -> httpx.Response:
    return httpx.Response(
        status,
        json={"error": {"code": status, "message": message, "errors": []}},
    )


class FakeTasksAPI:
    """In-memory Google Tasks backend.

    Mimics the API's habit of omitting unset optional fields, resolves
    "@default" to the first list, and records every request it receives.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.task_lists: list[dict[str, Any]] = [
            {
                "kind": "tasks#taskList",
                "id": "list_default",
                "title": "My Tasks",
                "updated": "2026-02-01T10:00:00.000Z",
                "selfLink": f"{TASKS_API_BASE}/users/@me/lists/list_default",
            },
            {
                "kind": "tasks#taskList",
                "id": "list_work",
                "title": "Work",
                "updated": "2026-02-02T10:00:00.000Z",
                "selfLink": f"{TASKS_API_BASE}/users/@me/lists/list_work",
            },
        ]
        self.tasks: dict[str, dict[str, dict[str, Any]]] = {
            item["id"]: {} for item in self.task_lists
        }
        self._ids = itertools.count(1)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def add_task(self, tasklist_id: str = "list_default", **fields: Any) -> dict[str, Any]:
        """Seed a task directly, bypassing the HTTP layer."""
        task = self._new_task(fields)
        self.tasks[tasklist_id][task["id"]] = task
        return task

    def _new_task(self, fields: dict[str, Any]) -> dict[str, Any]:
        number = next(self._ids)
        task = {
            "kind": "tasks#task",
            "id": f"task_{number:03d}",
            "status": "needsAction",
            "position": f"{number:020d}",
            "updated": "2026-02-10T14:00:00.000Z",
        }
        task.update({key: value for key, value in fields.items() if value is not None})
        return task

    def _resolve_list(self, tasklist_id: str) -> str:
        return self.task_lists[0]["id"] if tasklist_id == "@default" else tasklist_id

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("Authorization") != "Bearer test_access_token_abc123":
            return _google_error(401, "Request had invalid authentication credentials.")

        path = request.url.path
        if path == f"{_API_PREFIX}/users/@me/lists" and request.method == "GET":
            return httpx.Response(200, json={"kind": "tasks#taskLists", "items": self.task_lists})

        match = _TASK_PATH.match(path)
        if match is None:
            return _google_error(404, "Not Found")

        tasklist_id = self._resolve_list(match["list"])
        if tasklist_id not in self.tasks:
            return _google_error(404, "Task list not found.")
        tasks = self.tasks[tasklist_id]
        task_id = match["task"]
        params = request.url.params

        if task_id is None:
            if request.method == "GET":
                items = list(tasks.values())
                if params.get("showCompleted") == "false":
                    items = [item for item in items if item["status"] != "completed"]
                return httpx.Response(200, json={"kind": "tasks#tasks", "items": items})
            if request.method == "POST":
                body = json.loads(request.content)
                task = self._new_task({**body, "parent": params.get("parent")})
                tasks[task["id"]] = task
                return httpx.Response(200, json=task)

        if task_id not in tasks:
            return _google_error(404, "Task not found.")
        task = tasks[task_id]

        if match["move"] and request.method == "POST":
            if "parent" in params:
                task["parent"] = params["parent"]
            else:
                task.pop("parent", None)
            task["position"] = f"{next(self._ids):020d}"
            return httpx.Response(200, json=task)
        if request.method == "GET":
            return httpx.Response(200, json=task)
        if request.method == "PATCH":
            task.update(json.loads(request.content))
            task["updated"] = "2026-02-11T09:00:00.000Z"
            return httpx.Response(200, json=task)
        if request.method == "DELETE":
            del tasks[task_id]
            return httpx.Response(204)

        return _google_error(405, "Method not allowed.")


@pytest.fixture
def fake_api() -> FakeTasksAPI:
    return FakeTasksAPI()


@pytest.fixture
def token_provider():
    """Token provider that always yields the fake API's accepted token."""

    async def provide() -> str:
        return "test_access_token_abc123"

    return provide


@pytest.fixture
def tasks_client(fake_api: FakeTasksAPI, token_provider) -> TasksClient:
    """TasksClient wired to the fake API."""
    return TasksClient(token_provider, http_client=httpx.AsyncClient(transport=fake_api.transport))


@pytest.fixture
def server(tasks_client: TasksClient):
    """GoogleTasksServer dispatching to the fake API."""
    from gtasks_mcp.server.tasks_server import GoogleTasksServer

    return GoogleTasksServer(client=tasks_client)
