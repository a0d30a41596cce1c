"""Async client for the Google Tasks REST API.

Each operation issues a single authenticated request and returns normalized
records. There is no retry, backoff or pagination: the first 100 items are
returned and any failure is raised to the caller.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from gtasks_mcp.client.normalize import normalize_task, normalize_task_list
from gtasks_mcp.config import DEFAULT_TASKLIST, MAX_RESULTS, TASKS_API_BASE
from gtasks_mcp.exceptions import NotFoundError, OperationError

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str]]


def _segment(value: str) -> str:
    """Quote an id for use as a URL path segment, keeping '@default' readable."""
    return quote(value, safe="@")


def _utc_timestamp() -> str:
    """Current time as RFC 3339 with millisecond precision, e.g. 2026-03-01T09:30:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _bool_param(value: bool) -> str:
    return str(value).lower()


def _error_message(response: httpx.Response) -> str:
    """Extract Google's error message from a failed response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return f"Google Tasks API error {response.status_code}: {error['message']}"

    text = response.text.strip() if response.text else response.reason_phrase
    return f"Google Tasks API error {response.status_code}: {text}"


class TasksClient:
    """Data-access client for Google Tasks.

    The client owns a shared httpx.AsyncClient (created lazily unless one is
    injected) and asks ``token_provider`` for a bearer token before every
    request, so a missing credential fails before anything is sent.

    Attributes:
        base_url: Root URL of the Tasks API.

    Example:
        ```python
        client = TasksClient(StoredTokenProvider())
        tasks = await client.list_tasks(show_completed=True)
        await client.close()
        ```
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = TASKS_API_BASE,
    ) -> None:
        self._token_provider = token_provider
        self._http_client = http_client
        self.base_url = base_url.rstrip("/")

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client with connection pooling."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                http2=True,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated request to the Tasks API.

        Args:
            method: HTTP method.
            path: Path relative to base_url.
            params: Optional query parameters; None values are dropped.
            json_data: Optional JSON body.

        Returns:
            Decoded JSON body, or an empty dict for empty responses.

        Raises:
            ConfigurationError: From the token provider, before any request.
            NotFoundError: If the API answers 404.
            OperationError: For any other HTTP or transport failure.
        """
        access_token = await self._token_provider()
        client = await self._get_http_client()

        if params is not None:
            params = {key: value for key, value in params.items() if value is not None}

        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")

        try:
            response = await client.request(
                method=method,
                url=url,
                params=params or None,
                json=json_data,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            if e.response.status_code == 404:
                raise NotFoundError(message, status_code=404) from e
            raise OperationError(message, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            raise OperationError(f"Google Tasks API request failed: {e}") from e

        if not response.content:
            return {}
        try:
            result: dict[str, Any] = response.json()
        except ValueError as e:
            raise OperationError(
                f"Google Tasks API returned a non-JSON response: {e}",
                status_code=response.status_code,
            ) from e
        return result

    # =========================================================================
    # Task Lists
    # =========================================================================

    async def list_task_lists(self) -> list[dict[str, Any]]:
        """List the user's task lists.

        Returns:
            Up to 100 task lists as {id, title, updated}.
        """
        response = await self._request(
            "GET", "/users/@me/lists", params={"maxResults": MAX_RESULTS}
        )
        return [normalize_task_list(item) for item in response.get("items", [])]

    # =========================================================================
    # Tasks
    # =========================================================================

    async def list_tasks(
        self,
        tasklist_id: str = DEFAULT_TASKLIST,
        show_completed: bool = False,
        show_hidden: bool = False,
        due_min: str | None = None,
        due_max: str | None = None,
    ) -> list[dict[str, Any]]:
        """List tasks in a task list.

        Args:
            tasklist_id: Task list ID, "@default" for the primary list.
            show_completed: Include completed tasks.
            show_hidden: Include hidden tasks.
            due_min: RFC 3339 lower bound for due date.
            due_max: RFC 3339 upper bound for due date.

        Returns:
            Up to 100 normalized tasks.
        """
        params = {
            "maxResults": MAX_RESULTS,
            "showCompleted": _bool_param(show_completed),
            "showHidden": _bool_param(show_hidden),
            "dueMin": due_min,
            "dueMax": due_max,
        }
        response = await self._request(
            "GET", f"/lists/{_segment(tasklist_id)}/tasks", params=params
        )
        return [normalize_task(item) for item in response.get("items", [])]

    async def get_task(self, tasklist_id: str, task_id: str) -> dict[str, Any]:
        response = await self._request(
            "GET", f"/lists/{_segment(tasklist_id)}/tasks/{_segment(task_id)}"
        )
        return normalize_task(response)

    async def create_task(
        self,
        tasklist_id: str,
        title: str,
        notes: str | None = None,
        due: str | None = None,
        parent: str | None = None,
    ) -> dict[str, Any]:
        """Create a task with status needsAction.

        Args:
            tasklist_id: Task list ID.
            title: Task title.
            notes: Optional notes.
            due: Optional RFC 3339 due date.
            parent: Optional parent task ID; the new task becomes its child.

        Returns:
            The created task, normalized.
        """
        body: dict[str, Any] = {"title": title, "status": "needsAction"}
        if notes is not None:
            body["notes"] = notes
        if due is not None:
            body["due"] = due

        response = await self._request(
            "POST",
            f"/lists/{_segment(tasklist_id)}/tasks",
            params={"parent": parent},
            json_data=body,
        )
        return normalize_task(response)

    async def update_task(
        self,
        tasklist_id: str,
        task_id: str,
        title: str | None = None,
        notes: str | None = None,
        due: str | None = None,
        status: str | None = None,
    ) -> dict[str, Any]:
        """Patch a task, sending only the fields that were provided.

        Setting status to "completed" also stamps the completion time.

        Returns:
            The updated task, normalized.
        """
        body: dict[str, Any] = {}
        if title is not None:
            body["title"] = title
        if notes is not None:
            body["notes"] = notes
        if due is not None:
            body["due"] = due
        if status is not None:
            body["status"] = status
            if status == "completed":
                body["completed"] = _utc_timestamp()

        response = await self._request(
            "PATCH",
            f"/lists/{_segment(tasklist_id)}/tasks/{_segment(task_id)}",
            json_data=body,
        )
        return normalize_task(response)

    async def complete_task(self, tasklist_id: str, task_id: str) -> dict[str, Any]:
        return await self.update_task(tasklist_id, task_id, status="completed")

    async def delete_task(self, tasklist_id: str, task_id: str) -> dict[str, Any]:
        """Permanently delete a task.

        Returns:
            Deletion confirmation {"deleted": True, "taskId": task_id}.
        """
        await self._request("DELETE", f"/lists/{_segment(tasklist_id)}/tasks/{_segment(task_id)}")
        return {"deleted": True, "taskId": task_id}

    async def move_task(
        self,
        tasklist_id: str,
        task_id: str,
        parent: str | None = None,
        previous: str | None = None,
    ) -> dict[str, Any]:
        """Move a task under a new parent and/or after a sibling.

        Tree validity (cycles, missing parents) is left to the API.

        Args:
            tasklist_id: Task list ID.
            task_id: Task to move.
            parent: New parent task ID; omitted moves it to the top level.
            previous: Sibling to place the task after; omitted moves it first.

        Returns:
            The moved task, normalized.
        """
        response = await self._request(
            "POST",
            f"/lists/{_segment(tasklist_id)}/tasks/{_segment(task_id)}/move",
            params={"parent": parent, "previous": previous},
        )
        return normalize_task(response)
