"""Todoist REST API client."""

from __future__ import annotations

import logging
import os
import time
from typing import Any

import httpx

from ..models import Priority, Project, RemoteTask

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.todoist.com/api/v1"
PAGE_LIMIT = 100


class TodoistClientError(Exception):
    """Base exception for Todoist client errors."""

    pass


class TodoistAuthError(TodoistClientError):
    """Authentication failed (missing, invalid or revoked token)."""

    pass


class TodoistNotFoundError(TodoistClientError):
    """Resource not found."""

    pass


class TodoistRateLimitError(TodoistClientError):
    """Rate limit exceeded."""

    pass


class TodoistTransportError(TodoistClientError):
    """The server could not be reached."""

    pass


class TodoistClient:
    """Async Todoist REST API client.

    Provides a thin typed wrapper around the Todoist API with:
    - Bearer token authentication
    - Cursor pagination drained transparently for list calls
    - Error mapping to a small exception hierarchy

    Failed calls are never retried; errors surface to the caller.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the Todoist client.

        Args:
            token: Todoist API token (may be empty; the client is then unconfigured)
            base_url: API base URL
            transport: Optional httpx transport, used by tests
        """
        self.token = token.strip()
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
            },
            timeout=30.0,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        """Whether a token is set. Says nothing about the token being valid."""
        return bool(self.token)

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> TodoistClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    @classmethod
    def from_environment(cls, fallback_token: str = "") -> TodoistClient:
        """Create a client from TODOIST_API_TOKEN, falling back to a configured token."""
        token = os.environ.get("TODOIST_API_TOKEN")
        if token:
            logger.debug("Using token from TODOIST_API_TOKEN environment variable")
            return cls(token)
        return cls(fallback_token)

    # --- Tasks ---

    async def list_tasks(self, project_id: str | None = None) -> list[RemoteTask]:
        """List all active tasks, draining every page.

        Args:
            project_id: Optional project to restrict the listing to

        Returns:
            Every active task visible to the token
        """
        params: dict[str, Any] = {}
        if project_id:
            params["project_id"] = project_id
        items = await self._get_all("/tasks", params)
        tasks = [RemoteTask.from_api(item) for item in items]
        logger.debug("Fetched %d tasks from Todoist", len(tasks))
        return tasks

    async def get_task(self, task_id: str) -> RemoteTask | None:
        """Get a single task, or None if it no longer exists."""
        try:
            data = await self._request("GET", f"/tasks/{task_id}")
        except TodoistNotFoundError:
            return None
        return RemoteTask.from_api(data)

    async def create_task(
        self,
        content: str,
        *,
        project_id: str | None = None,
        priority: Priority = Priority.NONE,
        due_date: str | None = None,
        labels: list[str] | None = None,
        description: str | None = None,
    ) -> RemoteTask:
        """Create a new task.

        Args:
            content: Task title
            project_id: Target project (None = Inbox)
            priority: Task priority
            due_date: Due date as YYYY-MM-DD
            labels: Label names
            description: Longer task description

        Returns:
            The created task as returned by Todoist
        """
        payload: dict[str, Any] = {"content": content, "priority": int(priority)}
        if project_id:
            payload["project_id"] = project_id
        if due_date:
            payload["due_date"] = due_date
        if labels:
            payload["labels"] = labels
        if description:
            payload["description"] = description

        data = await self._request("POST", "/tasks", json=payload)
        task = RemoteTask.from_api(data)
        logger.info("Created Todoist task %s: %s", task.id, content)
        return task

    async def update_task(
        self,
        task_id: str,
        *,
        content: str | None = None,
        priority: Priority | None = None,
        due_date: str | None = None,
        labels: list[str] | None = None,
        description: str | None = None,
    ) -> RemoteTask:
        """Update fields of an existing task.

        Fields left as None are unchanged. An empty ``due_date`` clears the
        due date.
        """
        payload: dict[str, Any] = {}
        if content is not None:
            payload["content"] = content
        if priority is not None:
            payload["priority"] = int(priority)
        if due_date:
            payload["due_date"] = due_date
        elif due_date is not None:
            payload["due_string"] = "no date"
        if labels is not None:
            payload["labels"] = labels
        if description is not None:
            payload["description"] = description

        data = await self._request("POST", f"/tasks/{task_id}", json=payload)
        logger.info("Updated Todoist task %s", task_id)
        return RemoteTask.from_api(data)

    async def close_task(self, task_id: str) -> bool:
        """Complete a task.

        Raises:
            TodoistNotFoundError: The task no longer exists
        """
        await self._request("POST", f"/tasks/{task_id}/close")
        logger.info("Closed Todoist task %s", task_id)
        return True

    async def reopen_task(self, task_id: str) -> bool:
        """Reopen a completed task.

        Raises:
            TodoistNotFoundError: The task no longer exists
        """
        await self._request("POST", f"/tasks/{task_id}/reopen")
        logger.info("Reopened Todoist task %s", task_id)
        return True

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task permanently."""
        await self._request("DELETE", f"/tasks/{task_id}")
        logger.info("Deleted Todoist task %s", task_id)
        return True

    # --- Projects & account ---

    async def list_projects(self) -> list[Project]:
        """List all projects."""
        items = await self._get_all("/projects", {})
        return [Project.from_api(item) for item in items]

    async def verify_credential(self) -> bool:
        """Check the token with a cheap authenticated call.

        Returns:
            True if the token is accepted, False if it is rejected

        Raises:
            TodoistTransportError: The server could not be reached
        """
        if not self.is_configured:
            return False
        try:
            await self._request("GET", "/projects", params={"limit": 1})
        except TodoistAuthError:
            logger.warning("Todoist token was rejected")
            return False
        return True

    # --- HTTP ---

    async def _get_all(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """GET a list endpoint and follow ``next_cursor`` until exhausted.

        A bare JSON array response is treated as the complete listing.
        """
        items: list[dict[str, Any]] = []
        cursor: str | None = None

        while True:
            page_params = {**params, "limit": PAGE_LIMIT}
            if cursor:
                page_params["cursor"] = cursor
            data = await self._request("GET", path, params=page_params)

            if isinstance(data, list):
                items.extend(data)
                break

            items.extend(data.get("results") or [])
            cursor = data.get("next_cursor")
            if not cursor:
                break

        return items

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and map failures to client exceptions.

        Returns:
            Decoded JSON body, or None for empty responses (e.g. 204)

        Raises:
            TodoistAuthError: 401/403
            TodoistNotFoundError: 404
            TodoistRateLimitError: 429
            TodoistTransportError: Network failure or timeout
            TodoistClientError: Other errors
        """
        # Log request details (DEBUG level for payloads to avoid sensitive data at INFO)
        logger.debug("%s %s params=%s json=%s", method, path, params, json)

        start_time = time.monotonic()
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("%s %s failed after %.0fms: %s", method, path, elapsed_ms, e)
            raise TodoistTransportError(f"Request failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        status = response.status_code

        if status in (401, 403):
            logger.error("%s %s: %d Unauthorized (%.0fms)", method, path, status, elapsed_ms)
            raise TodoistAuthError(
                "Authentication failed. Check your Todoist API token "
                "(Todoist settings > Integrations > Developer)."
            )
        if status == 404:
            logger.warning("%s %s: 404 Not Found (%.0fms)", method, path, elapsed_ms)
            raise TodoistNotFoundError(f"Resource not found: {path}")
        if status == 429:
            logger.error("%s %s: 429 Rate Limited (%.0fms)", method, path, elapsed_ms)
            raise TodoistRateLimitError("Todoist API rate limit exceeded. Try again later.")
        if status >= 400:
            logger.error("%s %s: HTTP %d (%.0fms)", method, path, status, elapsed_ms)
            raise TodoistClientError(f"HTTP {status}: {response.text}")

        logger.info("%s %s: %d (%.0fms)", method, path, status, elapsed_ms)

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error("%s %s: Invalid JSON response (%.0fms)", method, path, elapsed_ms)
            raise TodoistClientError(f"Invalid JSON response: {e}") from e
