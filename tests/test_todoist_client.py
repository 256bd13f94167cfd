"""Tests for the Todoist REST client."""

import json

import httpx
import pytest

from vaultsync.models import Priority, Project, RemoteTask
from vaultsync.todoist import (
    TodoistAuthError,
    TodoistClient,
    TodoistClientError,
    TodoistNotFoundError,
    TodoistRateLimitError,
    TodoistTransportError,
)


def make_client(handler, token: str = "test-token") -> tuple[TodoistClient, list[httpx.Request]]:
    """Create a client whose requests go to ``handler``; requests are recorded."""
    requests: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return TodoistClient(token, transport=httpx.MockTransport(record)), requests


def task_json(task_id: str, content: str = "Task", **extra) -> dict:
    return {"id": task_id, "content": content, "checked": False, "priority": 1, **extra}


class TestTodoistClientInit:
    """Tests for client construction."""

    def test_strips_token(self):
        """Whitespace around the token is ignored."""
        client = TodoistClient("  tok  ")
        assert client.token == "tok"
        assert client.is_configured

    def test_empty_token_not_configured(self):
        """An empty token leaves the client unconfigured."""
        assert not TodoistClient("").is_configured

    def test_from_environment_prefers_env(self, monkeypatch):
        """TODOIST_API_TOKEN overrides the configured token."""
        monkeypatch.setenv("TODOIST_API_TOKEN", "env-token")
        assert TodoistClient.from_environment("config-token").token == "env-token"

    def test_from_environment_fallback(self, monkeypatch):
        """The configured token is used when the env var is unset."""
        monkeypatch.delenv("TODOIST_API_TOKEN", raising=False)
        assert TodoistClient.from_environment("config-token").token == "config-token"

    @pytest.mark.asyncio
    async def test_bearer_header(self):
        """Requests carry the bearer token."""
        client, requests = make_client(lambda r: httpx.Response(200, json=[]))
        async with client:
            await client.list_tasks()

        assert requests[0].headers["Authorization"] == "Bearer test-token"


class TestListTasks:
    """Tests for task listing and pagination."""

    @pytest.mark.asyncio
    async def test_drains_cursor_pages(self):
        """Pages are followed via next_cursor until it is empty."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("cursor") == "page2":
                return httpx.Response(200, json={"results": [task_json("2")], "next_cursor": None})
            return httpx.Response(200, json={"results": [task_json("1")], "next_cursor": "page2"})

        client, requests = make_client(handler)
        async with client:
            tasks = await client.list_tasks()

        assert [t.id for t in tasks] == ["1", "2"]
        assert len(requests) == 2
        assert requests[0].url.path == "/api/v1/tasks"
        assert "cursor" not in requests[0].url.params

    @pytest.mark.asyncio
    async def test_bare_list_is_complete(self):
        """A plain JSON array is treated as the whole listing."""
        client, requests = make_client(
            lambda r: httpx.Response(200, json=[task_json("1"), task_json("2")])
        )
        async with client:
            tasks = await client.list_tasks()

        assert len(tasks) == 2
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_project_filter(self):
        """The project ID is passed as a query parameter."""
        client, requests = make_client(lambda r: httpx.Response(200, json={"results": []}))
        async with client:
            await client.list_tasks(project_id="99")

        assert requests[0].url.params["project_id"] == "99"


class TestTaskMutations:
    """Tests for create, update, close, reopen and delete."""

    @pytest.mark.asyncio
    async def test_create_payload(self):
        """Only provided fields are sent; priority is an int."""
        client, requests = make_client(
            lambda r: httpx.Response(200, json=task_json("555", "Buy milk", priority=4))
        )
        async with client:
            task = await client.create_task(
                "Buy milk",
                project_id="7",
                priority=Priority.HIGH,
                due_date="2025-01-01",
                labels=["errands"],
            )

        assert task.id == "555"
        assert task.priority == Priority.HIGH
        assert requests[0].method == "POST"
        assert json.loads(requests[0].content) == {
            "content": "Buy milk",
            "priority": 4,
            "project_id": "7",
            "due_date": "2025-01-01",
            "labels": ["errands"],
        }

    @pytest.mark.asyncio
    async def test_update_clears_due_date(self):
        """An empty due date is sent as 'no date'."""
        client, requests = make_client(lambda r: httpx.Response(200, json=task_json("1")))
        async with client:
            await client.update_task("1", content="New", due_date="")

        assert requests[0].url.path == "/api/v1/tasks/1"
        assert json.loads(requests[0].content) == {"content": "New", "due_string": "no date"}

    @pytest.mark.asyncio
    async def test_close_and_reopen(self):
        """Close and reopen POST to their sub-resources and accept 204."""
        client, requests = make_client(lambda r: httpx.Response(204))
        async with client:
            assert await client.close_task("1") is True
            assert await client.reopen_task("1") is True

        assert [r.url.path for r in requests] == [
            "/api/v1/tasks/1/close",
            "/api/v1/tasks/1/reopen",
        ]

    @pytest.mark.asyncio
    async def test_delete(self):
        """Delete uses the DELETE method."""
        client, requests = make_client(lambda r: httpx.Response(204))
        async with client:
            assert await client.delete_task("1") is True

        assert requests[0].method == "DELETE"

    @pytest.mark.asyncio
    async def test_get_task_missing(self):
        """get_task returns None for a 404."""
        client, _ = make_client(lambda r: httpx.Response(404))
        async with client:
            assert await client.get_task("1") is None


class TestErrorMapping:
    """Tests for HTTP error mapping."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "exc"),
        [
            (401, TodoistAuthError),
            (403, TodoistAuthError),
            (404, TodoistNotFoundError),
            (429, TodoistRateLimitError),
            (500, TodoistClientError),
        ],
    )
    async def test_status_codes(self, status, exc):
        """Each failure status maps to its exception."""
        client, _ = make_client(lambda r: httpx.Response(status, text="nope"))
        async with client:
            with pytest.raises(exc):
                await client.close_task("1")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Network failures become TodoistTransportError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client(handler)
        async with client:
            with pytest.raises(TodoistTransportError):
                await client.list_tasks()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """A non-JSON body is a client error."""
        client, _ = make_client(lambda r: httpx.Response(200, text="<html>"))
        async with client:
            with pytest.raises(TodoistClientError, match="Invalid JSON"):
                await client.get_task("1")


class TestVerifyCredential:
    """Tests for verify_credential."""

    @pytest.mark.asyncio
    async def test_valid(self):
        """A 200 from projects means the token works."""
        client, requests = make_client(lambda r: httpx.Response(200, json={"results": []}))
        async with client:
            assert await client.verify_credential() is True

        assert requests[0].url.path == "/api/v1/projects"

    @pytest.mark.asyncio
    async def test_rejected(self):
        """An auth failure returns False instead of raising."""
        client, _ = make_client(lambda r: httpx.Response(401))
        async with client:
            assert await client.verify_credential() is False

    @pytest.mark.asyncio
    async def test_unconfigured_makes_no_request(self):
        """Without a token no request is sent."""
        client, requests = make_client(lambda r: httpx.Response(200), token="")
        async with client:
            assert await client.verify_credential() is False

        assert requests == []

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        """Unreachable servers are not reported as a bad token."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        client, _ = make_client(handler)
        async with client:
            with pytest.raises(TodoistTransportError):
                await client.verify_credential()


class TestApiModels:
    """Tests for RemoteTask and Project parsing."""

    def test_remote_task_from_api(self):
        """Datetime due values are truncated to the date."""
        task = RemoteTask.from_api(
            {
                "id": 123,
                "content": "Call mom",
                "checked": True,
                "priority": 3,
                "due": {"date": "2025-01-01T10:00:00"},
                "labels": ["family"],
                "project_id": "9",
            }
        )

        assert task.id == "123"
        assert task.completed is True
        assert task.priority == Priority.MEDIUM
        assert task.due_date == "2025-01-01"
        assert task.labels == ["family"]

    def test_remote_task_legacy_shape(self):
        """The older is_completed field and missing due are handled."""
        task = RemoteTask.from_api({"id": "1", "content": "x", "is_completed": True, "due": None})

        assert task.completed is True
        assert task.due_date is None

    def test_unknown_priority(self):
        """Out-of-range priorities fall back to NONE."""
        assert RemoteTask.from_api({"id": "1", "priority": 9}).priority == Priority.NONE

    def test_project_from_api(self):
        """Inbox flag is read from either field name."""
        assert Project.from_api({"id": 1, "name": "Inbox", "inbox_project": True}).is_inbox
        assert Project.from_api({"id": 2, "name": "Work", "is_inbox_project": True}).is_inbox
        assert not Project.from_api({"id": 3, "name": "Home"}).is_inbox

    @pytest.mark.asyncio
    async def test_list_projects(self):
        """Projects are parsed from the paginated listing."""
        client, _ = make_client(
            lambda r: httpx.Response(
                200, json={"results": [{"id": "1", "name": "Inbox", "inbox_project": True}]}
            )
        )
        async with client:
            projects = await client.list_projects()

        assert projects == [Project(id="1", name="Inbox", is_inbox=True)]
