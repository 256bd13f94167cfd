"""Shared fixtures for vaultsync tests."""

import asyncio
from pathlib import Path

import pytest

from vaultsync.models import Priority, Project, RemoteTask, SyncState, VaultSyncConfig
from vaultsync.repositories import FilesystemDocumentStore
from vaultsync.todoist import TodoistNotFoundError


class FakeTodoistClient:
    """In-memory stand-in for TodoistClient.

    Tasks live in ``tasks`` keyed by ID. New IDs count up from 555. Every
    call is appended to ``calls`` as ``(method, args)``. Set ``fail_on[method]``
    to an exception to make that method raise it.
    """

    def __init__(self, tasks: list[RemoteTask] | None = None, configured: bool = True):
        self.tasks: dict[str, RemoteTask] = {task.id: task for task in tasks or []}
        self.configured = configured
        self.next_id = 555
        self.calls: list[tuple[str, tuple]] = []
        self.fail_on: dict[str, Exception] = {}
        self.gate: asyncio.Event | None = None

    @property
    def is_configured(self) -> bool:
        return self.configured

    def _enter(self, method: str, *args) -> None:
        self.calls.append((method, args))
        if method in self.fail_on:
            raise self.fail_on[method]

    def called(self, method: str) -> list[tuple]:
        """Arguments of every call made to ``method``."""
        return [args for name, args in self.calls if name == method]

    async def list_tasks(self, project_id: str | None = None) -> list[RemoteTask]:
        if self.gate is not None:
            await self.gate.wait()
        self._enter("list_tasks", project_id)
        return list(self.tasks.values())

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
        self._enter("create_task", content, project_id, priority, due_date, labels, description)
        task = RemoteTask(
            id=str(self.next_id),
            content=content,
            priority=priority,
            due_date=due_date,
            project_id=project_id,
            labels=labels or [],
            description=description or "",
        )
        self.next_id += 1
        self.tasks[task.id] = task
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
        self._enter("update_task", task_id, content, priority, due_date, labels)
        task = self._get(task_id)
        changes: dict = {}
        if content is not None:
            changes["content"] = content
        if priority is not None:
            changes["priority"] = priority
        if due_date is not None:
            changes["due_date"] = due_date or None
        if labels is not None:
            changes["labels"] = labels
        self.tasks[task_id] = task.model_copy(update=changes)
        return self.tasks[task_id]

    async def close_task(self, task_id: str) -> bool:
        self._enter("close_task", task_id)
        self.tasks[task_id] = self._get(task_id).model_copy(update={"completed": True})
        return True

    async def reopen_task(self, task_id: str) -> bool:
        self._enter("reopen_task", task_id)
        self.tasks[task_id] = self._get(task_id).model_copy(update={"completed": False})
        return True

    async def list_projects(self) -> list[Project]:
        self._enter("list_projects")
        return [Project(id="1", name="Inbox", is_inbox=True)]

    async def verify_credential(self) -> bool:
        self._enter("verify_credential")
        return self.configured

    def _get(self, task_id: str) -> RemoteTask:
        if task_id not in self.tasks:
            raise TodoistNotFoundError(f"Resource not found: /tasks/{task_id}")
        return self.tasks[task_id]


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Create an empty vault directory."""
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def store(vault: Path) -> FilesystemDocumentStore:
    """Filesystem document store over the temporary vault."""
    return FilesystemDocumentStore(vault)


@pytest.fixture
def gateway() -> FakeTodoistClient:
    """A configured fake Todoist client with no tasks."""
    return FakeTodoistClient()


@pytest.fixture
def config() -> VaultSyncConfig:
    """Default settings with a dummy token."""
    return VaultSyncConfig(api_token="test-token")


@pytest.fixture
def state() -> SyncState:
    """Empty sync state."""
    return SyncState()
