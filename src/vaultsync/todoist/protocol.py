"""Gateway protocol consumed by the sync engine."""

from typing import Protocol

from ..models import Priority, Project, RemoteTask


class TaskGatewayProtocol(Protocol):
    """The remote task operations the sync engine relies on.

    ``TodoistClient`` is the production implementation. Close and reopen
    must raise ``TodoistNotFoundError`` when the task no longer exists.
    """

    @property
    def is_configured(self) -> bool: ...

    async def list_tasks(self, project_id: str | None = None) -> list[RemoteTask]: ...

    async def create_task(
        self,
        content: str,
        *,
        project_id: str | None = None,
        priority: Priority = Priority.NONE,
        due_date: str | None = None,
        labels: list[str] | None = None,
        description: str | None = None,
    ) -> RemoteTask: ...

    async def update_task(
        self,
        task_id: str,
        *,
        content: str | None = None,
        priority: Priority | None = None,
        due_date: str | None = None,
        labels: list[str] | None = None,
        description: str | None = None,
    ) -> RemoteTask: ...

    async def close_task(self, task_id: str) -> bool: ...

    async def reopen_task(self, task_id: str) -> bool: ...

    async def list_projects(self) -> list[Project]: ...

    async def verify_credential(self) -> bool: ...
