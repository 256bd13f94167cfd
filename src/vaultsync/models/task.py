"""Task domain models for both sides of the sync."""

from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, Field


class Priority(IntEnum):
    """Task priority, using Todoist's API values (4 = most urgent)."""

    NONE = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4

    @classmethod
    def from_api(cls, value: int | None) -> "Priority":
        """Coerce a raw API priority, falling back to NONE for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


class ParsedTask(BaseModel):
    """A tagged checklist line parsed from a vault document.

    Rebuilt from the document text on every scan and never persisted.
    """

    # Location
    file_path: str  # Vault-relative path, e.g. "projects/home.md"
    line_index: int  # 0-based line number within the document
    raw_line: str

    # Structured fields
    content: str
    completed: bool = False
    remote_id: str | None = None  # Todoist task ID from the id comment
    due_date: str | None = None  # YYYY-MM-DD
    priority: Priority = Priority.NONE
    labels: list[str] = Field(default_factory=list)
    description: str = ""  # Indented lines below the task

    modified_at: datetime | None = None  # Document mtime at scan time

    @property
    def is_linked(self) -> bool:
        """Whether the line already carries a Todoist ID."""
        return self.remote_id is not None


class RemoteTask(BaseModel):
    """A task as returned by the Todoist API."""

    id: str
    content: str
    completed: bool = False
    due_date: str | None = None
    priority: Priority = Priority.NONE
    project_id: str | None = None
    labels: list[str] = Field(default_factory=list)
    description: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "RemoteTask":
        """Create a RemoteTask from a Todoist task payload.

        Accepts both the current API shape (``checked``) and the older REST
        shape (``is_completed``). Timed due dates are truncated to the date.
        """
        due = data.get("due") or {}
        due_date = due.get("date")
        return cls(
            id=str(data["id"]),
            content=data.get("content", ""),
            completed=bool(data.get("checked", data.get("is_completed", False))),
            due_date=due_date[:10] if due_date else None,
            priority=Priority.from_api(data.get("priority")),
            project_id=data.get("project_id"),
            labels=list(data.get("labels") or []),
            description=data.get("description") or "",
        )


class Project(BaseModel):
    """A Todoist project, used to pick the default project for new tasks."""

    id: str
    name: str
    is_inbox: bool = False

    @classmethod
    def from_api(cls, data: dict) -> "Project":
        """Create a Project from a Todoist project payload."""
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            is_inbox=bool(data.get("inbox_project", data.get("is_inbox_project", False))),
        )
