"""Sync-related data models: persisted state, results and conflicts."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ConflictPolicy(str, Enum):
    """How divergent edits between the vault and Todoist are resolved."""

    LOCAL_WINS = "local-wins"  # Vault edits are pushed to Todoist
    REMOTE_WINS = "remote-wins"  # Todoist edits are written into the vault
    ASK = "ask"  # Completion follows remote, content conflicts are queued


class SyncedTaskRecord(BaseModel):
    """What we last knew about a linked task, keyed by its Todoist ID."""

    remote_id: str
    file_path: str
    line_index: int
    fingerprint: str = ""  # Empty until a full pass has touched the task
    last_synced_at: datetime
    local_completed: bool = False
    remote_completed: bool = False


class SyncState(BaseModel):
    """Persisted sync state, loaded at startup and saved after every pass."""

    records: dict[str, SyncedTaskRecord] = Field(default_factory=dict)
    last_full_sync_at: datetime | None = None

    @property
    def task_count(self) -> int:
        """Number of tasks currently linked."""
        return len(self.records)


@dataclass
class SyncResult:
    """Result of a reconciliation pass."""

    created: int = 0  # Todoist tasks created from vault lines
    updated: int = 0  # Tasks whose content was pushed or pulled
    completed: int = 0  # Completion propagated in either direction
    conflicts: int = 0  # Conflicts detected under the "ask" policy
    errors: list[str] = field(default_factory=list)  # Error messages

    @property
    def has_errors(self) -> bool:
        """Whether any errors occurred."""
        return len(self.errors) > 0

    @property
    def summary(self) -> str:
        """One-line summary suitable for a notice or status line."""
        return (
            f"{self.created} created, {self.updated} updated, "
            f"{self.completed} completed, {self.conflicts} conflict(s)"
        )


@dataclass
class Conflict:
    """A content conflict queued for the user under the "ask" policy."""

    remote_id: str
    file_path: str
    line_index: int
    local_text: str
    remote_text: str
    local_completed: bool
    remote_completed: bool


@dataclass
class LineTaskResult:
    """Result of creating a Todoist task from a single vault line."""

    success: bool
    message: str
    remote_id: str | None = None
