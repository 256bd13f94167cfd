"""Data models."""

from .sync import (
    Conflict,
    ConflictPolicy,
    LineTaskResult,
    SyncedTaskRecord,
    SyncResult,
    SyncState,
)
from .task import ParsedTask, Priority, Project, RemoteTask
from .vaultsync_config import DEFAULT_SYNC_MARKER, VaultSyncConfig, normalize_marker

__all__ = [
    "DEFAULT_SYNC_MARKER",
    "Conflict",
    "ConflictPolicy",
    "LineTaskResult",
    "ParsedTask",
    "Priority",
    "Project",
    "RemoteTask",
    "SyncResult",
    "SyncState",
    "SyncedTaskRecord",
    "VaultSyncConfig",
    "normalize_marker",
]
