"""Reconciliation engine for bidirectional vault <-> Todoist sync.

This module provides the SyncEngine class which handles:
- Creating Todoist tasks for newly tagged vault lines
- Propagating completion in both directions
- Reconciling content, priority and due date under a conflict policy
- Detecting tasks deleted in Todoist
- Creating a single task from an arbitrary vault line

The engine holds no sync state of its own: the caller loads a SyncState,
passes it in, and persists it after the call returns.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Container
from typing import TYPE_CHECKING

from ..models import (
    Conflict,
    ConflictPolicy,
    LineTaskResult,
    ParsedTask,
    RemoteTask,
    SyncedTaskRecord,
    SyncResult,
    SyncState,
    VaultSyncConfig,
)
from ..todoist.client import TodoistNotFoundError
from ..utils.datetime import now_utc
from .codec import (
    TASK_PATTERN,
    attach_remote_id,
    extract_remote_id,
    fingerprint,
    has_marker,
    serialize_line,
    set_completed,
    strip_metadata,
)
from .scanner import scan_all

if TYPE_CHECKING:
    from ..repositories import DocumentStoreProtocol
    from ..todoist.protocol import TaskGatewayProtocol

logger = logging.getLogger(__name__)

SYNC_IN_PROGRESS = "Sync already in progress"
NOT_CONFIGURED = "Todoist API not configured"

# "- ", "* ", "+ " bullets and "1. " numbered list markers
LIST_PREFIX_PATTERN = re.compile(r"^(?:[-*+]|\d+\.)(?:\s+|$)")


class SyncEngine:
    """Engine for bidirectional sync between vault task lines and Todoist.

    A reconciliation pass:
    1. Fetches every active Todoist task
    2. Scans the vault for lines carrying the sync marker
    3. Creates Todoist tasks for lines without an ID
    4. Reconciles linked lines (completion first, then content)
    5. Drops sync records whose line is gone from the vault

    Passes never overlap: a call made while another pass is in flight is
    rejected with an error instead of being queued.
    """

    def __init__(
        self,
        store: DocumentStoreProtocol,
        client: TaskGatewayProtocol | None,
        config: VaultSyncConfig,
    ) -> None:
        """Initialize the sync engine.

        Args:
            store: Document store for the vault
            client: Todoist gateway (None if no token is configured)
            config: User settings (marker, default project, conflict policy)
        """
        self._store = store
        self._client = client
        self._config = config
        self._syncing = False
        self._pending_conflicts: list[Conflict] = []

    def update_config(self, config: VaultSyncConfig) -> None:
        """Replace the settings used by subsequent passes."""
        self._config = config

    @property
    def is_syncing(self) -> bool:
        """Whether a pass is currently running."""
        return self._syncing

    @property
    def pending_conflicts(self) -> list[Conflict]:
        """Conflicts queued under the "ask" policy, oldest first."""
        return list(self._pending_conflicts)

    def clear_pending_conflicts(self) -> None:
        """Forget queued conflicts once they have been shown to the user."""
        self._pending_conflicts.clear()

    def _is_configured(self) -> bool:
        return self._client is not None and self._client.is_configured

    # --- Public API: full sync ---

    async def perform_sync(self, state: SyncState) -> SyncResult:
        """Run one reconciliation pass.

        Args:
            state: Sync state, mutated in place. The caller persists it.

        Returns:
            SyncResult with counters and any per-task errors
        """
        if self._syncing:
            logger.debug("Sync already in progress, skipping")
            return SyncResult(errors=[SYNC_IN_PROGRESS])

        if not self._is_configured():
            logger.debug("Todoist API not configured")
            return SyncResult(errors=[NOT_CONFIGURED])

        self._syncing = True
        result = SyncResult()
        try:
            await self._run_pass(state, result)
        except Exception as e:
            result.errors.append(f"Sync failed: {e}")
            logger.error("Sync failed: %s", e)
        finally:
            self._syncing = False

        return result

    async def _run_pass(self, state: SyncState, result: SyncResult) -> None:
        assert self._client is not None
        logger.info("Starting sync...")

        try:
            remote_tasks = await self._client.list_tasks()
        except Exception as e:
            result.errors.append(f"Failed to fetch Todoist tasks: {e}")
            logger.error("Failed to fetch Todoist tasks: %s", e)
            return

        remote_by_id = {task.id: task for task in remote_tasks}
        logger.info("Found %d tasks in Todoist", len(remote_by_id))

        local_tasks = await scan_all(self._store, self._config.sync_marker)

        # Later lines win when the same ID appears more than once
        linked: dict[str, ParsedTask] = {}
        unlinked: list[ParsedTask] = []
        for task in local_tasks:
            if task.remote_id:
                linked[task.remote_id] = task
            else:
                unlinked.append(task)

        logger.info(
            "%d new task(s) to create, %d linked task(s) to sync",
            len(unlinked),
            len(linked),
        )

        created_ids: set[str] = set()
        for task in unlinked:
            remote_id = await self._create_remote_task(task, state, result)
            if remote_id:
                created_ids.add(remote_id)

        for remote_id, task in linked.items():
            remote = remote_by_id.get(remote_id)
            if remote is None:
                await self._handle_remote_missing(task, state, result)
                continue

            try:
                await self._reconcile_task(task, remote, state, result)
            except TodoistNotFoundError:
                logger.info("Task %s disappeared from Todoist during sync", remote_id)
                await self._handle_remote_missing(task, state, result)
            except Exception as e:
                result.errors.append(f"Failed to sync task: {task.content} - {e}")
                logger.error("Failed to sync task %s: %s", remote_id, e)

        self._remove_orphans(state, linked.keys() | created_ids)

        state.last_full_sync_at = now_utc()
        logger.info("Sync complete: %s", result.summary)

    # --- Creation phase ---

    async def _create_remote_task(
        self, task: ParsedTask, state: SyncState, result: SyncResult
    ) -> str | None:
        """Create a Todoist task for an unlinked line and link it.

        Returns:
            The new Todoist ID, or None if creation failed
        """
        assert self._client is not None
        logger.debug("Creating task %r from %s:%d", task.content, task.file_path, task.line_index)

        try:
            remote = await self._client.create_task(
                task.content,
                project_id=self._config.project_id,
                priority=task.priority,
                due_date=task.due_date,
                labels=task.labels or None,
                description=task.description or None,
            )
        except Exception as e:
            result.errors.append(f"Failed to create task: {task.content} - {e}")
            logger.error("Failed to create task %r: %s", task.content, e)
            return None

        result.created += 1

        try:
            await self._rewrite_line(
                task.file_path,
                task.line_index,
                lambda line: attach_remote_id(line, remote.id),
            )
            linked_task = task.model_copy(update={"remote_id": remote.id})
            record = self._record(
                state,
                linked_task,
                local_completed=task.completed,
                remote_completed=remote.completed,
            )
            if task.completed and not remote.completed:
                await self._client.close_task(remote.id)
                record.remote_completed = True
        except Exception as e:
            result.errors.append(f"Failed to link task: {task.content} - {e}")
            logger.error("Created task %s but failed to link it: %s", remote.id, e)

        return remote.id

    # --- Linked phase ---

    async def _handle_remote_missing(
        self, task: ParsedTask, state: SyncState, result: SyncResult
    ) -> None:
        """Complete the vault line of a task that no longer exists in Todoist.

        Completed tasks drop out of Todoist's active listing too, so a line
        that is already checked only has its record cleared.
        """
        assert task.remote_id is not None
        if task.completed:
            state.records.pop(task.remote_id, None)
            return

        logger.debug("Task %s not found in Todoist, marking completed", task.remote_id)
        try:
            await self._rewrite_line(
                task.file_path,
                task.line_index,
                lambda line: set_completed(line, True),
            )
        except Exception as e:
            result.errors.append(f"Failed to mark task completed: {task.content} - {e}")
            logger.error("Failed to mark task %s completed: %s", task.remote_id, e)
            return

        state.records.pop(task.remote_id, None)
        result.completed += 1

    async def _reconcile_task(
        self,
        task: ParsedTask,
        remote: RemoteTask,
        state: SyncState,
        result: SyncResult,
    ) -> None:
        """Reconcile one linked task. Completion is compared before content."""
        assert self._client is not None
        policy = self._config.conflict_policy

        if task.completed and not remote.completed:
            await self._client.close_task(remote.id)
            self._record(state, task, local_completed=True, remote_completed=True)
            result.completed += 1
            return

        if remote.completed and not task.completed:
            if policy is ConflictPolicy.LOCAL_WINS:
                await self._client.reopen_task(remote.id)
                self._record(state, task, local_completed=False, remote_completed=False)
                result.updated += 1
                return

            # remote-wins, and the applied default under "ask"
            await self._rewrite_line(
                task.file_path,
                task.line_index,
                lambda line: set_completed(line, True),
            )
            done = task.model_copy(update={"completed": True})
            self._record(state, done, local_completed=True, remote_completed=True)
            result.completed += 1
            if policy is ConflictPolicy.ASK:
                self._queue_conflict(task, remote)
                result.conflicts += 1
            return

        remote_content = strip_metadata(remote.content, self._config.sync_marker)
        differs = (
            task.content != remote_content
            or task.priority != remote.priority
            or task.due_date != remote.due_date
        )
        if not differs:
            self._record(
                state, task, local_completed=task.completed, remote_completed=remote.completed
            )
            return

        logger.debug("Task %s differs (policy=%s)", remote.id, policy.value)

        if policy is ConflictPolicy.LOCAL_WINS:
            await self._client.update_task(
                remote.id,
                content=task.content,
                priority=task.priority,
                due_date=task.due_date or "",
                labels=task.labels,
            )
            self._record(
                state, task, local_completed=task.completed, remote_completed=remote.completed
            )
            result.updated += 1

        elif policy is ConflictPolicy.REMOTE_WINS:
            pulled = task.model_copy(
                update={
                    "content": remote_content,
                    "priority": remote.priority,
                    "due_date": remote.due_date,
                    "completed": remote.completed,
                }
            )
            new_line = serialize_line(pulled, self._config.sync_marker)
            await self._rewrite_line(task.file_path, task.line_index, lambda _: new_line)
            self._record(
                state, pulled, local_completed=pulled.completed, remote_completed=remote.completed
            )
            result.updated += 1

        else:
            self._queue_conflict(task, remote)
            result.conflicts += 1

    def _queue_conflict(self, task: ParsedTask, remote: RemoteTask) -> None:
        self._pending_conflicts.append(
            Conflict(
                remote_id=remote.id,
                file_path=task.file_path,
                line_index=task.line_index,
                local_text=task.content,
                remote_text=remote.content,
                local_completed=task.completed,
                remote_completed=remote.completed,
            )
        )
        logger.info("Conflict queued for task %s (%s)", remote.id, task.file_path)

    # --- State helpers ---

    def _record(
        self,
        state: SyncState,
        task: ParsedTask,
        *,
        local_completed: bool,
        remote_completed: bool,
    ) -> SyncedTaskRecord:
        """Insert or refresh the sync record for a linked task."""
        assert task.remote_id is not None
        record = SyncedTaskRecord(
            remote_id=task.remote_id,
            file_path=task.file_path,
            line_index=task.line_index,
            fingerprint=fingerprint(task),
            last_synced_at=now_utc(),
            local_completed=local_completed,
            remote_completed=remote_completed,
        )
        state.records[task.remote_id] = record
        return record

    @staticmethod
    def _remove_orphans(state: SyncState, local_ids: Container[str]) -> None:
        """Drop records whose line is no longer in the vault.

        Covers deleted and untagged lines, whether or not the task is still
        active in Todoist.
        """
        orphans = [remote_id for remote_id in state.records if remote_id not in local_ids]
        for remote_id in orphans:
            del state.records[remote_id]
        if orphans:
            logger.info("Removed %d orphaned sync record(s)", len(orphans))

    # --- Document helpers ---

    async def _rewrite_line(
        self,
        file_path: str,
        line_index: int,
        transform: Callable[[str], str],
    ) -> None:
        """Re-read a document, replace one line, and write it back."""
        text = await self._store.read(file_path)
        lines = text.split("\n")

        if line_index >= len(lines):
            raise IndexError(f"Line number out of range: {file_path}:{line_index}")

        lines[line_index] = transform(lines[line_index])
        await self._store.write(file_path, "\n".join(lines))

    # --- Public API: single line ---

    async def create_from_line(
        self,
        state: SyncState,
        file_path: str,
        line_index: int,
        raw_line: str,
    ) -> LineTaskResult:
        """Create a Todoist task from one vault line and link the line to it.

        Checkbox lines get the marker appended if missing. Plain lines (with
        or without a list prefix) are converted to a checkbox line.

        Args:
            state: Sync state, receives a record for the new task
            file_path: Vault-relative document path
            line_index: 0-based line number
            raw_line: Current text of the line

        Returns:
            LineTaskResult with a user-facing message
        """
        if not self._is_configured():
            return LineTaskResult(
                success=False,
                message="Todoist API not configured. Please add your API token first.",
            )
        assert self._client is not None
        marker = self._config.sync_marker

        match = TASK_PATTERN.match(raw_line)
        if match:
            if extract_remote_id(raw_line):
                return LineTaskResult(success=False, message="Task is already synced with Todoist.")
            body = match.group(3)
            line = raw_line.rstrip()
            if not has_marker(body, marker):
                body = f"{body.strip()} {marker}"
                line = f"{line} {marker}"
            completed = match.group(2).lower() == "x"
        else:
            stripped = raw_line.strip()
            if not stripped:
                return LineTaskResult(success=False, message="Cannot create task from empty line.")
            text = LIST_PREFIX_PATTERN.sub("", stripped).strip()
            if not text:
                return LineTaskResult(
                    success=False, message="Cannot create task from empty bullet."
                )
            indent = raw_line[: len(raw_line) - len(raw_line.lstrip())]
            body = f"{text} {marker}"
            line = f"{indent}- [ ] {body}"
            completed = False

        content = strip_metadata(body, marker)
        if not content:
            return LineTaskResult(success=False, message="Cannot create task without any text.")

        try:
            remote = await self._client.create_task(content, project_id=self._config.project_id)
        except Exception as e:
            logger.error("Failed to create Todoist task: %s", e)
            return LineTaskResult(success=False, message=f"Failed to create task: {e}")

        try:
            await self._rewrite_line(
                file_path, line_index, lambda _: attach_remote_id(line, remote.id)
            )
        except Exception as e:
            logger.error("Created task %s but failed to update %s: %s", remote.id, file_path, e)
            return LineTaskResult(
                success=False,
                message=f"Created Todoist task {remote.id} but failed to update the line: {e}",
                remote_id=remote.id,
            )

        state.records[remote.id] = SyncedTaskRecord(
            remote_id=remote.id,
            file_path=file_path,
            line_index=line_index,
            fingerprint="",
            last_synced_at=now_utc(),
            local_completed=completed,
            remote_completed=remote.completed,
        )

        return LineTaskResult(
            success=True,
            message=f"Created Todoist task: {content}",
            remote_id=remote.id,
        )
