"""Sync command: run one reconciliation pass over the vault."""

import asyncio
import logging
from pathlib import Path

from ..models import Conflict, SyncResult
from ..repositories import FilesystemDocumentStore
from ..services import ConfigService
from ..sync import SyncEngine
from ..todoist import TodoistClient
from ..utils.datetime import format_local
from .output import error, header, info, success, warning

logger = logging.getLogger(__name__)


def run_sync(vault_root: Path) -> int:
    """Run a full sync between the vault and Todoist.

    Args:
        vault_root: Path to the vault containing .vaultsync.yml

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    config_service = ConfigService(vault_root)
    config = config_service.get_config()
    if config_service.has_config_error:
        error(config_service.config_error or "Invalid configuration")
        return 1

    state = config_service.get_state()
    info(f"Last full sync: {format_local(state.last_full_sync_at)}")

    header(f"Syncing {vault_root} with Todoist...")
    result, conflicts = asyncio.run(_sync(vault_root, config_service))

    # Persist even partial progress; records for created tasks must survive
    config_service.save()

    _display_result(result)
    if conflicts:
        _display_conflicts(conflicts)

    return 0 if not result.has_errors else 1


async def _sync(
    vault_root: Path, config_service: ConfigService
) -> tuple[SyncResult, list[Conflict]]:
    config = config_service.get_config()
    store = FilesystemDocumentStore(vault_root)

    async with TodoistClient.from_environment(config.api_token) as client:
        engine = SyncEngine(store, client, config)
        result = await engine.perform_sync(config_service.get_state())
        conflicts = engine.pending_conflicts
        engine.clear_pending_conflicts()

    return result, conflicts


def _display_result(result: SyncResult) -> None:
    print()
    if result.created:
        success(f"Created {result.created} task(s) in Todoist")
    if result.updated:
        success(f"Updated {result.updated} task(s)")
    if result.completed:
        success(f"Completed {result.completed} task(s)")
    if not (result.created or result.updated or result.completed or result.has_errors):
        info("Everything is up to date")
    for err in result.errors:
        error(err)


def _display_conflicts(conflicts: list[Conflict]) -> None:
    print()
    header("Conflicts (resolve by editing the vault or Todoist):")
    for conflict in conflicts:
        warning(f"{conflict.file_path}:{conflict.line_index + 1} (todoist-id {conflict.remote_id})")
        print(f"    vault:   {_checkbox(conflict.local_completed)} {conflict.local_text}")
        print(f"    todoist: {_checkbox(conflict.remote_completed)} {conflict.remote_text}")


def _checkbox(completed: bool) -> str:
    return "[x]" if completed else "[ ]"
