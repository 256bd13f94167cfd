"""Create command: turn a single vault line into a Todoist task."""

import asyncio
from pathlib import Path

from ..models import LineTaskResult
from ..repositories import FilesystemDocumentStore
from ..services import ConfigService
from ..sync import SyncEngine
from ..todoist import TodoistClient
from .output import error, success


def run_create(vault_root: Path, file_path: str, line_number: int) -> int:
    """Create a Todoist task from one line of a vault document.

    Args:
        vault_root: Path to the vault containing .vaultsync.yml
        file_path: Vault-relative document path
        line_number: 1-based line number, as shown by editors

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if line_number < 1:
        error("Line numbers start at 1")
        return 1

    config_service = ConfigService(vault_root)
    config_service.get_config()
    if config_service.has_config_error:
        error(config_service.config_error or "Invalid configuration")
        return 1

    store = FilesystemDocumentStore(vault_root)
    try:
        text = asyncio.run(store.read(file_path))
    except (OSError, ValueError) as e:
        error(f"Cannot read {file_path}: {e}")
        return 1

    lines = text.split("\n")
    if line_number > len(lines):
        error(f"{file_path} has only {len(lines)} line(s)")
        return 1

    result = asyncio.run(
        _create(store, config_service, file_path, line_number - 1, lines[line_number - 1])
    )
    config_service.save()

    if result.success:
        success(result.message)
        return 0
    error(result.message)
    return 1


async def _create(
    store: FilesystemDocumentStore,
    config_service: ConfigService,
    file_path: str,
    line_index: int,
    raw_line: str,
) -> LineTaskResult:
    config = config_service.get_config()
    async with TodoistClient.from_environment(config.api_token) as client:
        engine = SyncEngine(store, client, config)
        return await engine.create_from_line(
            config_service.get_state(), file_path, line_index, raw_line
        )
