"""Config command: show or change user settings in .vaultsync.yml."""

from pathlib import Path
from typing import Any

from ..services import ConfigService
from .output import error, header, info, success


def run_config(vault_root: Path, changes: dict[str, Any]) -> int:
    """Apply setting changes, then print the effective settings.

    Args:
        vault_root: Path to the vault containing .vaultsync.yml
        changes: Field name to new value; empty just prints the settings

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    config_service = ConfigService(vault_root)
    config_service.get_config()
    if config_service.has_config_error:
        error(config_service.config_error or "Invalid configuration")
        info(f"Fix or remove {config_service.config_path} first")
        return 1

    if changes:
        try:
            config_service.update_settings(**changes)
        except ValueError as e:
            error(f"Invalid setting: {e}")
            return 1
        success(f"Saved {config_service.config_path}")

    config = config_service.get_config()
    header("Settings:")
    info(f"api_token: {'set' if config.has_token else 'not set'}")
    info(f"sync_marker: {config.sync_marker}")
    info(f"default_project_id: {config.default_project_id or '(Inbox)'}")
    info(f"sync_interval_minutes: {config.sync_interval_minutes}")
    info(f"conflict_policy: {config.conflict_policy.value}")
    info(f"synced tasks: {config_service.get_state().task_count}")
    return 0
