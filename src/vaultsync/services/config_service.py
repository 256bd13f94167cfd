"""Configuration service for loading and saving .vaultsync.yml.

The file is the single persisted blob: user settings at the top level and
the sync state under the ``sync_state`` key.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..models import SyncState, VaultSyncConfig

logger = logging.getLogger(__name__)

STATE_KEY = "sync_state"


class ConfigService:
    """Service for loading, caching and saving settings and sync state."""

    CONFIG_FILE = ".vaultsync.yml"

    def __init__(self, vault_root: Path) -> None:
        """Initialize the config service.

        Args:
            vault_root: Path to the vault root directory
        """
        self.vault_root = vault_root
        self._config: VaultSyncConfig | None = None
        self._state: SyncState | None = None
        self._config_error: str | None = None

    @property
    def config_path(self) -> Path:
        """Path to the configuration file."""
        return self.vault_root / self.CONFIG_FILE

    @property
    def has_config_error(self) -> bool:
        """Check if there was an error loading config."""
        return self._config_error is not None

    @property
    def config_error(self) -> str | None:
        """Get the config error message if any."""
        return self._config_error

    def get_config(self) -> VaultSyncConfig:
        """Get settings, loading from file if not cached."""
        if self._config is None:
            self._load()
        assert self._config is not None
        return self._config

    def get_state(self) -> SyncState:
        """Get the sync state, loading from file if not cached.

        The returned object is shared: the sync engine mutates it in place
        and ``save()`` persists it.
        """
        if self._state is None:
            self._load()
        assert self._state is not None
        return self._state

    def update_settings(self, **changes: Any) -> VaultSyncConfig:
        """Validate and persist a settings change.

        Args:
            **changes: Field values, e.g. ``sync_marker="#todo"``

        Returns:
            The new configuration

        Raises:
            ValueError: If a field is unknown or a value fails validation
        """
        current = self.get_config()
        unknown = set(changes) - set(VaultSyncConfig.model_fields)
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        data = current.model_dump()
        data.update(changes)
        try:
            updated = VaultSyncConfig(**data)
        except ValidationError as e:
            raise ValueError(str(e)) from e

        self._config = updated
        self.save()
        logger.info("Updated settings: %s", ", ".join(sorted(changes)))
        return updated

    def save(self) -> None:
        """Write settings and sync state back to the configuration file."""
        data: dict[str, Any] = self.get_config().model_dump(mode="json")
        data[STATE_KEY] = self.get_state().model_dump(mode="json")

        self.vault_root.mkdir(parents=True, exist_ok=True)
        with self.config_path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        logger.debug("Saved %s", self.config_path)

    def reload(self) -> None:
        """Clear cached configuration, forcing reload on next access."""
        self._config = None
        self._state = None
        self._config_error = None

    def _load(self) -> None:
        """Load configuration and state from file, or fall back to defaults."""
        self._config_error = None
        self._config = VaultSyncConfig.default()
        self._state = SyncState()

        if not self.config_path.exists():
            logger.debug("No %s found, using defaults", self.CONFIG_FILE)
            return

        try:
            with self.config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self._config_error = f"Invalid YAML in {self.CONFIG_FILE}: {e}"
            logger.warning(self._config_error)
            return
        except OSError as e:
            self._config_error = f"Cannot read {self.CONFIG_FILE}: {e}"
            logger.warning(self._config_error)
            return

        if data is None:
            self._config_error = f"{self.CONFIG_FILE} is empty"
            logger.warning(self._config_error)
            return
        if not isinstance(data, dict):
            self._config_error = f"{self.CONFIG_FILE} must contain a mapping"
            logger.warning(self._config_error)
            return

        state_data = data.pop(STATE_KEY, None) or {}

        try:
            self._config = VaultSyncConfig(**data)
        except ValidationError as e:
            self._config_error = f"Error loading {self.CONFIG_FILE}: {e}"
            logger.warning(self._config_error)

        try:
            self._state = SyncState.model_validate(state_data)
        except ValidationError as e:
            self._config_error = f"Invalid sync state in {self.CONFIG_FILE}: {e}"
            logger.warning(self._config_error)

        logger.info(
            "Loaded %s with %d synced task(s)", self.CONFIG_FILE, self._state.task_count
        )
