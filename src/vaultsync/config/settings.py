"""Application settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process-level settings, read from VAULTSYNC_* environment variables.

    User settings that travel with the vault live in .vaultsync.yml instead.
    """

    vault_root: Path = Field(
        default=Path(),
        description="Path to the markdown vault containing .vaultsync.yml",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    model_config = {
        "env_prefix": "VAULTSYNC_",
    }
