"""Configuration model for .vaultsync.yml."""

from pydantic import BaseModel, Field, field_validator

from .sync import ConflictPolicy

DEFAULT_SYNC_MARKER = "#todoist"


def normalize_marker(value: str | None) -> str:
    """Normalize a sync marker so it always starts with '#'.

    Examples:
        >>> normalize_marker("todoist")
        '#todoist'
        >>> normalize_marker("  ")
        '#todoist'
    """
    value = (value or "").strip()
    if not value:
        return DEFAULT_SYNC_MARKER
    if not value.startswith("#"):
        value = f"#{value}"
    return value


class VaultSyncConfig(BaseModel):
    """User settings for the sync, stored next to the sync state."""

    api_token: str = Field(default="", description="Todoist API token")
    sync_marker: str = Field(
        default=DEFAULT_SYNC_MARKER,
        description="Tag that marks checklist lines for syncing",
    )
    default_project_id: str = Field(
        default="",
        description="Todoist project for new tasks (empty = Inbox)",
    )
    sync_interval_minutes: int = Field(
        default=5,
        ge=0,
        description="Minutes between automatic syncs (0 disables)",
    )
    conflict_policy: ConflictPolicy = Field(default=ConflictPolicy.REMOTE_WINS)

    @field_validator("sync_marker", mode="before")
    @classmethod
    def validate_marker(cls, v: str | None) -> str:
        """Ensure the marker is non-empty and '#'-prefixed."""
        return normalize_marker(v)

    @field_validator("api_token", "default_project_id", mode="before")
    @classmethod
    def strip_optional(cls, v: str | None) -> str:
        """Treat missing values as empty strings."""
        return (v or "").strip()

    @classmethod
    def default(cls) -> "VaultSyncConfig":
        """Create the default configuration."""
        return cls()

    @property
    def has_token(self) -> bool:
        """Whether an API token is configured."""
        return bool(self.api_token)

    @property
    def project_id(self) -> str | None:
        """Default project ID, or None for the Inbox."""
        return self.default_project_id or None
