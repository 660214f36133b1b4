"""Settings model for the sync service."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .error_codes import ErrorCode
from .exceptions import ConfigurationError, MissingCredentialError
from .vault.paths import normalize_path


class Config(BaseSettings):
    """Service configuration using pydantic-settings.

    Values come from init kwargs (config.yaml), environment variables and
    ``.env``, in that order of precedence.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Credentials / remote service
    raindrop_token: SecretStr = Field(
        default=SecretStr(""), description="Raindrop API token (bearer credential)"
    )
    api_base_url: str = Field(
        default="https://api.raindrop.io/rest/v1", description="Raindrop REST base URL"
    )
    per_page: int = Field(
        default=50, ge=1, le=50, description="Bookmarks requested per page"
    )
    request_interval: float = Field(
        default=0.1,
        ge=0.0,
        description="Minimum delay in seconds between consecutive API requests",
    )
    request_timeout: float = Field(
        default=30.0, gt=0.0, description="HTTP timeout in seconds"
    )

    # Local tree
    vault_path: Path = Field(default=Path(), description="Path to Obsidian vault")
    resource_folder: str = Field(
        default="Resources", description="Folder inside the vault that holds bookmarks"
    )
    status_note_name: str = Field(
        default="Raindrop Sync Status.md", description="File name of the status note"
    )

    # Behaviour
    auto_sync: bool = Field(default=False, description="Periodic sync enabled")
    sync_interval: int = Field(
        default=30, ge=1, description="Periodic sync interval in minutes"
    )
    use_collection_folders: bool = Field(
        default=True, description="Mirror the collection hierarchy as folders"
    )
    bidirectional_sync: bool = Field(
        default=True, description="Push locally edited notes back to Raindrop"
    )
    test_mode: bool = Field(default=False, description="Only sync a few bookmarks")
    test_mode_limit: int = Field(
        default=5, ge=1, description="Bookmark cap while test_mode is on"
    )
    edit_grace_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description=(
            "A document counts as locally edited only when its modification "
            "time is later than last_synced by more than this many seconds"
        ),
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_dir: Path = Field(default=Path("logs"), description="Directory for log files")

    @field_validator("vault_path", "log_dir", mode="before")
    @classmethod
    def parse_path(cls, v: Any) -> Path:
        """Convert strings to expanded Paths."""
        if v is None or v == "":
            return Path()
        if isinstance(v, str | Path):
            return Path(v).expanduser()
        msg = f"Path field must be string or Path, got {type(v).__name__}"
        raise ValueError(msg)

    @field_validator("resource_folder", mode="before")
    @classmethod
    def parse_resource_folder(cls, v: Any) -> str:
        """Normalise the folder to a vault-relative path."""
        if v is None:
            return ""
        folder = normalize_path(str(v))
        if ".." in folder.split("/"):
            msg = "resource_folder must stay inside the vault"
            raise ValueError(msg)
        return folder

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, v: Any) -> str:
        level = str(v or "INFO").upper()
        if level not in {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level

    @property
    def effective_limit(self) -> int | None:
        """Bookmark cap for the current run (None outside test mode)."""
        return self.test_mode_limit if self.test_mode else None

    @property
    def status_note_path(self) -> str:
        """Vault-relative path of the status note."""
        return normalize_path(f"{self.resource_folder}/{self.status_note_name}")

    def require_token(self) -> str:
        """Return the API token.

        Raises:
            MissingCredentialError: If no token is configured
        """
        token = self.raindrop_token.get_secret_value().strip()
        if not token:
            msg = "Raindrop API token is not set"
            raise MissingCredentialError(
                msg,
                suggestion=(
                    "Create a test token at https://app.raindrop.io/settings/integrations "
                    "and set RAINDROP_TOKEN or raindrop_token in config.yaml"
                ),
                error_code=ErrorCode.CFG_TOKEN_MISSING.value,
            )
        return token

    def validate_config(self) -> Config:
        """Validate values that depend on the filesystem."""
        vault = self.vault_path
        if vault != Path() and vault.exists() and not vault.is_dir():
            msg = f"vault_path is not a directory: {vault}"
            raise ConfigurationError(
                msg,
                suggestion="Point vault_path at the root folder of your Obsidian vault",
                error_code=ErrorCode.CFG_VALUE_INVALID.value,
            )
        return self

    def summary(self) -> dict[str, Any]:
        """Non-secret settings, for logs and the status note."""
        return {
            "resource_folder": self.resource_folder,
            "use_collection_folders": self.use_collection_folders,
            "bidirectional_sync": self.bidirectional_sync,
            "auto_sync": self.auto_sync,
            "sync_interval": self.sync_interval,
            "test_mode": self.test_mode,
            "test_mode_limit": self.test_mode_limit,
        }


__all__ = ["Config"]
