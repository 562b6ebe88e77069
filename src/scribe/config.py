"""Configuration management for scribe."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Scribe config directory
SCRIBE_DIR = Path.home() / ".scribe"
SCRIBE_ENV_FILE = SCRIBE_DIR / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SCRIBE_",
        # Later files override earlier ones
        env_file=(str(SCRIBE_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Write watchdog settings
    poll_interval_ms: int = Field(
        default=100,
        gt=0,
        description="Interval between sink readiness checks in milliseconds",
    )
    max_wait_ms: int = Field(
        default=4000,
        gt=0,
        description="Abort a write whose sink stays busy longer than this (ms)",
    )

    # Entry store settings
    storage_path: Path | None = Field(
        default=None,
        description="Path for local key/value storage (default: ~/.scribe/storage.json)",
    )
    accepted_extensions: list[str] = Field(
        default_factory=lambda: ["json"],
        description="File extensions offered when choosing a file to open",
    )
    suggested_name: str = Field(
        default="Bookmarks.html",
        description="Suggested file name when saving",
    )

    def get_storage_path(self) -> Path:
        """Get the storage path, using default if not set."""
        if self.storage_path:
            return self.storage_path
        return SCRIBE_DIR / "storage.json"


# Global settings instance
settings = Settings()
