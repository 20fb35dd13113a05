"""
Service settings, read from the environment and an optional `.env` file.

Storage and API options live in their own sub-settings with `STORAGE_` and
`API_` prefixes; top-level options have no prefix.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from partsledger import __version__


class StorageSettings(BaseSettings):
    """SQLite database location and connection pool."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "partsledger.db"
    pool_size: int = Field(default=5, ge=1)
    # How long a writer waits for the database lock before a conflict is reported
    busy_timeout: int = Field(default=30000, ge=0, description="milliseconds")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    """HTTP shell options."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    # Enables /docs and auto-reload
    debug: bool = False
    cors_origins: list[str] = ["*"]
    max_upload_size: int = Field(default=5 * 1024 * 1024, gt=0, description="bytes")

    # Set by the authenticating proxy in front of the service
    user_id_header: str = "X-User-Id"
    user_role_header: str = "X-User-Role"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Parts Ledger"
    app_version: str = __version__
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    # None picks JSON outside development
    json_logs: bool | None = None

    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)

    @property
    def use_json_logs(self) -> bool:
        if self.json_logs is None:
            return self.environment != "development"
        return self.json_logs


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()


def reset_settings() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
