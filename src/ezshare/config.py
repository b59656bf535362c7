# Settings for the EzShare client, read from EZSHARE_* environment variables.
# Created: 2026-10-05

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client configuration.

    Only the composition layer (session, CLI) reads these; the controllers
    receive everything they need explicitly.
    """

    model_config = SettingsConfigDict(env_prefix="EZSHARE_", extra="ignore")

    server_url: str = Field(default="http://localhost:8080", description="EzShare server base URL")
    request_timeout: float | None = Field(
        default=None, description="Transport timeout in seconds; no timeout when unset"
    )
    upload_field_name: str = "files"
    upload_chunk_size: int = Field(default=64 * 1024, gt=0)
    fence_stale_listings: bool = Field(
        default=True,
        description="Drop listing responses superseded by a newer request",
    )
    download_dir: Path = Path(".")
    verify_tls: bool = True
    log_level: str = "INFO"

    @field_validator("server_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get or create the process-wide settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings (for testing)."""
    global _settings_instance
    _settings_instance = None
