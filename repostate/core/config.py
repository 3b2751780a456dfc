"""Unified configuration via pydantic-settings."""

from pathlib import Path

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from repostate.exceptions import ConfigError


class RepoStateConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REPOSTATE_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Git backend
    git_binary: str = "git"
    git_timeout_seconds: int = 30

    # Snapshot limits
    max_commits_ahead_behind: int = 50
    log_max_entries: int = 100
    short_hash_length: int = 7

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None
    log_max_bytes: int = 10_485_760
    log_backup_count: int = 5

    @field_validator(
        "git_timeout_seconds",
        "max_commits_ahead_behind",
        "log_max_entries",
        "short_hash_length",
    )
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


def load_config() -> RepoStateConfig:
    """Read configuration from the environment and ``.env``."""
    try:
        return RepoStateConfig()
    except ValidationError as e:
        raise ConfigError(str(e)) from e
