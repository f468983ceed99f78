"""Settings for github-label-sync.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

To avoid collisions with other tools that may also use `GITHUB_TOKEN`, this
project uses a dedicated token variable: `LABEL_SYNC_GITHUB_TOKEN`.
"""

from __future__ import annotations

import logging

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LabelSyncSettings(BaseSettings):
    """Settings for the label sync CLI.

    Environment variables:
    - LABEL_SYNC_GITHUB_TOKEN
    - GITHUB_BASE_URL          (optional)
    - LABEL_SYNC_VERBOSE       (optional)
    - LABEL_SYNC_EXECUTE       (optional, apply without confirmation)
    - LOG_LEVEL                (optional)
    - LABEL_SYNC_TIMEOUT       (optional)
    - LABEL_SYNC_MAX_WORKERS   (optional)
    - LABEL_SYNC_MAX_RETRIES   (optional)

    Notes:
        CLI flags are passed as keyword arguments and take precedence over the
        environment, e.g. `LabelSyncSettings(github_token="...")`.
    """

    github_token: str = Field(
        default="",
        validation_alias="LABEL_SYNC_GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    verbose: bool = Field(
        default=False,
        validation_alias="LABEL_SYNC_VERBOSE",
        description="Log at DEBUG level and print skipped changes",
    )
    execute: bool = Field(
        default=False,
        validation_alias="LABEL_SYNC_EXECUTE",
        description="Apply planned changes without asking for confirmation",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        validation_alias="LABEL_SYNC_TIMEOUT",
        description="Timeout in seconds for each GitHub API call",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        validation_alias="LABEL_SYNC_MAX_WORKERS",
        description="Repositories processed concurrently when applying changes",
    )
    max_retries: int = Field(
        default=0,
        ge=0,
        validation_alias="LABEL_SYNC_MAX_RETRIES",
        description="Retries for rate-limited calls (0 surfaces rate limits as failures)",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level

    @model_validator(mode="after")
    def _require_github_auth(self) -> LabelSyncSettings:
        if not self.github_token.strip():
            raise ValueError("LABEL_SYNC_GITHUB_TOKEN is required")
        return self

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level.upper()
