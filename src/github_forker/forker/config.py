"""Configuration for the forker.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

To avoid collisions with other tools that may also use `GITHUB_TOKEN`, this
project uses a dedicated token variable: `GITHUB_FORKER_TOKEN`.
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ForkerSettings(BaseSettings):
    """Settings for the forker.

    Environment variables:
    - GITHUB_FORKER_TOKEN
    - GITHUB_BASE_URL                   (optional)
    - GITHUB_WEB_URL                    (optional)
    - LOG_LEVEL                         (optional)
    - FORKER_RENAME_DELAY_SECONDS       (optional)
    - FORKER_PROPAGATION_DELAY_SECONDS  (optional)
    - FORKER_ISSUE_PACING_SECONDS       (optional)
    - FORKER_ISSUE_PAGE_LIMIT           (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `ForkerSettings(_env_file=path_to_env)`.
    """

    # Empty default; the validator below enforces that a token is provided.
    github_token: str = Field(
        default="",
        validation_alias="GITHUB_FORKER_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    github_web_url: str = Field(
        default="https://github.com",
        validation_alias="GITHUB_WEB_URL",
        description="GitHub web URL used when printing repository links",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    rename_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        validation_alias="FORKER_RENAME_DELAY_SECONDS",
        description="Wait between creating a fork and renaming it",
    )
    fork_propagation_seconds: float = Field(
        default=2.0,
        ge=0.0,
        validation_alias="FORKER_PROPAGATION_DELAY_SECONDS",
        description="Wait after a fork is created before configuring it",
    )
    issue_pacing_seconds: float = Field(
        default=1.0,
        ge=0.0,
        validation_alias="FORKER_ISSUE_PACING_SECONDS",
        description="Pause after each copied issue to stay under rate limits",
    )
    issue_page_limit: int = Field(
        default=10,
        gt=0,
        validation_alias="FORKER_ISSUE_PAGE_LIMIT",
        description="Maximum number of 100-item pages fetched when listing issues",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> ForkerSettings:
        if not self.github_token.strip():
            raise ValueError("GITHUB_FORKER_TOKEN is required")
        return self

    def repository_web_url(self, full_name: str) -> str:
        """Browser URL for a repository ("owner/repo")."""

        return f"{self.github_web_url.rstrip('/')}/{full_name.strip('/')}"
