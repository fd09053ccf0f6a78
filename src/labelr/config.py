"""Configuration for labelr.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Command-line flags take precedence over both; see `resolve_value`.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

T = TypeVar("T")


class LabelrSettings(BaseSettings):
    """Settings for labelr.

    Environment variables:
    - GITHUB_TOKEN
    - GITHUB_BASE_URL      (optional)
    - GITHUB_USER          (optional)
    - GITHUB_ORGANIZATION  (optional)
    - GITHUB_REPOSITORY    (optional)
    - LOG_LEVEL            (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `LabelrSettings(_env_file=path_to_env)`.
    """

    # The token is not validated here: it may still be supplied with --token.
    github_token: str = Field(
        default="",
        validation_alias="GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    github_user: str | None = Field(
        default=None,
        validation_alias="GITHUB_USER",
        description="Owner used when it cannot be inferred from the git remote",
    )
    github_organization: str | None = Field(
        default=None,
        validation_alias="GITHUB_ORGANIZATION",
        description="Organization used when no owner can be determined",
    )
    github_repository: Path | None = Field(
        default=None,
        validation_alias="GITHUB_REPOSITORY",
        description="Local repository directory",
    )

    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level when no -v flag is given",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    def env_lookup(self, name: str) -> str | None:
        """Look up a setting by its environment variable name."""

        values = {
            "GITHUB_TOKEN": self.github_token or None,
            "GITHUB_BASE_URL": self.github_base_url,
            "GITHUB_USER": self.github_user,
            "GITHUB_ORGANIZATION": self.github_organization,
            "GITHUB_REPOSITORY": (
                str(self.github_repository) if self.github_repository is not None else None
            ),
            "LOG_LEVEL": self.log_level,
        }
        return values.get(name)


def _is_present(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def resolve_value(
    explicit: T | None,
    env_lookup: Callable[[], T | None] | None = None,
    fallback: T | None = None,
) -> T | None:
    """Return the first present value of explicit, env lookup, fallback.

    Empty strings count as absent.
    """

    if _is_present(explicit):
        return explicit
    if env_lookup is not None:
        from_env = env_lookup()
        if _is_present(from_env):
            return from_env
    if _is_present(fallback):
        return fallback
    return None
