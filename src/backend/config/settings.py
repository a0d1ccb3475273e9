"""Centralized application settings loaded from environment variables.

All configuration is defined once here. Other modules should import
``get_settings()`` rather than calling ``os.getenv()`` directly.
"""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide configuration backed by environment variables.

    Field names are **lowercased** versions of the env-var names.
    ``pydantic-settings`` maps them automatically (case-insensitive).

    Example::

        settings = Settings()  # reads .env + real env
        url = settings.llm_api_url
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- LLM completion service --------------------------------------------

    llm_api_url: str = "https://api.githubcopilot.com/chat/completions"
    """Chat-completions endpoint that streams server-sent events."""

    llm_model: str = "gpt-4o"
    """Model requested for completions."""

    # -- GitHub platform ---------------------------------------------------

    github_api_url: str = "https://api.github.com"
    """Base URL used for the identity (``/user``) lookup."""

    public_keys_url: str = "https://api.github.com/meta/public_keys/copilot_api"
    """Endpoint listing the keys that sign inbound agent requests."""

    verify_signatures: bool = True
    """Reject requests whose signature cannot be verified."""

    # -- Database ----------------------------------------------------------

    database_path: str = ":memory:"
    """DuckDB database file, or ``:memory:`` for an in-process database."""

    result_format: Literal["table", "json"] = "table"
    """How query results are rendered back to the user."""

    # -- Operational -------------------------------------------------------

    http_timeout_seconds: float = 60.0
    """Transport timeout for outbound HTTP calls."""

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Return the process-wide ``Settings`` instance.

    Uses a module-level singleton so the ``.env`` file is read at most
    once per process.

    Returns:
        The global ``Settings`` object.
    """
    return _settings


_settings = Settings()
