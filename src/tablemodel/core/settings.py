"""Environment-driven settings for tablemodel.

Model descriptors name a database by *alias* (``"db1"``).  Aliases resolve to
SQLAlchemy URLs through :class:`TableModelSettings.databases`, which is read
from the environment so the same model code runs against SQLite in tests and
PostgreSQL in production.

Features:
    - **env_prefix:** ``TABLEMODEL_`` namespacing
    - **.env file support:** Automatic loading via pydantic-settings
    - **JSON mapping:** ``TABLEMODEL_DATABASES='{"db1": "sqlite:///app.db"}'``
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> settings = get_settings()
    >>> settings.databases.get("db1")

Tags:
    settings, configuration, pydantic, environment, tablemodel
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TableModelSettings(BaseSettings):
    """Settings shared by every tablemodel consumer.

    Fields
    ──────
    databases    : Alias → SQLAlchemy URL map used by DatabaseManager
    echo_sql     : Log every statement SQLAlchemy emits
    log_level    : Structlog log level
    json_logs    : Force JSON (True) / console (False) output; None auto-detects
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLEMODEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Databases ────────────────────────────────────────────────
    databases: dict[str, str] = Field(
        default_factory=dict,
        description="Database alias to SQLAlchemy URL",
    )
    echo_sql: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None


@lru_cache(maxsize=1)
def get_settings() -> TableModelSettings:
    """Return the process-wide settings (cached; ``get_settings.cache_clear()`` resets)."""
    return TableModelSettings()


__all__ = [
    "TableModelSettings",
    "get_settings",
]
