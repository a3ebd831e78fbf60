"""
Database configuration settings.

Manages the SQLAlchemy connection URL and pool parameters for the
vector store. Any async SQLAlchemy URL works; PostgreSQL (asyncpg) in
production and SQLite (aiosqlite) for local runs and tests.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for the vector store
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Async database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAGCORE_DB_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./ragcore.db",
        description="Async SQLAlchemy database URL",
    )

    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=20, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Connection pool timeout in seconds")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL targets SQLite."""
        return self.url.startswith("sqlite")
