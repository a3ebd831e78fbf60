"""
Base configuration settings.

Shared behaviour for every settings section: ``.env`` loading under
the ``RAGCORE_`` prefix, ignoring unknown variables.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Top-level settings read from ``RAGCORE_*`` variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAGCORE_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level applied by configure_logging (DEBUG, INFO, WARNING, ERROR)",
    )
