"""
Embedding configuration settings.

Provider identification plus the batching and timeout policy used by the
embedding gateway.

Dependencies: pydantic, pydantic_settings
System role: Embedding gateway configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """Embedding provider and batching configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAGCORE_EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(default="langchain", description="Embedding provider identifier")
    model: str | None = Field(default=None, description="Embedding model name, if the provider needs one")
    timeout_ms: int = Field(default=30_000, ge=1, description="Timeout per provider call in milliseconds")
    batch_size: int = Field(default=32, ge=1, description="Texts per embed_many call")
    concurrency: int = Field(default=4, ge=1, description="Maximum provider calls in flight per ingest")
