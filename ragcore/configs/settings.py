"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Settings are built once at process start and passed into constructors.

Dependencies: All config modules
System role: Central configuration aggregator
"""

from pydantic import Field

from ragcore.configs.base import BaseSettings
from ragcore.configs.chunking import ChunkingSettings
from ragcore.configs.database import DatabaseSettings
from ragcore.configs.embedding import EmbeddingSettings
from ragcore.configs.retrieval import RerankSettings, RetrievalSettings
from ragcore.configs.storage import AssetSettings, StorageSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    rerank: RerankSettings = Field(default_factory=RerankSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    assets: AssetSettings = Field(default_factory=AssetSettings)


def load_settings(**overrides) -> Settings:
    """
    Build application settings from the environment.

    Call once at process start and pass the result to the engine factory.

    Args:
        **overrides: Section instances or field values that replace
            environment-derived values

    Returns:
        Settings: Application settings instance

    Usage:
        from ragcore.configs import load_settings
        settings = load_settings(database=DatabaseSettings(url="sqlite+aiosqlite://"))
    """
    return Settings(**overrides)
