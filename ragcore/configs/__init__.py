"""
Configuration management module.

Provides type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from ragcore.configs.chunking import ChunkingSettings
from ragcore.configs.database import DatabaseSettings
from ragcore.configs.embedding import EmbeddingSettings
from ragcore.configs.retrieval import RerankSettings, RetrievalSettings
from ragcore.configs.settings import Settings, load_settings
from ragcore.configs.storage import AssetSettings, StorageSettings

__all__ = [
    "Settings",
    "load_settings",
    "DatabaseSettings",
    "ChunkingSettings",
    "EmbeddingSettings",
    "RetrievalSettings",
    "RerankSettings",
    "StorageSettings",
    "AssetSettings",
]
