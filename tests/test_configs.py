"""
Test suite for configuration settings.

Tests environment variable mapping per section, validation and the
settings factory.

System role: Verification of the configuration layer
"""

import pydantic
import pytest

from ragcore.configs import (
    ChunkingSettings,
    DatabaseSettings,
    EmbeddingSettings,
    RetrievalSettings,
    Settings,
    StorageSettings,
    load_settings,
)


class TestSectionSettings:
    """Test suite for individual settings sections."""

    def test_defaults_should_match_documented_values(self) -> None:
        # Act
        settings = Settings()

        # Assert
        assert settings.chunking.chunk_size == 512
        assert settings.chunking.chunk_overlap == 50
        assert settings.embedding.batch_size == 32
        assert settings.embedding.concurrency == 4
        assert settings.retrieval.top_k == 8
        assert settings.storage.store_chunk_content is True
        assert settings.assets.on_unsupported_asset == "skip"

    def test_sections_should_read_prefixed_environment(self, monkeypatch) -> None:
        # Arrange
        monkeypatch.setenv("RAGCORE_CHUNKING_CHUNK_SIZE", "128")
        monkeypatch.setenv("RAGCORE_EMBEDDING_CONCURRENCY", "8")
        monkeypatch.setenv("RAGCORE_RETRIEVAL_TOP_K", "3")
        monkeypatch.setenv("RAGCORE_STORAGE_STORE_CHUNK_CONTENT", "false")
        monkeypatch.setenv("RAGCORE_DB_URL", "postgresql+asyncpg://user:pw@db/rag")

        # Act
        settings = Settings()

        # Assert
        assert settings.chunking.chunk_size == 128
        assert settings.embedding.concurrency == 8
        assert settings.retrieval.top_k == 3
        assert settings.storage.store_chunk_content is False
        assert settings.database.url == "postgresql+asyncpg://user:pw@db/rag"
        assert settings.database.is_sqlite is False

    @pytest.mark.parametrize(
        "factory,field,value",
        [
            (ChunkingSettings, "chunk_size", 0),
            (ChunkingSettings, "chunk_overlap", -1),
            (EmbeddingSettings, "batch_size", 0),
            (RetrievalSettings, "top_k", 0),
            (StorageSettings, "distance_metric", "manhattan"),
        ],
    )
    def test_sections_should_reject_invalid_values(self, factory, field, value) -> None:
        with pytest.raises(pydantic.ValidationError):
            factory(**{field: value})


class TestLoadSettings:
    """Test suite for load_settings()."""

    def test_load_settings_should_apply_overrides(self) -> None:
        # Act
        settings = load_settings(
            database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
            log_level="DEBUG",
        )

        # Assert
        assert settings.database.is_sqlite is True
        assert settings.log_level == "DEBUG"
