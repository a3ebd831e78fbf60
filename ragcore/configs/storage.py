"""
Storage and asset processing configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Persistence policy and asset handling configuration
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """What the vector store persists and how it measures distance."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAGCORE_STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_chunk_content: bool = Field(
        default=True,
        description="Persist chunk text (disable to keep only embeddings)",
    )
    store_document_content: bool = Field(
        default=True,
        description="Persist full document text on the document row",
    )
    distance_metric: Literal["cosine", "euclidean"] = Field(
        default="cosine",
        description="Vector distance used for ranking (ascending)",
    )


class AssetSettings(BaseSettings):
    """Asset extraction policy."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAGCORE_ASSETS_",
        case_sensitive=False,
        extra="ignore",
    )

    on_unsupported_asset: Literal["skip", "fail"] = Field(
        default="skip",
        description="Behaviour when no extractor supports an asset",
    )
    on_error: Literal["skip", "fail"] = Field(
        default="skip",
        description="Behaviour when an extractor raises",
    )
    max_bytes: int = Field(
        default=15 * 1024 * 1024,
        ge=1,
        description="Largest inline asset payload accepted",
    )
