"""
Retrieval and rerank configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Query path configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalSettings(BaseSettings):
    """Retrieval defaults and rerank over-fetch policy."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAGCORE_RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    top_k: int = Field(default=8, ge=1, description="Number of results to retrieve")
    rerank_pool_multiplier: int = Field(
        default=3,
        ge=1,
        description="Candidates fetched per requested result when a rerank stage follows",
    )
    rerank_pool_min: int = Field(
        default=30,
        ge=1,
        description="Minimum candidate pool when a rerank stage follows",
    )


class RerankSettings(BaseSettings):
    """Reranker call configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAGCORE_RERANK_",
        case_sensitive=False,
        extra="ignore",
    )

    timeout_ms: int = Field(default=30_000, ge=1, description="Timeout per reranker call in milliseconds")
