"""
Chunking configuration settings.

Default chunking options applied to every ingest unless overridden
per call.

Dependencies: pydantic, pydantic_settings
System role: Chunker defaults
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkingSettings(BaseSettings):
    """Token-based chunking defaults."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAGCORE_CHUNKING_",
        case_sensitive=False,
        extra="ignore",
    )

    method: Literal["recursive", "token"] = Field(
        default="recursive",
        description="Chunking method: 'recursive' (unit merge) or 'token' (fixed windows)",
    )
    chunk_size: int = Field(default=512, ge=1, description="Maximum tokens per chunk")
    chunk_overlap: int = Field(default=50, ge=0, description="Overlap tokens between forced windows")
    min_chunk_size: int = Field(default=24, ge=0, description="Minimum tokens per merged chunk")
    encoding: str = Field(default="o200k_base", description="tiktoken encoding used for token counts")
