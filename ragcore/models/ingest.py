"""
Ingest domain models.

Dependencies: pydantic, ragcore.models.assets, ragcore.models.chunk
System role: Ingest input and result contracts
"""

from typing import Any

from pydantic import BaseModel, Field

from ragcore.models.assets import AssetInput
from ragcore.models.chunk import ChunkingOptions


class IngestInput(BaseModel):
    """A source document to (re)index."""

    source_id: str = Field(description="Caller-supplied durable identity")
    content: str = Field(default="", description="Full document text")
    metadata: dict[str, Any] = Field(default_factory=dict)
    document_id: str | None = Field(default=None, description="Proposed id, honoured only on first ingest")
    assets: list[AssetInput] = Field(default_factory=list)
    chunking: ChunkingOptions | None = Field(default=None, description="Per-call chunking overrides")


class IngestWarning(BaseModel):
    """Non-fatal condition met while ingesting."""

    code: str
    message: str
    asset_id: str | None = None


class IngestDurations(BaseModel):
    """Timing of ingest phases in milliseconds."""

    total_ms: float = 0.0
    chunking_ms: float = 0.0
    embedding_ms: float = 0.0
    storage_ms: float = 0.0


class IngestResult(BaseModel):
    """Outcome of an ingest call."""

    document_id: str
    source_id: str
    chunk_count: int
    embedding_model: str
    warnings: list[IngestWarning] = Field(default_factory=list)
    durations: IngestDurations = Field(default_factory=IngestDurations)
