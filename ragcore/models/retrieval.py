"""
Retrieval domain models.

Dependencies: pydantic, ragcore.models.chunk
System role: Retrieval result contract
"""

from pydantic import BaseModel, Field

from ragcore.models.chunk import ScoredChunk


class RetrievalDurations(BaseModel):
    """Timing of retrieval phases in milliseconds."""

    embedding_ms: float = 0.0
    retrieval_ms: float = 0.0
    total_ms: float = 0.0


class RetrieveResult(BaseModel):
    """Chunks closest to a query, nearest first."""

    chunks: list[ScoredChunk] = Field(default_factory=list)
    embedding_model: str
    requested_count: int = Field(description="Number of candidates asked from the store")
    durations: RetrievalDurations = Field(default_factory=RetrievalDurations)
