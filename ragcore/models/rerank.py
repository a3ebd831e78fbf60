"""
Rerank domain models.

Dependencies: pydantic, ragcore.models.chunk
System role: Contracts between the rerank engine, rerankers and callers
"""

from pydantic import BaseModel, Field

from ragcore.models.chunk import RerankedChunk


class RerankerResult(BaseModel):
    """Raw output of a reranker: indices into the documents it was given."""

    order: list[int]
    scores: list[float] | None = None
    model: str | None = None


class RerankMeta(BaseModel):
    """Which reranker produced a result."""

    reranker_name: str | None = None
    model: str | None = None


class RerankDurations(BaseModel):
    """Timing of a rerank call in milliseconds."""

    rerank_ms: float = 0.0
    total_ms: float = 0.0


class RerankResult(BaseModel):
    """Reranked candidates.

    ``ranking`` holds every candidate (scored first, then skipped ones);
    ``chunks`` is its ``top_k`` prefix.
    """

    chunks: list[RerankedChunk] = Field(default_factory=list)
    ranking: list[RerankedChunk] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    meta: RerankMeta = Field(default_factory=RerankMeta)
    durations: RerankDurations = Field(default_factory=RerankDurations)
