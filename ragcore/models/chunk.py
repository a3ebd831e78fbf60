"""
Chunk domain models.

Chunker output, persisted chunks and scored projections returned by
retrieval and reranking.

Dependencies: pydantic
System role: Chunk data contracts shared by chunker, store and rerank engine
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ChunkingOptions(BaseModel):
    """Options for a single chunking call."""

    chunk_size: int = Field(default=512, description="Maximum tokens per chunk")
    chunk_overlap: int = Field(default=50, description="Tokens shared by consecutive forced windows")
    min_chunk_size: int = Field(default=24, description="Merged chunks below this are folded into the previous chunk")
    method: Literal["recursive", "token"] = Field(default="recursive", description="Chunking strategy")
    language: str | None = Field(default=None, description="Source language for code-aware splitting")


class ChunkText(BaseModel):
    """A chunk produced by the chunker, before identity is assigned."""

    index: int = Field(description="Zero-based position within the document")
    content: str = Field(description="Exact text span of the chunk")
    token_count: int = Field(description="Number of tokens in content")
    start: int = Field(default=0, description="Character offset of the chunk start in the input")
    end: int = Field(default=0, description="Character offset one past the chunk end")


class Chunk(BaseModel):
    """A chunk bound to a document, optionally carrying its embedding."""

    id: str
    document_id: str
    source_id: str
    index: int
    content: str = ""
    token_count: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float] | None = None


class ScoredChunk(Chunk):
    """A retrieved chunk annotated with its vector distance."""

    score: float = Field(description="Distance to the query, lower is closer")


class RerankedChunk(ScoredChunk):
    """A rerank output item keeping the retrieval score."""

    rerank_score: float | None = Field(default=None, description="Score assigned by the reranker, if any")
