"""
Domain models.

Pydantic contracts shared across the engine.
"""

from ragcore.models.assets import (
    AssetInput,
    ExtractedText,
    ExtractionContext,
    ExtractionResult,
)
from ragcore.models.chunk import (
    Chunk,
    ChunkingOptions,
    ChunkText,
    RerankedChunk,
    ScoredChunk,
)
from ragcore.models.connectors import (
    CheckpointEvent,
    ConnectorEvent,
    ConnectorRunResult,
    DeleteEvent,
    ProgressEvent,
    UpsertEvent,
    WarningEvent,
)
from ragcore.models.document import DeleteInput, QueryScope, UpsertResult
from ragcore.models.ingest import (
    IngestDurations,
    IngestInput,
    IngestResult,
    IngestWarning,
)
from ragcore.models.rerank import (
    RerankDurations,
    RerankerResult,
    RerankMeta,
    RerankResult,
)
from ragcore.models.retrieval import RetrievalDurations, RetrieveResult

__all__ = [
    "AssetInput",
    "ExtractedText",
    "ExtractionContext",
    "ExtractionResult",
    "Chunk",
    "ChunkingOptions",
    "ChunkText",
    "ScoredChunk",
    "RerankedChunk",
    "CheckpointEvent",
    "ConnectorEvent",
    "ConnectorRunResult",
    "DeleteEvent",
    "ProgressEvent",
    "UpsertEvent",
    "WarningEvent",
    "DeleteInput",
    "QueryScope",
    "UpsertResult",
    "IngestDurations",
    "IngestInput",
    "IngestResult",
    "IngestWarning",
    "RerankDurations",
    "RerankerResult",
    "RerankMeta",
    "RerankResult",
    "RetrievalDurations",
    "RetrieveResult",
]
