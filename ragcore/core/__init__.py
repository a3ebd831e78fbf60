"""
Core context engine module.

Contains the chunker, embedding gateway, retrieval pipeline, rerank
engine, ingest orchestrator, connector runner and the exception
hierarchy.
"""

from ragcore.core.exceptions import (
    ConfigurationError,
    ConnectorAbortedError,
    EmbeddingError,
    MissingTextError,
    ProviderError,
    RagCoreException,
    RerankError,
    ValidationError,
    VectorStoreError,
)

__all__ = [
    "RagCoreException",
    "ValidationError",
    "ConfigurationError",
    "ProviderError",
    "EmbeddingError",
    "RerankError",
    "VectorStoreError",
    "MissingTextError",
    "ConnectorAbortedError",
]
