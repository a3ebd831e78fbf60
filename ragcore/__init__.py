"""
ragcore: retrieval-augmented generation context engine.

Turns documents into token-bounded chunks with embeddings, stores them
transactionally, and serves similarity retrieval with optional reranking.
"""

from ragcore.boundary.extractors import TextFileExtractor
from ragcore.boundary.providers import CallableReranker, LangChainEmbeddingProvider
from ragcore.boundary.vdb import SqlVectorStore, VectorStore
from ragcore.configs import Settings, load_settings
from ragcore.core.chunker import RecursiveChunker
from ragcore.core.connectors import run_connector_stream
from ragcore.core.context_engine import ContextEngine
from ragcore.core.tokenizer import TiktokenTokenizer, WhitespaceTokenizer
from ragcore.dependencies import create_context_engine
from ragcore.models import (
    AssetInput,
    ChunkingOptions,
    DeleteInput,
    IngestInput,
    QueryScope,
    RerankerResult,
)

__version__ = "0.1.0"

__all__ = [
    "ContextEngine",
    "create_context_engine",
    "Settings",
    "load_settings",
    "SqlVectorStore",
    "VectorStore",
    "RecursiveChunker",
    "TiktokenTokenizer",
    "WhitespaceTokenizer",
    "LangChainEmbeddingProvider",
    "CallableReranker",
    "TextFileExtractor",
    "run_connector_stream",
    "AssetInput",
    "ChunkingOptions",
    "DeleteInput",
    "IngestInput",
    "QueryScope",
    "RerankerResult",
]
