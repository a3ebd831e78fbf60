"""Embedding and rerank provider adapters."""

from ragcore.boundary.providers.callable_reranker import CallableReranker
from ragcore.boundary.providers.langchain_embeddings import LangChainEmbeddingProvider

__all__ = ["CallableReranker", "LangChainEmbeddingProvider"]
