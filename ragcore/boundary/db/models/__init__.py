"""ORM models for the vector store tables."""

from ragcore.boundary.db.models.chunk_model import ChunkEmbeddingModel, ChunkModel
from ragcore.boundary.db.models.document_model import DocumentModel

__all__ = ["DocumentModel", "ChunkModel", "ChunkEmbeddingModel"]
