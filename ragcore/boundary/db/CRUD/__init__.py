"""CRUD singletons for the vector store tables."""

from ragcore.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from ragcore.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud

__all__ = ["ChunkCRUD", "DocumentCRUD", "chunk_crud", "document_crud"]
