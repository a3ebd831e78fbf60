"""Vector store contract and implementations."""

from ragcore.boundary.vdb.sql_vector_store import SqlVectorStore
from ragcore.boundary.vdb.vector_store import VectorStore

__all__ = ["VectorStore", "SqlVectorStore"]
