"""
Relational persistence for documents, chunks and embeddings.
"""

from ragcore.boundary.db.base import Base
from ragcore.boundary.db.connection import (
    get_async_engine,
    get_async_session_factory,
    init_schema,
    shares_one_connection,
)

__all__ = ["Base", "get_async_engine", "get_async_session_factory", "init_schema", "shares_one_connection"]
