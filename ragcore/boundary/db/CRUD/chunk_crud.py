"""
Chunk CRUD operations.

Chunk and embedding rows are always written and removed together.
Deletes are explicit (embeddings first, then chunks) so they do not
depend on the database enforcing ON DELETE CASCADE.

Dependencies: sqlalchemy, ragcore.boundary.db.models
System role: Chunk and vector persistence operations
"""

from typing import Any, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ragcore.boundary.db.CRUD.base_crud import BaseCRUD, starts_with
from ragcore.boundary.db.models.chunk_model import ChunkEmbeddingModel, ChunkModel


class ChunkCRUD(BaseCRUD[ChunkModel]):
    """
    CRUD operations for ChunkModel and its ChunkEmbeddingModel.
    """

    def __init__(self) -> None:
        """Initialize ChunkCRUD with ChunkModel."""
        super().__init__(ChunkModel)
        self.embeddings = BaseCRUD(ChunkEmbeddingModel)

    async def insert_with_embeddings(
        self,
        session: AsyncSession,
        chunk_rows: list[dict[str, Any]],
        embedding_rows: list[dict[str, Any]],
    ) -> int:
        """
        Insert chunk rows followed by their embedding rows.

        Args:
            session: Async database session inside an open transaction
            chunk_rows: ChunkModel attribute dictionaries
            embedding_rows: ChunkEmbeddingModel attribute dictionaries

        Returns:
            Number of chunks inserted
        """
        inserted = await self.bulk_insert(session, chunk_rows)
        await self.embeddings.bulk_insert(session, embedding_rows)
        return inserted

    async def delete_by_document_ids(self, session: AsyncSession, document_ids: Sequence[str]) -> int:
        """
        Delete every chunk, and its embedding, belonging to the given documents.

        Args:
            session: Async database session inside an open transaction
            document_ids: Canonical document ids

        Returns:
            Number of chunks removed
        """
        if not document_ids:
            return 0
        chunk_ids = select(ChunkModel.id).where(ChunkModel.document_id.in_(document_ids))
        await session.execute(
            delete(ChunkEmbeddingModel).where(ChunkEmbeddingModel.chunk_id.in_(chunk_ids))
        )
        result = await session.execute(
            delete(ChunkModel).where(ChunkModel.document_id.in_(document_ids))
        )
        return result.rowcount

    async def get_stored_dimension(self, session: AsyncSession) -> int | None:
        """
        Return the dimension of any stored embedding, or None when empty.

        Args:
            session: Async database session

        Returns:
            Embedding dimension shared by the store, None if nothing is stored
        """
        stmt = select(ChunkEmbeddingModel.embedding_dimension).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_document_id(self, session: AsyncSession, document_id: str) -> Sequence[ChunkModel]:
        """Return a document's chunks ordered by index."""
        stmt = (
            select(ChunkModel)
            .where(ChunkModel.document_id == document_id)
            .order_by(ChunkModel.idx)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_candidates(
        self,
        session: AsyncSession,
        source_id_prefix: str | None = None,
    ) -> Sequence[tuple[str, list[float]]]:
        """
        Load (chunk_id, embedding) pairs, optionally scoped by source id prefix.

        Rows come back in insertion order (creation time, then document and
        index) so equal distances rank deterministically. Every vector in
        scope is loaded and decoded, so query cost grows linearly with the
        number of stored chunks.

        Args:
            session: Async database session
            source_id_prefix: Optional source id prefix filter

        Returns:
            Sequence of (chunk_id, embedding) pairs
        """
        stmt = select(ChunkModel.id, ChunkEmbeddingModel.embedding).join(
            ChunkEmbeddingModel,
            ChunkEmbeddingModel.chunk_id == ChunkModel.id,
        )
        if source_id_prefix:
            stmt = stmt.where(starts_with(ChunkModel.source_id, source_id_prefix))
        stmt = stmt.order_by(ChunkModel.created_at, ChunkModel.document_id, ChunkModel.idx)
        result = await session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def get_by_ids(self, session: AsyncSession, chunk_ids: Sequence[str]) -> dict[str, ChunkModel]:
        """Return chunks keyed by id; unknown ids are left out."""
        if not chunk_ids:
            return {}
        result = await session.execute(select(ChunkModel).where(ChunkModel.id.in_(chunk_ids)))
        return {row.id: row for row in result.scalars().all()}

    async def get_embeddings(
        self,
        session: AsyncSession,
        chunk_ids: Sequence[str],
    ) -> Sequence[tuple[str, list[float]]]:
        """Return (chunk_id, embedding) pairs for the given chunks."""
        if not chunk_ids:
            return []
        stmt = select(ChunkEmbeddingModel.chunk_id, ChunkEmbeddingModel.embedding).where(
            ChunkEmbeddingModel.chunk_id.in_(chunk_ids)
        )
        result = await session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]


chunk_crud = ChunkCRUD()
