"""
SQL-backed transactional vector store.

Documents, chunks and embeddings live in three relational tables managed
through SQLAlchemy async sessions. Each upsert and delete runs in a
single transaction; similarity is computed with numpy over the scoped
candidate rows.

Dependencies: sqlalchemy, numpy, ragcore.boundary.db, ragcore.models
System role: Vector store implementation used by the context engine
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ragcore.boundary.db.CRUD.chunk_crud import chunk_crud
from ragcore.boundary.db.CRUD.document_crud import document_crud
from ragcore.boundary.db.connection import shares_one_connection
from ragcore.boundary.vdb.distance import DistanceMetric, compute_distances, rank_nearest
from ragcore.boundary.vdb.vector_store import VectorStore, validate_delete_input
from ragcore.core.exceptions import ValidationError, VectorStoreError
from ragcore.models.chunk import Chunk, ScoredChunk
from ragcore.models.document import DeleteInput, QueryScope, UpsertResult

logger = logging.getLogger(__name__)


class SqlVectorStore(VectorStore):
    """
    Vector store on a relational database.

    The documents table is keyed by a unique source_id, so re-ingesting a
    source keeps its canonical document id while its chunks are replaced
    wholesale.

    When all sessions share one connection (in-memory SQLite on StaticPool)
    their transactions are not isolated from each other, so the store runs
    one session at a time.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        distance_metric: DistanceMetric = "cosine",
        serialize_sessions: bool | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            session_factory: Factory producing sessions bound to the store database
            distance_metric: "cosine" (1 - cosine similarity) or "euclidean"
            serialize_sessions: Run one session at a time; detected from the
                bound engine when None
        """
        self.session_factory = session_factory
        self.distance_metric = distance_metric
        if serialize_sessions is None:
            serialize_sessions = shares_one_connection(session_factory.kw.get("bind"))
        self._session_lock = asyncio.Lock() if serialize_sessions else None

    @property
    def serializes_sessions(self) -> bool:
        return self._session_lock is not None

    @asynccontextmanager
    async def _session(self):
        if self._session_lock is None:
            async with self.session_factory() as session:
                yield session
            return
        async with self._session_lock, self.session_factory() as session:
            yield session

    async def upsert(
        self,
        chunks: list[Chunk],
        document_content: str = "",
        document_metadata: dict[str, Any] | None = None,
    ) -> UpsertResult:
        """
        Replace the chunk set of one source document in one transaction.

        Steps: upsert the document row by source_id (keeping an existing id),
        delete the document's current chunks and embeddings, check the
        embedding dimension against what remains stored, insert the new
        chunks and embeddings. Any failure rolls back every step.

        Args:
            chunks: Complete new chunk set for one source_id
            document_content: Document text to persist
            document_metadata: Document metadata, defaults to the first chunk's

        Returns:
            UpsertResult: Canonical document id and chunk count

        Raises:
            ValidationError: Empty batch, mixed source ids, missing or
                inconsistent embeddings
            VectorStoreError: Dimension conflict with stored embeddings or
                database failure
        """
        dimension = self._validate_upsert_batch(chunks)
        head = min(chunks, key=lambda c: c.index)
        metadata = document_metadata if document_metadata is not None else head.metadata

        start = time.perf_counter()
        try:
            async with self._session() as session, session.begin():
                document_id = await document_crud.upsert_by_source_id(
                    session,
                    source_id=head.source_id,
                    content=document_content,
                    metadata=metadata,
                    proposed_id=head.document_id or None,
                )

                removed = await chunk_crud.delete_by_document_ids(session, [document_id])

                stored_dimension = await chunk_crud.get_stored_dimension(session)
                if stored_dimension is not None and stored_dimension != dimension:
                    raise VectorStoreError(
                        message="Embedding dimension does not match stored embeddings",
                        operation="upsert",
                        details={
                            "source_id": head.source_id,
                            "stored_dimension": stored_dimension,
                            "dimension": dimension,
                        },
                    )

                chunk_rows = [
                    {
                        "id": chunk.id,
                        "document_id": document_id,
                        "source_id": chunk.source_id,
                        "idx": chunk.index,
                        "content": chunk.content,
                        "token_count": chunk.token_count,
                        "meta": chunk.metadata,
                    }
                    for chunk in chunks
                ]
                embedding_rows = [
                    {
                        "chunk_id": chunk.id,
                        "embedding": [float(v) for v in chunk.embedding],
                        "embedding_dimension": dimension,
                    }
                    for chunk in chunks
                ]
                inserted = await chunk_crud.insert_with_embeddings(session, chunk_rows, embedding_rows)

        except SQLAlchemyError as e:
            raise VectorStoreError(
                message="Failed to upsert document chunks",
                operation="upsert",
                details={"source_id": head.source_id, "error": str(e)},
            ) from e

        logger.info(
            f"{__name__}:upsert - source_id={head.source_id} document_id={document_id} "
            f"replaced={removed} inserted={inserted} ({(time.perf_counter() - start) * 1000:.1f}ms)"
        )
        return UpsertResult(document_id=document_id, chunk_count=inserted)

    async def query(
        self,
        embedding: list[float],
        top_k: int,
        scope: QueryScope | None = None,
    ) -> list[ScoredChunk]:
        """
        Return the top_k chunks nearest to the embedding.

        Distances are computed in numpy over every embedding in scope; only
        the top_k chunk rows are loaded afterwards.

        Args:
            embedding: Query vector
            top_k: Maximum number of chunks to return (>= 1)
            scope: Optional source_id prefix filter

        Returns:
            list[ScoredChunk]: Chunks ordered by ascending distance

        Raises:
            ValidationError: top_k < 1, empty embedding or dimension mismatch
            VectorStoreError: Database failure
        """
        if top_k < 1:
            raise ValidationError("top_k must be at least 1", field="top_k")
        if not embedding:
            raise ValidationError("Query embedding must not be empty", field="embedding")

        prefix = scope.source_id if scope else None
        try:
            async with self._session() as session:
                stored_dimension = await chunk_crud.get_stored_dimension(session)
                if stored_dimension is not None and stored_dimension != len(embedding):
                    raise ValidationError(
                        "Query embedding dimension does not match stored embeddings",
                        field="embedding",
                        details={"stored_dimension": stored_dimension, "dimension": len(embedding)},
                    )
                candidates = await chunk_crud.get_candidates(session, source_id_prefix=prefix)
                if not candidates:
                    return []

                distances = compute_distances(embedding, [vector for _, vector in candidates], self.distance_metric)
                nearest = rank_nearest(distances, top_k)
                rows = await chunk_crud.get_by_ids(session, [candidates[i][0] for i in nearest])
        except SQLAlchemyError as e:
            raise VectorStoreError(
                message="Failed to query chunks",
                operation="query",
                details={"scope": prefix, "error": str(e)},
            ) from e

        results = []
        for i in nearest:
            row = rows[candidates[i][0]]
            results.append(
                ScoredChunk(
                    id=row.id,
                    document_id=row.document_id,
                    source_id=row.source_id,
                    index=row.idx,
                    content=row.content,
                    token_count=row.token_count,
                    metadata=row.meta or {},
                    score=float(distances[i]),
                )
            )

        logger.debug(f"{__name__}:query - candidates={len(candidates)} returned={len(results)} scope={prefix}")
        return results

    async def delete(self, target: DeleteInput) -> int:
        """
        Delete by exact source id or by source id prefix in one transaction.

        Args:
            target: Exactly one of source_id or source_id_prefix

        Returns:
            int: Number of documents removed

        Raises:
            ValidationError: Both or neither target fields are set
            VectorStoreError: Database failure
        """
        validate_delete_input(target)

        try:
            async with self._session() as session, session.begin():
                document_ids = await document_crud.get_ids(
                    session,
                    source_id=target.source_id,
                    source_id_prefix=target.source_id_prefix,
                )
                await chunk_crud.delete_by_document_ids(session, document_ids)
                removed = await document_crud.delete_by_ids(session, document_ids)
        except SQLAlchemyError as e:
            raise VectorStoreError(
                message="Failed to delete documents",
                operation="delete",
                details={"target": target.model_dump(exclude_none=True), "error": str(e)},
            ) from e

        logger.info(f"{__name__}:delete - target={target.model_dump(exclude_none=True)} removed={removed}")
        return removed

    async def get_document_id(self, source_id: str) -> str | None:
        """Canonical document id for a source id, or None."""
        async with self._session() as session:
            return await document_crud.get_id_by_source_id(session, source_id)

    async def list_chunks(self, source_id: str) -> list[Chunk]:
        """
        Stored chunks of a source document in index order.

        Args:
            source_id: Exact source id

        Returns:
            list[Chunk]: Chunks with their embeddings, empty if the source is unknown
        """
        async with self._session() as session:
            document = await document_crud.get_by_source_id(session, source_id)
            if document is None:
                return []
            rows = await chunk_crud.get_by_document_id(session, document.id)
            embeddings = {
                chunk_id: vector
                for chunk_id, vector in await chunk_crud.get_embeddings(session, [row.id for row in rows])
            }
        return [
            Chunk(
                id=row.id,
                document_id=row.document_id,
                source_id=row.source_id,
                index=row.idx,
                content=row.content,
                token_count=row.token_count,
                metadata=row.meta or {},
                embedding=embeddings.get(row.id),
            )
            for row in rows
        ]

    @staticmethod
    def _validate_upsert_batch(chunks: list[Chunk]) -> int:
        if not chunks:
            raise ValidationError("upsert() requires at least one chunk", field="chunks")

        source_ids = {chunk.source_id for chunk in chunks}
        if len(source_ids) != 1:
            raise ValidationError(
                "All chunks of one upsert must share a source_id",
                field="source_id",
                details={"source_ids": sorted(source_ids)},
            )

        dimensions = set()
        for chunk in chunks:
            if not chunk.embedding:
                raise ValidationError(
                    f"Chunk {chunk.index} has no embedding",
                    field="embedding",
                )
            dimensions.add(len(chunk.embedding))
        if len(dimensions) != 1:
            raise ValidationError(
                "Embeddings in one upsert must share a dimension",
                field="embedding",
                details={"dimensions": sorted(dimensions)},
            )
        return dimensions.pop()
