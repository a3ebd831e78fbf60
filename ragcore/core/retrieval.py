"""
Retrieval pipeline.

Embeds a query and asks the store for the nearest chunks. When a rerank
stage will follow, the candidate pool is widened so the reranker has
something to choose from.

Dependencies: ragcore.core.embedding_gateway, ragcore.boundary.vdb, ragcore.configs
System role: First-stage retrieval
"""

import logging
import time

from ragcore.boundary.vdb.vector_store import VectorStore
from ragcore.configs.retrieval import RetrievalSettings
from ragcore.core.embedding_gateway import EmbeddingGateway
from ragcore.core.exceptions import ValidationError
from ragcore.models.document import QueryScope
from ragcore.models.retrieval import RetrievalDurations, RetrieveResult

logger = logging.getLogger(__name__)


class RetrievalPipeline:
    """Query embedding followed by a store similarity query."""

    def __init__(
        self,
        gateway: EmbeddingGateway,
        store: VectorStore,
        settings: RetrievalSettings | None = None,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.settings = settings or RetrievalSettings()

    def candidate_count(
        self,
        top_k: int,
        rerank_planned: bool = False,
        candidate_count: int | None = None,
    ) -> int:
        """
        Number of chunks to request from the store.

        Args:
            top_k: Number of results the caller finally wants
            rerank_planned: Whether a rerank stage will run on the results
            candidate_count: Explicit pool size, overrides the computed one

        Returns:
            int: ``top_k`` without rerank, otherwise
            ``max(top_k * multiplier, floor)`` unless overridden
        """
        if not rerank_planned:
            return top_k
        if candidate_count is not None:
            if candidate_count < 1:
                raise ValidationError("candidate_count must be at least 1", field="candidate_count")
            return candidate_count
        return max(top_k * self.settings.rerank_pool_multiplier, self.settings.rerank_pool_min)

    async def retrieve(
        self,
        query: str,
        top_k: int | None = None,
        scope: QueryScope | None = None,
        rerank_planned: bool = False,
        candidate_count: int | None = None,
    ) -> RetrieveResult:
        """
        Retrieve the chunks nearest to a query.

        Args:
            query: Query text
            top_k: Number of results, defaults to ``retrieval.top_k``
            scope: Optional source_id prefix filter
            rerank_planned: Over-fetch candidates for a following rerank
            candidate_count: Explicit candidate pool size when reranking

        Returns:
            RetrieveResult: Chunks ordered by ascending distance

        Raises:
            ValidationError: Empty query or top_k < 1
            EmbeddingError: Query embedding failed
            VectorStoreError: Store query failed
        """
        if not query or not query.strip():
            raise ValidationError("Query must not be empty", field="query")

        top_k = self.settings.top_k if top_k is None else top_k
        if top_k < 1:
            raise ValidationError("top_k must be at least 1", field="top_k")

        requested = self.candidate_count(top_k, rerank_planned, candidate_count)
        total_start = time.perf_counter()

        embedding = await self.gateway.embed_query(query)
        embedding_ms = (time.perf_counter() - total_start) * 1000

        retrieval_start = time.perf_counter()
        chunks = await self.store.query(embedding, requested, scope=scope)
        retrieval_ms = (time.perf_counter() - retrieval_start) * 1000
        total_ms = (time.perf_counter() - total_start) * 1000

        logger.info(
            f"{__name__}:retrieve - requested={requested} returned={len(chunks)} "
            f"scope={scope.source_id if scope else None} "
            f"({embedding_ms:.1f}ms embed, {retrieval_ms:.1f}ms query)"
        )
        return RetrieveResult(
            chunks=chunks,
            embedding_model=self.gateway.name,
            requested_count=requested,
            durations=RetrievalDurations(
                embedding_ms=embedding_ms,
                retrieval_ms=retrieval_ms,
                total_ms=total_ms,
            ),
        )
