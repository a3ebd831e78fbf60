"""
Context engine facade.

Wires the chunker, embedding gateway, vector store, retrieval pipeline
and rerank engine together and exposes the four public operations:
ingest, retrieve, rerank and delete. Every operation runs under its own
operation id so its log lines can be correlated.

Dependencies: ragcore.core, ragcore.boundary.vdb, ragcore.configs, ragcore.observability
System role: Public entry point of the library
"""

import logging
import time
from typing import Any, Sequence

from sqlalchemy.ext.asyncio import AsyncEngine

from ragcore.boundary.vdb.vector_store import VectorStore, validate_delete_input
from ragcore.configs.settings import Settings
from ragcore.core.chunker import Chunker, RecursiveChunker
from ragcore.core.embedding_gateway import EmbeddingGateway
from ragcore.core.ingest import IdGenerator, IngestOrchestrator
from ragcore.core.providers import AssetExtractor
from ragcore.core.rerank import MissingRerankerPolicy, MissingTextPolicy, RerankEngine, ResolveText
from ragcore.core.retrieval import RetrievalPipeline
from ragcore.core.tokenizer import TiktokenTokenizer
from ragcore.models.assets import AssetInput
from ragcore.models.chunk import ChunkingOptions, ScoredChunk
from ragcore.models.document import DeleteInput, QueryScope
from ragcore.models.ingest import IngestInput, IngestResult
from ragcore.models.rerank import RerankResult
from ragcore.models.retrieval import RetrieveResult
from ragcore.observability.correlation import operation_context
from ragcore.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class ContextEngine:
    """
    Retrieval-augmented generation content pipeline.

    Usage:
        engine = ContextEngine(settings, embedder=my_embeddings, store=store)
        await engine.ingest("docs:intro", "Some text ...")
        result = await engine.retrieve("what is in the intro?", top_k=5)
    """

    def __init__(
        self,
        settings: Settings,
        embedder: Any,
        store: VectorStore,
        reranker: Any | None = None,
        chunker: Chunker | None = None,
        extractors: Sequence[AssetExtractor] = (),
        id_generator: IdGenerator | None = None,
        db_engine: AsyncEngine | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            settings: Application settings
            embedder: Embedding provider (``embed``, optionally ``embed_many`` and ``embed_image``)
            store: Vector store
            reranker: Optional reranker (``rerank(query, documents)``)
            chunker: Custom chunker, defaults to the recursive token chunker
            extractors: Asset extractors tried in order
            id_generator: Produces document and chunk ids, UUID4 by default
            db_engine: Database engine disposed by ``aclose``
        """
        self.settings = settings
        self.store = store
        self.db_engine = db_engine
        self.gateway = EmbeddingGateway.from_settings(embedder, settings.embedding)
        self.chunker = chunker or RecursiveChunker(TiktokenTokenizer(settings.chunking.encoding))
        self.ingestor = IngestOrchestrator(
            chunker=self.chunker,
            gateway=self.gateway,
            store=store,
            chunking=settings.chunking,
            storage=settings.storage,
            assets=settings.assets,
            extractors=extractors,
            id_generator=id_generator,
        )
        self.retrieval = RetrievalPipeline(self.gateway, store, settings.retrieval)
        self.reranker = RerankEngine(reranker, timeout_ms=settings.rerank.timeout_ms)

    async def ingest(
        self,
        source_id: str,
        content: str = "",
        metadata: dict[str, Any] | None = None,
        document_id: str | None = None,
        assets: list[AssetInput] | None = None,
        chunking: ChunkingOptions | None = None,
    ) -> IngestResult:
        """
        Chunk, embed and store a source document, replacing any earlier version.

        Args:
            source_id: Durable caller identity of the document
            content: Document text
            metadata: JSON metadata stored with the document and its chunks
            document_id: Proposed id, honoured only on first ingest
            assets: Non-text payloads to extract or embed
            chunking: Per-call chunking overrides

        Returns:
            IngestResult: Canonical document id, chunk count, warnings and timings
        """
        return await self.ingest_input(
            IngestInput(
                source_id=source_id,
                content=content,
                metadata=metadata or {},
                document_id=document_id,
                assets=assets or [],
                chunking=chunking,
            )
        )

    async def ingest_input(self, input: IngestInput) -> IngestResult:
        """Ingest a prepared IngestInput."""
        with operation_context() as op_id:
            try:
                return await self.ingestor.ingest(input)
            except Exception as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:ingest - Failed",
                    e,
                    op_id=op_id,
                    source_id=input.source_id,
                )
                raise

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
        """
        with operation_context():
            return await self.retrieval.retrieve(
                query,
                top_k=top_k,
                scope=scope,
                rerank_planned=rerank_planned,
                candidate_count=candidate_count,
            )

    async def rerank(
        self,
        query: str,
        candidates: list[ScoredChunk],
        top_k: int | None = None,
        on_missing_text: MissingTextPolicy = "throw",
        on_missing_reranker: MissingRerankerPolicy = "throw",
        resolve_text: ResolveText | None = None,
    ) -> RerankResult:
        """Rerank retrieved candidates; see RerankEngine.rerank."""
        with operation_context():
            return await self.reranker.rerank(
                query,
                candidates,
                top_k=top_k,
                on_missing_text=on_missing_text,
                on_missing_reranker=on_missing_reranker,
                resolve_text=resolve_text,
            )

    async def delete(self, target: DeleteInput) -> int:
        """
        Delete documents by exact source id or by source id prefix.

        Args:
            target: Exactly one of source_id or source_id_prefix

        Returns:
            int: Number of documents removed

        Raises:
            ValidationError: Both or neither target fields are set
        """
        validate_delete_input(target)
        with operation_context():
            start = time.perf_counter()
            removed = await self.store.delete(target)
            logger.info(
                f"{__name__}:delete - removed={removed} "
                f"({(time.perf_counter() - start) * 1000:.1f}ms)"
            )
            return removed

    async def aclose(self) -> None:
        """Release the store and dispose the database connection pool."""
        await self.store.close()
        if self.db_engine is not None:
            await self.db_engine.dispose()

    async def __aenter__(self) -> "ContextEngine":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
