"""
Engine factory.

Builds a ContextEngine from Settings: database engine and session
factory, SQL vector store, and the caller-supplied providers.

Dependencies: ragcore.configs, ragcore.boundary, ragcore.core
System role: Composition root for applications embedding the engine
"""

import logging
from typing import Any, Sequence

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ragcore.boundary.db.connection import get_async_engine, get_async_session_factory, init_schema
from ragcore.boundary.vdb.sql_vector_store import SqlVectorStore
from ragcore.configs.settings import Settings, load_settings
from ragcore.core.chunker import Chunker
from ragcore.core.context_engine import ContextEngine
from ragcore.core.ingest import IdGenerator
from ragcore.core.providers import AssetExtractor
from ragcore.observability.logger import configure_logging

logger = logging.getLogger(__name__)


def get_vector_store(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> SqlVectorStore:
    """
    Build the SQL vector store.

    Args:
        settings: Application settings
        session_factory: Factory bound to the store database

    Returns:
        SqlVectorStore: Store using the configured distance metric
    """
    return SqlVectorStore(session_factory, distance_metric=settings.storage.distance_metric)


async def create_context_engine(
    embedder: Any,
    settings: Settings | None = None,
    reranker: Any | None = None,
    chunker: Chunker | None = None,
    extractors: Sequence[AssetExtractor] = (),
    id_generator: IdGenerator | None = None,
    db_engine: AsyncEngine | None = None,
    create_schema: bool = True,
    setup_logging: bool = False,
) -> ContextEngine:
    """
    Build a ready-to-use ContextEngine.

    Args:
        embedder: Embedding provider
        settings: Application settings, loaded from the environment when None
        reranker: Optional reranker
        chunker: Optional custom chunker
        extractors: Asset extractors tried in order
        id_generator: Optional id generator
        db_engine: Existing database engine, created from settings when None
        create_schema: Create missing tables before returning
        setup_logging: Configure root logging at ``settings.log_level``

    Returns:
        ContextEngine: Engine owning the database connection pool

    Usage:
        engine = await create_context_engine(LangChainEmbeddingProvider(embeddings))
        try:
            await engine.ingest("docs:intro", text)
        finally:
            await engine.aclose()
    """
    settings = settings or load_settings()
    if setup_logging:
        configure_logging(settings.log_level)
    db_engine = db_engine or get_async_engine(settings.database)
    if create_schema:
        await init_schema(db_engine)

    store = get_vector_store(settings, get_async_session_factory(db_engine))
    logger.info(
        f"{__name__}:create_context_engine - store={type(store).__name__} "
        f"metric={settings.storage.distance_metric} reranker={reranker is not None}"
    )
    return ContextEngine(
        settings,
        embedder=embedder,
        store=store,
        reranker=reranker,
        chunker=chunker,
        extractors=extractors,
        id_generator=id_generator,
        db_engine=db_engine,
    )
