"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite store, deterministic fake embedders and
rerankers, settings and engine factories
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import asyncio
from typing import Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ragcore.boundary.db.connection import init_schema
from ragcore.boundary.vdb.sql_vector_store import SqlVectorStore
from ragcore.configs import (
    ChunkingSettings,
    DatabaseSettings,
    EmbeddingSettings,
    Settings,
)
from ragcore.core.chunker import RecursiveChunker
from ragcore.core.context_engine import ContextEngine
from ragcore.core.tokenizer import WhitespaceTokenizer
from ragcore.models.chunk import Chunk, ScoredChunk
from ragcore.models.rerank import RerankerResult

DIMENSION = 16


def bucket_vector(text: str, dimension: int = DIMENSION) -> list[float]:
    """Bag-of-words vector: each word adds 1 to a bucket chosen by its characters."""
    vector = [0.0] * dimension
    for word in text.lower().split():
        vector[sum(ord(c) for c in word) % dimension] += 1.0
    if not any(vector):
        vector[0] = 1.0
    return vector


class FakeEmbedder:
    """Deterministic embedder with embed and embed_many."""

    name = "fake-embedder"
    model = "bucket-16"

    def __init__(self, fail_on_call: int | None = None) -> None:
        self.fail_on_call = fail_on_call
        self.embed_calls: list[str] = []
        self.embed_many_calls: list[list[str]] = []

    async def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        return bucket_vector(text)

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        self.embed_many_calls.append(list(texts))
        if self.fail_on_call is not None and len(self.embed_many_calls) == self.fail_on_call:
            raise RuntimeError("provider unavailable")
        await asyncio.sleep(0)
        return [bucket_vector(text) for text in texts]


class SingleTextEmbedder:
    """Embedder exposing only embed()."""

    name = "single-text"

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return bucket_vector(text)


class FakeImageEmbedder(FakeEmbedder):
    """Embedder that can also embed images."""

    def __init__(self) -> None:
        super().__init__()
        self.image_calls: list[tuple[bytes, str | None]] = []

    async def embed_image(self, data: bytes, media_type: str | None = None) -> list[float]:
        self.image_calls.append((data, media_type))
        return [1.0] + [0.0] * (DIMENSION - 1)


class StaticReranker:
    """Reranker returning a fixed result and recording what it was given."""

    def __init__(self, order: list[int], scores: list[float] | None = None, name: str = "static") -> None:
        self.name = name
        self.order = order
        self.scores = scores
        self.calls: list[tuple[str, list[str]]] = []

    async def rerank(self, query: str, documents: list[str]) -> RerankerResult:
        self.calls.append((query, list(documents)))
        return RerankerResult(order=list(self.order), scores=self.scores, model="static-v1")


def make_candidate(i: int, content: str = "", score: float | None = None) -> ScoredChunk:
    """Build a retrieval candidate with predictable id and score."""
    return ScoredChunk(
        id=f"c{i}",
        document_id="doc-1",
        source_id="src-1",
        index=i,
        content=content,
        token_count=len(content.split()),
        score=0.1 * i if score is None else score,
    )


def make_chunks(
    source_id: str,
    vectors: list[list[float]],
    document_id: str = "",
    prefix: str | None = None,
) -> list[Chunk]:
    """Build an upsert batch with one chunk per vector."""
    prefix = prefix or source_id
    return [
        Chunk(
            id=f"{prefix}#{i}",
            document_id=document_id,
            source_id=source_id,
            index=i,
            content=f"{source_id} chunk {i}",
            token_count=3,
            metadata={"source": source_id},
            embedding=vector,
        )
        for i, vector in enumerate(vectors)
    ]


@pytest.fixture
async def db_engine():
    """
    Create in-memory SQLite async database with the vector store schema.

    Yields:
        AsyncEngine: Engine sharing one connection through StaticPool
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Provide a session factory bound to the test database."""
    return async_sessionmaker(db_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def store(session_factory) -> SqlVectorStore:
    """Provide a SQL vector store on the test database."""
    return SqlVectorStore(session_factory)


@pytest.fixture
def settings() -> Settings:
    """Provide settings with small chunks and small embedding batches."""
    return Settings(
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
        chunking=ChunkingSettings(chunk_size=16, chunk_overlap=2, min_chunk_size=0),
        embedding=EmbeddingSettings(batch_size=2, concurrency=2, timeout_ms=5_000),
    )


@pytest.fixture
def embedder() -> FakeEmbedder:
    """Provide a deterministic batch embedder."""
    return FakeEmbedder()


@pytest.fixture
def make_engine(settings, store) -> Callable[..., ContextEngine]:
    """Factory building a ContextEngine on the test store with a whitespace chunker."""

    def _make(embedder=None, **kwargs) -> ContextEngine:
        return ContextEngine(
            kwargs.pop("settings", settings),
            embedder=embedder or FakeEmbedder(),
            store=store,
            chunker=RecursiveChunker(WhitespaceTokenizer()),
            **kwargs,
        )

    return _make


@pytest.fixture
def engine(make_engine, embedder) -> ContextEngine:
    """Provide a ContextEngine with the default fake embedder."""
    return make_engine(embedder)
