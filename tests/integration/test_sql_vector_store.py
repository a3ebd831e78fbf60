"""
Integration tests for SqlVectorStore.

Runs against an in-memory SQLite database to check upsert identity,
chunk replacement, transactional rollback on dimension conflicts,
scoped similarity queries, deletes and racing writers.

System role: Verification of the transactional vector store
"""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from ragcore.boundary.vdb.sql_vector_store import SqlVectorStore
from ragcore.core.exceptions import ValidationError, VectorStoreError
from ragcore.models.chunk import Chunk
from ragcore.models.document import DeleteInput, QueryScope
from tests.conftest import make_chunks

X = [1.0, 0.0, 0.0]
Y = [0.0, 1.0, 0.0]
XY = [1.0, 1.0, 0.0]


class TestSqlVectorStoreUpsert:
    """Test suite for SqlVectorStore.upsert()."""

    @pytest.mark.asyncio
    async def test_upsert_should_keep_canonical_document_id(self, store: SqlVectorStore) -> None:
        """Test a second upsert of a source keeps the id chosen on first insert."""
        # Act
        first = await store.upsert(make_chunks("docs:a", [X, Y], document_id="doc-a"))
        second = await store.upsert(make_chunks("docs:a", [X], document_id="doc-other"))

        # Assert
        assert first.document_id == "doc-a"
        assert first.chunk_count == 2
        assert second.document_id == "doc-a"
        assert second.chunk_count == 1
        assert await store.get_document_id("docs:a") == "doc-a"

    @pytest.mark.asyncio
    async def test_upsert_should_generate_id_when_none_proposed(self, store: SqlVectorStore) -> None:
        result = await store.upsert(make_chunks("docs:a", [X]))

        assert result.document_id
        assert await store.get_document_id("docs:a") == result.document_id

    @pytest.mark.asyncio
    async def test_upsert_should_replace_previous_chunks(self, store: SqlVectorStore) -> None:
        # Arrange
        await store.upsert(make_chunks("docs:a", [X, Y, XY], prefix="v1"))

        # Act
        await store.upsert(make_chunks("docs:a", [Y], prefix="v2"))

        # Assert
        chunks = await store.list_chunks("docs:a")
        assert [c.id for c in chunks] == ["v2#0"]
        assert chunks[0].embedding == Y
        assert chunks[0].metadata == {"source": "docs:a"}

    @pytest.mark.asyncio
    async def test_upsert_should_reuse_chunk_ids_of_replaced_version(self, store: SqlVectorStore) -> None:
        await store.upsert(make_chunks("docs:a", [X, Y]))
        await store.upsert(make_chunks("docs:a", [Y, X]))

        chunks = await store.list_chunks("docs:a")
        assert [c.embedding for c in chunks] == [Y, X]

    @pytest.mark.asyncio
    async def test_upsert_should_roll_back_on_dimension_conflict(self, store: SqlVectorStore) -> None:
        """Test a conflicting dimension leaves the store exactly as it was."""
        # Arrange
        await store.upsert(make_chunks("docs:a", [X], document_id="doc-a"))

        # Act & Assert
        with pytest.raises(VectorStoreError) as exc_info:
            await store.upsert(make_chunks("docs:b", [[1.0, 0.0]], document_id="doc-b"))

        assert exc_info.value.operation == "upsert"
        assert exc_info.value.details["stored_dimension"] == 3
        assert await store.get_document_id("docs:b") is None
        assert [c.id for c in await store.list_chunks("docs:a")] == ["docs:a#0"]

    @pytest.mark.asyncio
    async def test_upsert_should_roll_back_replacement_on_conflict(self, store: SqlVectorStore) -> None:
        # Arrange
        await store.upsert(make_chunks("docs:a", [X]), document_content="old")
        await store.upsert(make_chunks("docs:b", [Y]))

        # Act
        with pytest.raises(VectorStoreError):
            await store.upsert(make_chunks("docs:a", [[1.0, 0.0]]), document_content="new")

        # Assert
        chunks = await store.list_chunks("docs:a")
        assert [c.embedding for c in chunks] == [X]

    @pytest.mark.asyncio
    async def test_upsert_should_allow_dimension_change_of_only_document(self, store: SqlVectorStore) -> None:
        await store.upsert(make_chunks("docs:a", [X]))

        await store.upsert(make_chunks("docs:a", [[0.5, 0.5]]))

        assert [c.embedding for c in await store.list_chunks("docs:a")] == [[0.5, 0.5]]

    @pytest.mark.asyncio
    async def test_upsert_should_validate_batch(self, store: SqlVectorStore) -> None:
        # Arrange
        mixed = make_chunks("docs:a", [X]) + make_chunks("docs:b", [X])
        missing = make_chunks("docs:a", [X, Y])
        missing[1].embedding = None
        ragged = make_chunks("docs:a", [X, [1.0, 0.0]])

        # Act & Assert
        with pytest.raises(ValidationError) as exc_info:
            await store.upsert([])
        assert exc_info.value.message == "upsert() requires at least one chunk"

        for batch in (mixed, missing, ragged):
            with pytest.raises(ValidationError):
                await store.upsert(batch)

        assert await store.get_document_id("docs:a") is None


class TestSqlVectorStoreQuery:
    """Test suite for SqlVectorStore.query()."""

    @pytest.mark.asyncio
    async def test_query_should_order_by_ascending_distance(self, store: SqlVectorStore) -> None:
        # Arrange
        await store.upsert(make_chunks("docs:a", [X, Y]))
        await store.upsert(make_chunks("docs:b", [XY]))

        # Act
        results = await store.query(X, top_k=10)

        # Assert
        assert [r.id for r in results] == ["docs:a#0", "docs:b#0", "docs:a#1"]
        assert results[0].score == pytest.approx(0.0)
        assert results[1].score == pytest.approx(1 - 2 ** -0.5)
        assert results[2].score == pytest.approx(1.0)
        assert results[0].content == "docs:a chunk 0"
        assert results[0].embedding is None

    @pytest.mark.asyncio
    async def test_query_should_limit_to_top_k(self, store: SqlVectorStore) -> None:
        await store.upsert(make_chunks("docs:a", [X, Y, XY]))

        results = await store.query(X, top_k=2)

        assert [r.id for r in results] == ["docs:a#0", "docs:a#2"]

    @pytest.mark.asyncio
    async def test_query_should_keep_insertion_order_for_ties(self, store: SqlVectorStore) -> None:
        await store.upsert(make_chunks("docs:a", [Y, Y, Y]))

        results = await store.query(X, top_k=3)

        assert [r.index for r in results] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_query_should_filter_by_source_prefix(self, store: SqlVectorStore) -> None:
        # Arrange
        await store.upsert(make_chunks("tenant:acme:a", [X]))
        await store.upsert(make_chunks("tenant:acmeco:b", [X]))
        await store.upsert(make_chunks("tenant:other:c", [X]))

        # Act
        results = await store.query(X, top_k=10, scope=QueryScope(source_id="tenant:acme:"))

        # Assert
        assert [r.source_id for r in results] == ["tenant:acme:a"]

    @pytest.mark.asyncio
    async def test_query_should_treat_like_wildcards_literally(self, store: SqlVectorStore) -> None:
        await store.upsert(make_chunks("a_1", [X]))
        await store.upsert(make_chunks("ab1", [X]))

        results = await store.query(X, top_k=10, scope=QueryScope(source_id="a_"))

        assert [r.source_id for r in results] == ["a_1"]

    @pytest.mark.asyncio
    async def test_query_should_return_empty_for_empty_store(self, store: SqlVectorStore) -> None:
        assert await store.query(X, top_k=5) == []

    @pytest.mark.asyncio
    async def test_query_should_reject_dimension_mismatch(self, store: SqlVectorStore) -> None:
        await store.upsert(make_chunks("docs:a", [X]))

        with pytest.raises(ValidationError):
            await store.query([1.0, 0.0], top_k=1)

    @pytest.mark.asyncio
    async def test_query_should_reject_invalid_arguments(self, store: SqlVectorStore) -> None:
        with pytest.raises(ValidationError):
            await store.query(X, top_k=0)
        with pytest.raises(ValidationError):
            await store.query([], top_k=1)

    @pytest.mark.asyncio
    async def test_query_should_support_euclidean_distance(self, session_factory) -> None:
        # Arrange
        store = SqlVectorStore(session_factory, distance_metric="euclidean")
        await store.upsert(make_chunks("docs:a", [[3.0, 4.0, 0.0], X]))

        # Act
        results = await store.query([0.0, 0.0, 0.0], top_k=2)

        # Assert
        assert [r.score for r in results] == [pytest.approx(1.0), pytest.approx(5.0)]


class TestSqlVectorStoreDelete:
    """Test suite for SqlVectorStore.delete()."""

    @pytest.mark.asyncio
    async def test_delete_should_remove_exact_source(self, store: SqlVectorStore) -> None:
        # Arrange
        await store.upsert(make_chunks("docs:a", [X]))
        await store.upsert(make_chunks("docs:ab", [Y]))

        # Act
        removed = await store.delete(DeleteInput(source_id="docs:a"))

        # Assert
        assert removed == 1
        assert await store.get_document_id("docs:a") is None
        assert await store.list_chunks("docs:a") == []
        assert [r.source_id for r in await store.query(X, top_k=10)] == ["docs:ab"]

    @pytest.mark.asyncio
    async def test_delete_should_remove_every_source_with_prefix(self, store: SqlVectorStore) -> None:
        # Arrange
        for source_id in ("tenant:acme:a", "tenant:acme:b", "tenant:acmeco:c"):
            await store.upsert(make_chunks(source_id, [X]))

        # Act
        removed = await store.delete(DeleteInput(source_id_prefix="tenant:acme:"))

        # Assert
        assert removed == 2
        assert [r.source_id for r in await store.query(X, top_k=10)] == ["tenant:acmeco:c"]

    @pytest.mark.asyncio
    async def test_delete_should_return_zero_for_unknown_source(self, store: SqlVectorStore) -> None:
        assert await store.delete(DeleteInput(source_id="missing")) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "target",
        [
            DeleteInput(),
            DeleteInput(source_id="a", source_id_prefix="a"),
            DeleteInput(source_id_prefix=""),
        ],
        ids=["neither", "both", "empty-prefix"],
    )
    async def test_delete_should_reject_invalid_target(self, store: SqlVectorStore, target) -> None:
        await store.upsert(make_chunks("a", [X]))

        with pytest.raises(ValidationError):
            await store.delete(target)

        assert await store.get_document_id("a") is not None


class TestSqlVectorStoreConcurrency:
    """Test suite for concurrent writers on a shared-connection engine."""

    def test_store_should_serialize_sessions_on_static_pool(self, store: SqlVectorStore) -> None:
        assert store.serializes_sessions is True

    @pytest.mark.asyncio
    async def test_store_should_not_serialize_sessions_on_pooled_engine(self, tmp_path) -> None:
        # Arrange
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")

        # Act
        store = SqlVectorStore(async_sessionmaker(engine, expire_on_commit=False))

        # Assert
        assert store.serializes_sessions is False
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_concurrent_upserts_should_leave_exactly_one_version(self, store: SqlVectorStore) -> None:
        """Test two racing ingests of one source never mix their chunk sets."""
        # Arrange
        await store.upsert(make_chunks("docs:a", [X] * 5, prefix="seed"))

        # Act
        await asyncio.gather(
            store.upsert(make_chunks("docs:a", [X] * 40, prefix="a")),
            store.upsert(make_chunks("docs:a", [Y] * 7, prefix="b")),
        )

        # Assert
        chunks = await store.list_chunks("docs:a")
        versions = {c.id.split("#")[0] for c in chunks}
        assert len(chunks) in (40, 7)
        assert len(versions) == 1
        assert [c.index for c in chunks] == list(range(len(chunks)))
