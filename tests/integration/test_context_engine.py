"""
Integration tests for ContextEngine.

Exercises the full ingest, retrieve, rerank and delete flow against the
in-memory SQLite store with deterministic fake providers.

System role: End-to-end verification of the public engine surface
"""

from unittest.mock import AsyncMock

import pytest

from ragcore.configs import StorageSettings
from ragcore.core.exceptions import (
    EmbeddingError,
    MissingTextError,
    ValidationError,
    VectorStoreError,
)
from ragcore.models.document import DeleteInput, QueryScope
from tests.conftest import FakeEmbedder, StaticReranker

LONG_TEXT = "\n\n".join(
    f"Paragraph {i} talks about topic {i} with several extra words to fill it up." for i in range(6)
)


class TestContextEngineIngest:
    """Test suite for ContextEngine.ingest()."""

    @pytest.mark.asyncio
    async def test_ingest_should_be_idempotent(self, engine, store) -> None:
        # Act
        first = await engine.ingest("docs:guide", LONG_TEXT, metadata={"kind": "guide"})
        second = await engine.ingest("docs:guide", LONG_TEXT, metadata={"kind": "guide"})

        # Assert
        assert first.document_id == second.document_id
        assert first.chunk_count == second.chunk_count > 1
        chunks = await store.list_chunks("docs:guide")
        assert len(chunks) == second.chunk_count
        assert [c.index for c in chunks] == list(range(len(chunks)))
        assert all(c.metadata == {"kind": "guide"} for c in chunks)

    @pytest.mark.asyncio
    async def test_ingest_should_replace_previous_version(self, engine, store) -> None:
        # Arrange
        first = await engine.ingest("docs:guide", LONG_TEXT)

        # Act
        second = await engine.ingest("docs:guide", "A much shorter replacement.")

        # Assert
        chunks = await store.list_chunks("docs:guide")
        assert second.document_id == first.document_id
        assert [c.content for c in chunks] == ["A much shorter replacement."]

    @pytest.mark.asyncio
    async def test_ingest_should_leave_store_untouched_when_embedding_fails(
        self, engine, make_engine, store
    ) -> None:
        # Arrange
        await engine.ingest("docs:guide", "Original content stays.")
        failing = make_engine(FakeEmbedder(fail_on_call=2))

        # Act & Assert
        with pytest.raises(EmbeddingError):
            await failing.ingest("docs:guide", LONG_TEXT)

        chunks = await store.list_chunks("docs:guide")
        assert [c.content for c in chunks] == ["Original content stays."]

    @pytest.mark.asyncio
    async def test_ingest_should_reject_empty_document(self, engine, store) -> None:
        with pytest.raises(ValidationError):
            await engine.ingest("docs:empty", "   ")

        assert await store.get_document_id("docs:empty") is None

    @pytest.mark.asyncio
    async def test_ingest_should_reject_other_embedding_dimension(self, engine, make_engine) -> None:
        """Test a provider with another dimension cannot write into a populated store."""
        # Arrange
        await engine.ingest("docs:a", "first document")

        class ShortEmbedder(FakeEmbedder):
            async def embed_many(self, texts):
                return [[1.0, 0.0] for _ in texts]

        # Act & Assert
        with pytest.raises(VectorStoreError):
            await make_engine(ShortEmbedder()).ingest("docs:b", "second document")


class TestContextEngineRetrieve:
    """Test suite for ContextEngine.retrieve() and rerank()."""

    @pytest.mark.asyncio
    async def test_retrieve_should_return_nearest_first(self, engine) -> None:
        # Arrange
        await engine.ingest("kb:fruit", "apples oranges bananas")
        await engine.ingest("kb:vehicles", "cars trucks buses trains")
        await engine.ingest("kb:weather", "rain snow wind")

        # Act
        result = await engine.retrieve("apples oranges bananas", top_k=3)

        # Assert
        scores = [c.score for c in result.chunks]
        assert result.chunks[0].source_id == "kb:fruit"
        assert scores[0] == pytest.approx(0.0, abs=1e-9)
        assert scores == sorted(scores)
        assert result.embedding_model == "fake-embedder"

    @pytest.mark.asyncio
    async def test_retrieve_should_respect_scope(self, engine) -> None:
        await engine.ingest("tenant:acme:a", "shared words here")
        await engine.ingest("tenant:globex:b", "shared words here")

        result = await engine.retrieve("shared words", scope=QueryScope(source_id="tenant:globex:"))

        assert [c.source_id for c in result.chunks] == ["tenant:globex:b"]

    @pytest.mark.asyncio
    async def test_rerank_should_reorder_retrieved_chunks(self, make_engine) -> None:
        # Arrange
        reranker = StaticReranker(order=[1, 0], scores=[0.9, 0.2])
        engine = make_engine(reranker=reranker)
        await engine.ingest("kb:one", "alpha beta")
        await engine.ingest("kb:two", "gamma delta")
        retrieved = await engine.retrieve("alpha beta", top_k=2, rerank_planned=True)

        # Act
        result = await engine.rerank("alpha beta", retrieved.chunks, top_k=1)

        # Assert
        assert retrieved.requested_count == 30
        assert [c.source_id for c in retrieved.chunks] == ["kb:one", "kb:two"]
        assert [c.source_id for c in result.chunks] == ["kb:two"]
        assert [c.source_id for c in result.ranking] == ["kb:two", "kb:one"]
        assert result.meta.reranker_name == "static"

    @pytest.mark.asyncio
    async def test_rerank_should_need_text_when_chunk_content_not_stored(self, make_engine, settings) -> None:
        # Arrange
        settings = settings.model_copy(update={"storage": StorageSettings(store_chunk_content=False)})
        engine = make_engine(settings=settings, reranker=StaticReranker(order=[0]))
        await engine.ingest("kb:one", "alpha beta")
        retrieved = await engine.retrieve("alpha beta", top_k=1)

        # Act & Assert
        assert retrieved.chunks[0].content == ""
        with pytest.raises(MissingTextError):
            await engine.rerank("alpha beta", retrieved.chunks)

        resolved = await engine.rerank("alpha beta", retrieved.chunks, resolve_text=lambda c: "alpha beta")
        assert [c.id for c in resolved.chunks] == [retrieved.chunks[0].id]


class TestContextEngineDelete:
    """Test suite for ContextEngine.delete()."""

    @pytest.mark.asyncio
    async def test_delete_should_remove_only_matching_prefix(self, engine, store) -> None:
        # Arrange
        for source_id in ("tenant:acme:a", "tenant:acme:b", "tenant:acmeco:c"):
            await engine.ingest(source_id, f"content of {source_id}")

        # Act
        removed = await engine.delete(DeleteInput(source_id_prefix="tenant:acme:"))

        # Assert
        assert removed == 2
        assert await store.get_document_id("tenant:acme:a") is None
        assert await store.get_document_id("tenant:acmeco:c") is not None

    @pytest.mark.asyncio
    async def test_delete_should_remove_exact_source(self, engine, store) -> None:
        await engine.ingest("docs:a", "first")
        await engine.ingest("docs:ab", "second")

        assert await engine.delete(DeleteInput(source_id="docs:a")) == 1
        assert await store.get_document_id("docs:ab") is not None

    @pytest.mark.asyncio
    async def test_delete_should_reject_ambiguous_target(self, engine, store) -> None:
        """Test both and neither targets fail with the same message."""
        # Arrange
        await engine.ingest("docs:a", "first")

        # Act
        with pytest.raises(ValidationError) as neither:
            await engine.delete(DeleteInput())
        with pytest.raises(ValidationError) as both:
            await engine.delete(DeleteInput(source_id="docs:a", source_id_prefix="docs:"))

        # Assert
        assert neither.value.message == both.value.message
        assert neither.value.message == 'Provide exactly one of "source_id" or "source_id_prefix".'
        assert await store.get_document_id("docs:a") is not None


class TestContextEngineLifecycle:
    """Test suite for engine shutdown."""

    @pytest.mark.asyncio
    async def test_context_manager_should_dispose_db_engine(self, make_engine) -> None:
        db_engine = AsyncMock()

        async with make_engine(db_engine=db_engine) as engine:
            assert engine.gateway.supports_batch

        db_engine.dispose.assert_awaited_once()
