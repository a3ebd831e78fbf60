"""
Test suite for ChunkCRUD candidate loading.

System role: Verification of the similarity-scan read path
"""

import pytest

from ragcore.boundary.db.CRUD.chunk_crud import chunk_crud
from ragcore.boundary.vdb.sql_vector_store import SqlVectorStore
from tests.conftest import make_chunks


class TestChunkCRUDCandidates:
    """Test suite for ChunkCRUD.get_candidates() and get_by_ids()."""

    @pytest.mark.asyncio
    async def test_get_candidates_should_return_ids_and_vectors_in_scope(
        self, store: SqlVectorStore, session_factory
    ) -> None:
        # Arrange
        await store.upsert(make_chunks("docs:a", [[1.0, 0.0], [0.0, 1.0]]))
        await store.upsert(make_chunks("notes:b", [[1.0, 1.0]]))

        # Act
        async with session_factory() as session:
            candidates = await chunk_crud.get_candidates(session, source_id_prefix="docs:")

        # Assert
        assert list(candidates) == [("docs:a#0", [1.0, 0.0]), ("docs:a#1", [0.0, 1.0])]

    @pytest.mark.asyncio
    async def test_get_by_ids_should_skip_unknown_ids(self, store: SqlVectorStore, session_factory) -> None:
        # Arrange
        await store.upsert(make_chunks("docs:a", [[1.0, 0.0]]))

        # Act
        async with session_factory() as session:
            rows = await chunk_crud.get_by_ids(session, ["docs:a#0", "missing"])
            empty = await chunk_crud.get_by_ids(session, [])

        # Assert
        assert list(rows) == ["docs:a#0"]
        assert rows["docs:a#0"].content == "docs:a chunk 0"
        assert empty == {}
