"""
Vector store contract.

Dependencies: ragcore.models
System role: Abstraction the ingest, retrieval and delete paths depend on
"""

from abc import ABC, abstractmethod
from typing import Any

from ragcore.core.exceptions import ValidationError
from ragcore.models.chunk import Chunk, ScoredChunk
from ragcore.models.document import DeleteInput, QueryScope, UpsertResult


class VectorStore(ABC):
    """
    Persistence and similarity search for document chunks.

    Implementations own transactional consistency: an upsert either
    replaces a document's whole chunk set or changes nothing.
    """

    @abstractmethod
    async def upsert(
        self,
        chunks: list[Chunk],
        document_content: str = "",
        document_metadata: dict[str, Any] | None = None,
    ) -> UpsertResult:
        """
        Replace the chunk set of one source document.

        Args:
            chunks: Complete new chunk set, all with the same source_id and
                an embedding each
            document_content: Document text to persist
            document_metadata: Document metadata, defaults to the first chunk's

        Returns:
            UpsertResult: Canonical document id and chunk count
        """

    @abstractmethod
    async def query(
        self,
        embedding: list[float],
        top_k: int,
        scope: QueryScope | None = None,
    ) -> list[ScoredChunk]:
        """
        Return the top_k chunks nearest to the embedding, nearest first.
        """

    @abstractmethod
    async def delete(self, target: DeleteInput) -> int:
        """
        Delete documents by exact source id or by source id prefix.

        Returns:
            int: Number of documents removed
        """

    async def close(self) -> None:
        """Release resources held by the store."""
        return None


def validate_delete_input(target: DeleteInput) -> None:
    """
    Require exactly one of source_id or source_id_prefix.

    Raises:
        ValidationError: When both or neither are set
    """
    if (target.source_id is None) == (target.source_id_prefix is None):
        raise ValidationError(
            'Provide exactly one of "source_id" or "source_id_prefix".',
            field="source_id",
        )
    if target.source_id_prefix == "":
        raise ValidationError(
            "source_id_prefix must not be empty",
            field="source_id_prefix",
        )
