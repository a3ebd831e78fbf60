"""
Chunk and embedding ORM models.

Dependencies: sqlalchemy, ragcore.boundary.db.base
System role: Chunk and vector persistence for the vector store
"""

from typing import Any, TYPE_CHECKING

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ragcore.boundary.db.base import Base, CreatedAtMixin, StringIdMixin

if TYPE_CHECKING:
    from ragcore.boundary.db.models.document_model import DocumentModel


class ChunkModel(Base, StringIdMixin, CreatedAtMixin):
    """
    Chunk ORM model.

    Attributes:
        id: Chunk id (string primary key)
        document_id: Foreign key to DocumentModel (cascade delete)
        source_id: Denormalized source id, used for scoped queries
        idx: Zero-based position within the document
        content: Chunk text, empty when chunk content storage is off
        token_count: Tokens in the original chunk text
        meta: Arbitrary JSON metadata (column ``metadata``)

    Relationships:
        document: Parent DocumentModel
        embedding: The chunk's ChunkEmbeddingModel (one-to-one)
    """

    __tablename__ = "chunks"

    document_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    source_id: Mapped[str] = mapped_column(String(1024), nullable=False, index=True)

    idx: Mapped[int] = mapped_column(Integer, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    token_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    meta: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
    )

    document: Mapped["DocumentModel"] = relationship(
        "DocumentModel",
        back_populates="chunks",
    )

    embedding: Mapped["ChunkEmbeddingModel | None"] = relationship(
        "ChunkEmbeddingModel",
        back_populates="chunk",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<ChunkModel(id={self.id}, source_id={self.source_id}, idx={self.idx})>"


class ChunkEmbeddingModel(Base):
    """
    Embedding vector bound 1:1 to a chunk.

    Vectors are stored as JSON float lists so the schema works unchanged on
    PostgreSQL and SQLite; similarity is computed in process.

    Attributes:
        chunk_id: Primary key and foreign key to ChunkModel (cascade delete)
        embedding: Float vector
        embedding_dimension: Length of the vector
    """

    __tablename__ = "embeddings"

    chunk_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("chunks.id", ondelete="CASCADE"),
        primary_key=True,
    )

    embedding: Mapped[list[float]] = mapped_column(JSON, nullable=False)

    embedding_dimension: Mapped[int] = mapped_column(Integer, nullable=False)

    chunk: Mapped["ChunkModel"] = relationship("ChunkModel", back_populates="embedding")

    def __repr__(self) -> str:
        return f"<ChunkEmbeddingModel(chunk_id={self.chunk_id}, dim={self.embedding_dimension})>"
