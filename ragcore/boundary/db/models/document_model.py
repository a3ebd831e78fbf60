"""
Document ORM model.

One row per source_id. The id is the canonical document identity and
survives re-ingests of the same source.

Dependencies: sqlalchemy, ragcore.boundary.db.base
System role: Document persistence for the vector store
"""

from typing import Any, TYPE_CHECKING

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ragcore.boundary.db.base import Base, StringIdMixin, TimestampMixin

if TYPE_CHECKING:
    from ragcore.boundary.db.models.chunk_model import ChunkModel


class DocumentModel(Base, StringIdMixin, TimestampMixin):
    """
    Document ORM model.

    Attributes:
        id: Canonical document id (string primary key)
        source_id: Caller-supplied durable identity (unique)
        content: Full document text, empty when document content storage is off
        meta: Arbitrary JSON metadata (column ``metadata``)
        created_at: First ingest timestamp (UTC)
        updated_at: Last ingest timestamp (UTC)

    Relationships:
        chunks: Child ChunkModels (back_populates=document)
    """

    __tablename__ = "documents"

    source_id: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        unique=True,
        index=True,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # "metadata" is reserved on declarative classes
    meta: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
    )

    chunks: Mapped[list["ChunkModel"]] = relationship(
        "ChunkModel",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<DocumentModel(id={self.id}, source_id={self.source_id})>"
