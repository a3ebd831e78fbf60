"""
Document and store operation models.

Dependencies: pydantic
System role: Vector store input/output contracts
"""

from pydantic import BaseModel, Field


class DeleteInput(BaseModel):
    """Delete target: exactly one of source_id or source_id_prefix."""

    source_id: str | None = Field(default=None, description="Exact source id to delete")
    source_id_prefix: str | None = Field(default=None, description="Delete every source id with this prefix")


class QueryScope(BaseModel):
    """Restricts a similarity query to a subset of documents."""

    source_id: str | None = Field(default=None, description="Prefix filter on source_id")


class UpsertResult(BaseModel):
    """Outcome of a store upsert."""

    document_id: str = Field(description="Canonical document id resolved by the store")
    chunk_count: int = Field(default=0, description="Number of chunks written")
