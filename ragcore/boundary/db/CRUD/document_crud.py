"""
Document CRUD operations.

Extends BaseCRUD with the source_id keyed upsert that gives documents a
stable canonical id across re-ingests, plus exact and prefix lookups.

Dependencies: sqlalchemy, ragcore.boundary.db.models
System role: Document persistence operations
"""

from typing import Any, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ragcore.boundary.db.base import new_id, utc_now
from ragcore.boundary.db.CRUD.base_crud import BaseCRUD, starts_with
from ragcore.boundary.db.models.document_model import DocumentModel

_NATIVE_UPSERT = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with source_id based upsert, lookup and deletion.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def upsert_by_source_id(
        self,
        session: AsyncSession,
        source_id: str,
        content: str,
        metadata: dict[str, Any],
        proposed_id: str | None = None,
    ) -> str:
        """
        Insert or update the document row for a source id.

        On conflict the existing id is kept and content/metadata are
        overwritten. The proposed id only takes effect on first insert.

        Args:
            session: Async database session inside an open transaction
            source_id: Durable caller identity
            content: Document text to persist
            metadata: JSON metadata to persist
            proposed_id: Id to use if the document does not exist yet

        Returns:
            str: Canonical document id
        """
        now = utc_now()
        values = {
            "id": proposed_id or new_id(),
            "source_id": source_id,
            "content": content,
            "meta": metadata,
            "created_at": now,
            "updated_at": now,
        }

        insert_fn = _NATIVE_UPSERT.get(session.get_bind().dialect.name)
        if insert_fn is not None:
            stmt = insert_fn(DocumentModel).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[DocumentModel.source_id],
                set_={
                    "content": stmt.excluded.content,
                    # set_ and excluded are keyed by column name
                    "metadata": stmt.excluded["metadata"],
                    "updated_at": stmt.excluded.updated_at,
                },
            ).returning(DocumentModel.id)
            result = await session.execute(stmt)
            return result.scalar_one()

        # Dialects without ON CONFLICT support
        existing_id = await self.get_id_by_source_id(session, source_id)
        if existing_id is not None:
            await session.execute(
                update(DocumentModel)
                .where(DocumentModel.id == existing_id)
                .values(content=content, meta=metadata, updated_at=now)
            )
            return existing_id
        document = await self.create(session, **values)
        return document.id

    async def get_by_source_id(
        self,
        session: AsyncSession,
        source_id: str,
    ) -> DocumentModel | None:
        """
        Retrieve a document by its source id.

        Args:
            session: Async database session
            source_id: Exact source id

        Returns:
            DocumentModel if found, None otherwise
        """
        stmt = select(DocumentModel).where(DocumentModel.source_id == source_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_id_by_source_id(self, session: AsyncSession, source_id: str) -> str | None:
        stmt = select(DocumentModel.id).where(DocumentModel.source_id == source_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_ids(
        self,
        session: AsyncSession,
        source_id: str | None = None,
        source_id_prefix: str | None = None,
    ) -> Sequence[str]:
        """
        Resolve document ids for an exact source id or a source id prefix.

        Prefix matching escapes LIKE wildcards, so ``%`` and ``_`` in the
        prefix only match themselves.

        Args:
            session: Async database session
            source_id: Exact source id
            source_id_prefix: Source id prefix

        Returns:
            Sequence of matching document ids
        """
        stmt = select(DocumentModel.id)
        if source_id is not None:
            stmt = stmt.where(DocumentModel.source_id == source_id)
        if source_id_prefix is not None:
            stmt = stmt.where(starts_with(DocumentModel.source_id, source_id_prefix))
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_ids(self, session: AsyncSession, ids: Sequence[str]) -> int:
        """Delete documents by id. Returns the number of rows removed."""
        if not ids:
            return 0
        result = await session.execute(delete(DocumentModel).where(DocumentModel.id.in_(ids)))
        return result.rowcount


document_crud = DocumentCRUD()
