"""
Base CRUD operations for SQLAlchemy models.

Provides generic insert and count operations that can be inherited
and extended by model-specific CRUD classes. Methods never commit: the
caller owns the transaction.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import and_, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from ragcore.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


def starts_with(column: Any, prefix: str) -> ColumnElement[bool]:
    """
    Case-sensitive prefix match that treats LIKE wildcards literally.

    The LIKE clause keeps index use; the substring comparison makes the
    match exact on SQLite, where LIKE ignores ASCII case.
    """
    return and_(
        column.startswith(prefix, autoescape=True),
        func.substr(column, 1, len(prefix)) == prefix,
    )


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        """
        Initialize CRUD with target model.

        Args:
            model: SQLAlchemy model class for database operations
        """
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Create a new record in the database.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated ID and timestamps
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def bulk_insert(self, session: AsyncSession, rows: list[dict[str, Any]]) -> int:
        """
        Insert many rows with a single executemany round trip.

        Args:
            session: Async database session
            rows: Attribute dictionaries, one per row

        Returns:
            Number of rows inserted
        """
        if not rows:
            return 0
        await session.execute(insert(self.model), rows)
        return len(rows)

    async def count(self, session: AsyncSession) -> int:
        """Count all records of the model."""
        result = await session.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()
