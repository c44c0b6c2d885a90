"""Base repository with generic CRUD operations."""

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from govflow.db.base import BaseModel
from govflow.utils.datetime_utils import utc_now

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing common CRUD operations.

    Implements the Repository pattern with:
    - Generic CRUD operations
    - Soft delete support
    - Deterministic ordering by primary key (insertion order)
    - Async/await support
    """

    def __init__(self, model: type[ModelType], db_session: AsyncSession):
        """
        Initialize repository with model type and database session.

        Args:
            model: SQLAlchemy model class
            db_session: Async database session
        """
        self.model = model
        self.db = db_session

    def _active(self, query, include_deleted: bool = False):
        if not include_deleted:
            query = query.where(self.model.deleted_at.is_(None))
        return query

    async def create(self, commit: bool = True, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        Args:
            commit: Commit immediately, or only flush so the caller owns the transaction
            **kwargs: Field values for the new record

        Returns:
            Created model instance
        """
        instance = self.model(**kwargs)
        self.db.add(instance)
        if commit:
            await self.db.commit()
            await self.db.refresh(instance)
        else:
            await self.db.flush()
        return instance

    async def get_by_id(
        self,
        id: int,
        include_deleted: bool = False,
    ) -> Optional[ModelType]:
        """
        Get record by ID.

        Args:
            id: Record primary key
            include_deleted: Whether to include soft-deleted records

        Returns:
            Model instance if found, None otherwise
        """
        query = self._active(select(self.model).where(self.model.id == id), include_deleted)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_multi(
        self,
        skip: int = 0,
        limit: int = 100,
        include_deleted: bool = False,
        **filters: Any
    ) -> list[ModelType]:
        """
        Get multiple records with pagination and filtering.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            include_deleted: Whether to include soft-deleted records
            **filters: Additional equality filters to apply

        Returns:
            List of model instances in insertion order
        """
        query = self._active(select(self.model), include_deleted)

        for field, value in filters.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)

        query = query.order_by(self.model.id.asc()).offset(skip).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update(
        self,
        id: int,
        update_data: dict[str, Any],
    ) -> Optional[ModelType]:
        """
        Update record by ID.

        Args:
            id: Record primary key
            update_data: Fields to update

        Returns:
            Updated model instance if found, None otherwise
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return None

        for field, value in update_data.items():
            if hasattr(instance, field):
                setattr(instance, field, value)

        # Force update of updated_at timestamp
        instance.updated_at = utc_now()

        await self.db.commit()
        await self.db.refresh(instance)
        return instance

    async def delete(self, id: int, soft_delete: bool = True) -> bool:
        """
        Delete record by ID.

        Args:
            id: Record primary key
            soft_delete: Whether to soft delete (True) or hard delete (False)

        Returns:
            True if record was deleted, False if not found
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return False

        if soft_delete:
            instance.soft_delete()
        else:
            await self.db.delete(instance)
        await self.db.commit()
        return True

    async def count(self, include_deleted: bool = False, **filters: Any) -> int:
        """
        Count records with optional filtering.

        Args:
            include_deleted: Whether to include soft-deleted records
            **filters: Additional equality filters to apply

        Returns:
            Number of matching records
        """
        query = self._active(select(func.count(self.model.id)), include_deleted)

        for field, value in filters.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)

        result = await self.db.execute(query)
        return int(result.scalar_one())

    async def get_by_field(
        self,
        field_name: str,
        field_value: Any,
        include_deleted: bool = False,
    ) -> Optional[ModelType]:
        """
        Get the first record (by insertion order) with a specific field value.

        Args:
            field_name: Name of the field to search by
            field_value: Value to search for
            include_deleted: Whether to include soft-deleted records

        Returns:
            Model instance if found, None otherwise
        """
        if not hasattr(self.model, field_name):
            return None

        query = self._active(
            select(self.model).where(getattr(self.model, field_name) == field_value),
            include_deleted,
        )
        query = query.order_by(self.model.id.asc()).limit(1)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()
