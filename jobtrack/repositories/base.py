"""
Base repositories implementing common CRUD operations using SQLAlchemy 2.0.

BaseRepository covers id-keyed access. UserScopedRepository adds the
tenant filter every user-owned table needs: a row owned by another user is
indistinguishable from a missing one.
"""

from __future__ import annotations
from typing import Generic, TypeVar, Type, Optional
from uuid import UUID
from sqlalchemy import select, func, delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

logger = logging.getLogger(__name__)

# Generic type variable for the model
T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository for CRUD operations.

    Repositories only flush; committing is the calling service's decision so
    that several writes can share one transaction.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages

    Example:
        class JobRepository(UserScopedRepository[Job]):
            def __init__(self):
                super().__init__(Job)
    """

    def __init__(self, model: Type[T]):
        """
        Initialize the repository with a model class.

        Args:
            model: The SQLAlchemy model class to manage
        """
        self.model = model

    async def get(
        self,
        db: AsyncSession,
        id: UUID
    ) -> Optional[T]:
        """
        Retrieve a single record by ID.

        Args:
            db: Active database session
            id: UUID of the record to retrieve

        Returns:
            Model instance if found, None otherwise
        """
        try:
            stmt = select(self.model).where(self.model.id == id)
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching {self.model.__name__} by id {id}: {e}")
            raise

    async def create(
        self,
        db: AsyncSession,
        obj_in: dict
    ) -> T:
        """
        Create a new record.

        Args:
            db: Active database session
            obj_in: Dictionary of field values for the new record

        Returns:
            Created model instance (flushed, not committed)

        Raises:
            IntegrityError: If constraints are violated

        Example:
            stage = await repo.create(db, {"application_id": app.id, "order": 0, ...})
            await db.commit()
        """
        try:
            db_obj = self.model(**obj_in)
            db.add(db_obj)
            await db.flush()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            logger.warning(f"Integrity error creating {self.model.__name__}: {e}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise

    async def update(
        self,
        db: AsyncSession,
        db_obj: T,
        obj_in: dict
    ) -> T:
        """
        Update an existing record.

        Args:
            db: Active database session
            db_obj: Existing model instance to update
            obj_in: Dictionary of field values to update

        Returns:
            Updated model instance (flushed, not committed)
        """
        try:
            # Update only provided fields
            for field, value in obj_in.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            await db.flush()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            logger.warning(f"Integrity error updating {self.model.__name__}: {e}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating {self.model.__name__}: {e}")
            raise

    async def delete(
        self,
        db: AsyncSession,
        id: UUID
    ) -> bool:
        """
        Delete a record by ID.

        Args:
            db: Active database session
            id: UUID of the record to delete

        Returns:
            True if deleted, False if not found
        """
        try:
            stmt = sql_delete(self.model).where(self.model.id == id)
            result = await db.execute(stmt)
            await db.flush()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.model.__name__} with id {id}: {e}")
            raise


class UserScopedRepository(BaseRepository[T]):
    """Repository for models carrying a ``user_id`` tenant column."""

    async def get_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        id: UUID
    ) -> Optional[T]:
        """
        Retrieve a record by ID, only if it belongs to the given user.

        Args:
            db: Active database session
            user_id: Owning user (tenant)
            id: UUID of the record

        Returns:
            Model instance if found and owned by user_id, None otherwise
        """
        try:
            stmt = select(self.model).where(
                self.model.id == id,
                self.model.user_id == user_id
            )
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching {self.model.__name__} {id} for user {user_id}: {e}")
            raise

    async def delete_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        id: UUID
    ) -> bool:
        """
        Delete a record by ID if it belongs to the given user.

        Returns:
            True if deleted, False if not found or owned by someone else
        """
        try:
            stmt = sql_delete(self.model).where(
                self.model.id == id,
                self.model.user_id == user_id
            )
            result = await db.execute(stmt)
            await db.flush()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.model.__name__} {id} for user {user_id}: {e}")
            raise

    async def count_for_user(
        self,
        db: AsyncSession,
        user_id: UUID
    ) -> int:
        """Count the records owned by a user."""
        try:
            stmt = select(func.count()).select_from(self.model).where(self.model.user_id == user_id)
            result = await db.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model.__name__} for user {user_id}: {e}")
            raise
