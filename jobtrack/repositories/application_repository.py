"""
Application repository for managing job application data.

This module provides the tenant-scoped queries the application and stage
services need: row locking for stage mutations, sorted pagination and the
last-activity rollup shown on application listings.
"""

from __future__ import annotations
from typing import Optional
from uuid import UUID
from datetime import datetime
from sqlalchemy import select, func, asc, desc, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from jobtrack.models.application import Application
from jobtrack.models.application_stage import ApplicationStage
from jobtrack.models.comment import Comment
from .base import UserScopedRepository

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "applied_at": Application.applied_at,
    "created_at": Application.created_at,
    "status": Application.status,
    "name": Application.name,
}


def _latest(a, b):
    return case((a > b, a), else_=b)


def last_activity_expression():
    """
    SQL expression for an application's last activity, usable in ORDER BY.

    CASE-based; SQLite has no GREATEST().
    """
    touched = func.coalesce(Application.updated_at, Application.created_at)
    last_stage = (
        select(func.max(ApplicationStage.created_at))
        .where(ApplicationStage.application_id == Application.id)
        .correlate(Application)
        .scalar_subquery()
    )
    last_comment = (
        select(func.max(Comment.created_at))
        .where(Comment.application_id == Application.id)
        .correlate(Application)
        .scalar_subquery()
    )
    latest = _latest(func.coalesce(last_stage, touched), touched)
    return _latest(func.coalesce(last_comment, touched), latest)


class ApplicationRepository(UserScopedRepository[Application]):
    """
    Repository for Application model with specialized queries.

    Provides methods for:
    - Tenant-scoped lookup, optionally locking the row
    - Sorted, paginated listing
    - Last-activity computation across stages and comments
    """

    def __init__(self):
        """Initialize with Application model."""
        super().__init__(Application)

    async def get_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        id: UUID,
        for_update: bool = False
    ) -> Optional[Application]:
        """
        Get an application owned by user_id.

        With for_update=True the row is selected FOR UPDATE, which serialises
        concurrent stage mutations of the same application until the
        surrounding transaction ends.

        Args:
            db: Active database session
            user_id: Owning user
            id: UUID of the application
            for_update: Lock the row for the rest of the transaction

        Returns:
            Application instance, or None if absent or owned by someone else
        """
        try:
            stmt = select(Application).where(
                Application.id == id,
                Application.user_id == user_id
            )
            if for_update:
                stmt = stmt.with_for_update()
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

        except SQLAlchemyError as e:
            logger.error(f"Error fetching application {id} for user {user_id}: {e}")
            raise

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        skip: int = 0,
        limit: int = 20,
        sort_by: str = "applied_at",
        sort_dir: str = "desc"
    ) -> tuple[list[Application], int]:
        """
        Get paginated applications owned by a user.

        Args:
            db: Active database session
            user_id: Owning user
            skip: Number of records to skip (offset)
            limit: Maximum number of records to return
            sort_by: One of applied_at, created_at, status, name, last_activity (unknown values fall back to applied_at)
            sort_dir: "asc" or "desc" (anything else is treated as desc)

        Returns:
            Tuple of (list of applications, total count)

        Example:
            apps, total = await repo.list_for_user(db, user_id, skip=0, limit=20, sort_by="status")
        """
        try:
            if sort_by == "last_activity":
                column = last_activity_expression()
            else:
                column = SORTABLE_COLUMNS.get(sort_by, Application.applied_at)
            direction = asc if (sort_dir or "").lower() == "asc" else desc

            query = (
                select(Application)
                .where(Application.user_id == user_id)
                .order_by(direction(column), desc(Application.id))
                .offset(skip)
                .limit(limit)
            )
            result = await db.execute(query)
            applications = list(result.scalars().all())

            total = await self.count_for_user(db, user_id)
            return applications, total

        except SQLAlchemyError as e:
            logger.error(f"Error listing applications for user {user_id}: {e}")
            raise

    async def get_last_activity_at(
        self,
        db: AsyncSession,
        application_id: UUID
    ) -> Optional[datetime]:
        """
        Latest of: the application's own update, its newest stage, its newest comment.

        Computed from a single query so every value comes from the database
        with the same timezone handling.

        Returns:
            The last activity timestamp, or None if the application is gone
        """
        try:
            last_stage = (
                select(func.max(ApplicationStage.created_at))
                .where(ApplicationStage.application_id == application_id)
                .scalar_subquery()
            )
            last_comment = (
                select(func.max(Comment.created_at))
                .where(Comment.application_id == application_id)
                .scalar_subquery()
            )
            stmt = select(
                Application.created_at,
                Application.updated_at,
                last_stage.label("last_stage_at"),
                last_comment.label("last_comment_at"),
            ).where(Application.id == application_id)

            row = (await db.execute(stmt)).one_or_none()
            if row is None:
                return None

            candidates = [value for value in row if value is not None]
            return max(candidates) if candidates else None

        except SQLAlchemyError as e:
            logger.error(f"Error computing last activity for application {application_id}: {e}")
            raise
