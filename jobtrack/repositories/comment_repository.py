"""
Comment repository: free-text notes attached to an application and,
optionally, to one of its stages.
"""

from __future__ import annotations
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from jobtrack.models.comment import Comment
from .base import UserScopedRepository

logger = logging.getLogger(__name__)


class CommentRepository(UserScopedRepository[Comment]):
    """Repository for Comment model."""

    def __init__(self):
        """Initialize with Comment model."""
        super().__init__(Comment)

    async def list_by_application(
        self,
        db: AsyncSession,
        application_id: UUID
    ) -> list[Comment]:
        """
        All comments of an application, oldest first.

        Args:
            db: Active database session
            application_id: Parent application (ownership already verified)

        Returns:
            List of comments
        """
        try:
            stmt = (
                select(Comment)
                .where(Comment.application_id == application_id)
                .order_by(Comment.created_at.asc())
            )
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing comments for application {application_id}: {e}")
            raise
