"""
Repository for the per-application stage history.

Stages are not tenant-scoped themselves: ownership is established through
the parent application, which callers verify first.
"""

from __future__ import annotations
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from jobtrack.models.application_stage import ApplicationStage
from .base import BaseRepository

logger = logging.getLogger(__name__)


class ApplicationStageRepository(BaseRepository[ApplicationStage]):
    """Repository for ApplicationStage rows."""

    def __init__(self):
        """Initialize with ApplicationStage model."""
        super().__init__(ApplicationStage)

    async def list_by_application(
        self,
        db: AsyncSession,
        application_id: UUID
    ) -> list[ApplicationStage]:
        """
        All stages of an application in display order.

        Ordered by "order" then created_at. After deletions a new stage can
        get an order value at or below an older stage's, so this is not
        strictly creation order; sort by created_at where recency matters.

        Args:
            db: Active database session
            application_id: Parent application

        Returns:
            List of stages by (order, created_at)
        """
        try:
            stmt = (
                select(ApplicationStage)
                .where(ApplicationStage.application_id == application_id)
                .order_by(ApplicationStage.order.asc(), ApplicationStage.created_at.asc())
            )
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing stages for application {application_id}: {e}")
            raise
