"""
Repository for the user's stage template catalog.
"""

from __future__ import annotations
from typing import Iterable
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from jobtrack.models.stage_template import StageTemplate
from .base import UserScopedRepository

logger = logging.getLogger(__name__)


class StageTemplateRepository(UserScopedRepository[StageTemplate]):
    """Repository for StageTemplate rows."""

    def __init__(self):
        """Initialize with StageTemplate model."""
        super().__init__(StageTemplate)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        skip: int = 0,
        limit: int = 100
    ) -> tuple[list[StageTemplate], int]:
        """
        Get a user's templates ordered by display order.

        Returns:
            Tuple of (list of templates, total count)
        """
        try:
            stmt = (
                select(StageTemplate)
                .where(StageTemplate.user_id == user_id)
                .order_by(StageTemplate.order.asc(), StageTemplate.name.asc())
                .offset(skip)
                .limit(limit)
            )
            result = await db.execute(stmt)
            templates = list(result.scalars().all())

            total = await self.count_for_user(db, user_id)
            return templates, total
        except SQLAlchemyError as e:
            logger.error(f"Error listing stage templates for user {user_id}: {e}")
            raise

    async def get_names(
        self,
        db: AsyncSession,
        user_id: UUID,
        template_ids: Iterable[UUID]
    ) -> dict[UUID, str]:
        """
        Map template ids to display names in one query.

        Ids of deleted templates are simply absent from the result.
        """
        ids = list({tid for tid in template_ids if tid is not None})
        if not ids:
            return {}
        try:
            stmt = select(StageTemplate.id, StageTemplate.name).where(
                StageTemplate.user_id == user_id,
                StageTemplate.id.in_(ids)
            )
            result = await db.execute(stmt)
            return {row.id: row.name for row in result}
        except SQLAlchemyError as e:
            logger.error(f"Error resolving stage template names for user {user_id}: {e}")
            raise
