"""
Stage template service: the user's catalog of reusable stage names.

Templates are referenced weakly by stage instances. Deleting one leaves
existing stages in place; they simply lose their display name.
"""

from __future__ import annotations
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from jobtrack.core.errors import AppError, InternalError, NameRequired, StageTemplateNotFound
from jobtrack.models.stage_template import StageTemplate
from jobtrack.repositories.stage_template_repository import StageTemplateRepository
from jobtrack.utils.pagination import calculate_offset

logger = logging.getLogger(__name__)


def _clean_name(name: Optional[str]) -> str:
    if name is None or not name.strip():
        raise NameRequired()
    return name.strip()


class StageTemplateService:
    """Service for creating and maintaining stage templates."""

    def __init__(self, template_repo: Optional[StageTemplateRepository] = None):
        self.template_repo = template_repo or StageTemplateRepository()

    async def create_template(
        self,
        db: AsyncSession,
        user_id: UUID,
        name: Optional[str],
        order: int = 0
    ) -> StageTemplate:
        """
        Create a template.

        Raises:
            NameRequired: If the name is blank after trimming
        """
        try:
            template = await self.template_repo.create(db, {
                "user_id": user_id,
                "name": _clean_name(name),
                "order": order,
            })
            await db.commit()
            logger.info(f"Created stage template {template.id} for user {user_id}")
            return template
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error creating stage template for user {user_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to create stage template")

    async def get_template(
        self,
        db: AsyncSession,
        user_id: UUID,
        template_id: UUID
    ) -> StageTemplate:
        try:
            template = await self.template_repo.get_for_user(db, user_id, template_id)
            if template is None:
                raise StageTemplateNotFound()
            return template
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error fetching stage template {template_id}: {e}")
            raise InternalError("Failed to retrieve stage template")

    async def list_templates(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        limit: int = 100
    ) -> tuple[list[StageTemplate], int]:
        """
        Get a page of templates ordered by display order.

        Returns:
            Tuple of (list of templates, total count)
        """
        try:
            skip = calculate_offset(page, limit)
            return await self.template_repo.list_for_user(db, user_id, skip=skip, limit=limit)
        except Exception as e:
            logger.error(f"Error listing stage templates for user {user_id}: {e}")
            raise InternalError("Failed to retrieve stage templates")

    async def update_template(
        self,
        db: AsyncSession,
        user_id: UUID,
        template_id: UUID,
        name: Optional[str] = None,
        order: Optional[int] = None
    ) -> StageTemplate:
        """
        Rename and/or reorder a template. Omitted fields are left alone.

        Raises:
            StageTemplateNotFound: If the template is absent or not owned by user_id
            NameRequired: If a name is supplied but blank
        """
        try:
            template = await self.template_repo.get_for_user(db, user_id, template_id)
            if template is None:
                raise StageTemplateNotFound()

            changes = {}
            if name is not None:
                changes["name"] = _clean_name(name)
            if order is not None:
                changes["order"] = order

            if changes:
                template = await self.template_repo.update(db, template, changes)
                await db.commit()
            return template
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error updating stage template {template_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to update stage template")

    async def delete_template(
        self,
        db: AsyncSession,
        user_id: UUID,
        template_id: UUID
    ) -> None:
        try:
            deleted = await self.template_repo.delete_for_user(db, user_id, template_id)
            if not deleted:
                raise StageTemplateNotFound()
            await db.commit()
            logger.info(f"Deleted stage template {template_id} for user {user_id}")
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error deleting stage template {template_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to delete stage template")
