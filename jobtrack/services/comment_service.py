"""
Comment service: notes on an application, optionally pinned to a stage.
"""

from __future__ import annotations
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from jobtrack.core.errors import (
    AppError,
    ApplicationNotFound,
    ApplicationStageNotFound,
    ContentRequired,
    InternalError,
)
from jobtrack.models.comment import Comment
from jobtrack.repositories.application_repository import ApplicationRepository
from jobtrack.repositories.application_stage_repository import ApplicationStageRepository
from jobtrack.repositories.comment_repository import CommentRepository

logger = logging.getLogger(__name__)


class CommentService:
    """Service for application and stage comments."""

    def __init__(
        self,
        comment_repo: Optional[CommentRepository] = None,
        application_repo: Optional[ApplicationRepository] = None,
        stage_repo: Optional[ApplicationStageRepository] = None
    ):
        self.comment_repo = comment_repo or CommentRepository()
        self.application_repo = application_repo or ApplicationRepository()
        self.stage_repo = stage_repo or ApplicationStageRepository()

    async def create_comment(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID,
        content: Optional[str],
        stage_id: Optional[UUID] = None
    ) -> Comment:
        """
        Add a comment to an application, or to one of its stages.

        Raises:
            ContentRequired: If content is blank after trimming
            ApplicationNotFound: If the application is absent or not owned by user_id
            ApplicationStageNotFound: If stage_id does not belong to the application
        """
        try:
            if content is None or not content.strip():
                raise ContentRequired()

            application = await self.application_repo.get_for_user(db, user_id, application_id)
            if application is None:
                raise ApplicationNotFound()

            if stage_id is not None:
                stage = await self.stage_repo.get(db, stage_id)
                if stage is None or stage.application_id != application.id:
                    raise ApplicationStageNotFound()

            comment = await self.comment_repo.create(db, {
                "user_id": user_id,
                "application_id": application.id,
                "stage_id": stage_id,
                "content": content.strip(),
            })
            await db.commit()
            return comment
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error creating comment on application {application_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to create comment")

    async def list_comments(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID
    ) -> list[Comment]:
        """All comments of an application, oldest first."""
        try:
            application = await self.application_repo.get_for_user(db, user_id, application_id)
            if application is None:
                raise ApplicationNotFound()
            return await self.comment_repo.list_by_application(db, application.id)
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error listing comments for application {application_id}: {e}")
            raise InternalError("Failed to retrieve comments")
