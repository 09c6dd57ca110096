"""
Application service for business logic related to job applications.

This module handles the application aggregate outside of its stage
history: creation from a job and resume, reads enriched with the job,
company, resume, current stage and derived status, coarse status updates
and deletion. Stage mutations live in StageService.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from jobtrack.core.errors import (
    AppError,
    ApplicationNotFound,
    InternalError,
    InvalidStatus,
    JobNotFound,
    ResumeNotFound,
)
from jobtrack.models.application import Application, ApplicationStatus
from jobtrack.repositories.application_repository import ApplicationRepository
from jobtrack.repositories.application_stage_repository import ApplicationStageRepository
from jobtrack.repositories.comment_repository import CommentRepository
from jobtrack.repositories.company_repository import CompanyRepository
from jobtrack.repositories.job_repository import JobRepository
from jobtrack.repositories.resume_repository import ResumeRepository
from jobtrack.repositories.stage_template_repository import StageTemplateRepository
from jobtrack.schemas.application import (
    Application as ApplicationSchema,
    ApplicationDetail,
    JobNested,
    ResumeNested,
)
from jobtrack.schemas.comment import Comment as CommentSchema
from jobtrack.schemas.company import CompanyBasic
from jobtrack.schemas.stage import ApplicationStage as ApplicationStageSchema
from jobtrack.utils.pagination import calculate_offset
from jobtrack.utils.status_mapper import (
    derive_application_status,
    get_valid_application_statuses,
    normalize_application_status,
)

logger = logging.getLogger(__name__)

UNTITLED_APPLICATION = "Untitled Application"


class ApplicationService:
    """
    Service for managing job applications.

    Reads are assembled from several repositories. Only the application row
    itself is required; every other lookup is best-effort and a failure
    leaves the corresponding field empty instead of failing the request.
    """

    def __init__(
        self,
        application_repo: Optional[ApplicationRepository] = None,
        stage_repo: Optional[ApplicationStageRepository] = None,
        template_repo: Optional[StageTemplateRepository] = None,
        job_repo: Optional[JobRepository] = None,
        company_repo: Optional[CompanyRepository] = None,
        resume_repo: Optional[ResumeRepository] = None,
        comment_repo: Optional[CommentRepository] = None
    ):
        """
        Initialize service with repositories.

        Each repository argument defaults to a new instance when None.
        """
        self.application_repo = application_repo or ApplicationRepository()
        self.stage_repo = stage_repo or ApplicationStageRepository()
        self.template_repo = template_repo or StageTemplateRepository()
        self.job_repo = job_repo or JobRepository()
        self.company_repo = company_repo or CompanyRepository()
        self.resume_repo = resume_repo or ResumeRepository()
        self.comment_repo = comment_repo or CommentRepository()

    # ------------------------------------------------------------------
    # DTO assembly
    # ------------------------------------------------------------------
    async def _load_job(self, db: AsyncSession, user_id: UUID, job_id: UUID) -> Optional[JobNested]:
        try:
            job = await self.job_repo.get_for_user(db, user_id, job_id)
            if job is None:
                return None
            company = None
            if job.company_id is not None:
                company_row = await self.company_repo.get_for_user(db, user_id, job.company_id)
                if company_row is not None:
                    company = CompanyBasic.model_validate(company_row)
            return JobNested(id=job.id, title=job.title, company=company)
        except Exception as e:
            logger.warning(f"Failed to load job {job_id}: {e}")
            return None

    async def _load_resume(self, db: AsyncSession, user_id: UUID, resume_id: UUID) -> Optional[ResumeNested]:
        try:
            resume = await self.resume_repo.get_for_user(db, user_id, resume_id)
            return ResumeNested(id=resume.id, name=resume.title) if resume is not None else None
        except Exception as e:
            logger.warning(f"Failed to load resume {resume_id}: {e}")
            return None

    async def _build_application(
        self,
        db: AsyncSession,
        user_id: UUID,
        application: Application
    ) -> ApplicationSchema:
        """Assemble the application DTO; each enrichment degrades independently."""
        stages = []
        try:
            stages = await self.stage_repo.list_by_application(db, application.id)
        except Exception as e:
            logger.warning(f"Failed to load stages for application {application.id}: {e}")

        current_stage = None
        current = next((s for s in stages if s.id == application.current_stage_id), None)
        if current is not None:
            try:
                names = await self.template_repo.get_names(db, user_id, [current.stage_template_id])
            except Exception as e:
                logger.warning(f"Failed to resolve current stage name for application {application.id}: {e}")
                names = {}
            current_stage = ApplicationStageSchema.from_stage(current, names.get(current.stage_template_id))

        last_activity_at = None
        try:
            last_activity_at = await self.application_repo.get_last_activity_at(db, application.id)
        except Exception as e:
            logger.warning(f"Failed to compute last activity for application {application.id}: {e}")

        return ApplicationSchema(
            id=application.id,
            name=application.name,
            status=application.status,
            derived_status=derive_application_status(application.status, len(stages)),
            applied_at=application.applied_at,
            created_at=application.created_at,
            updated_at=application.updated_at,
            last_activity_at=last_activity_at or application.updated_at,
            current_stage_id=application.current_stage_id,
            current_stage=current_stage,
            stages_count=len(stages),
            job=await self._load_job(db, user_id, application.job_id),
            resume=await self._load_resume(db, user_id, application.resume_id),
        )

    async def _get_owned(self, db: AsyncSession, user_id: UUID, application_id: UUID) -> Application:
        application = await self.application_repo.get_for_user(db, user_id, application_id)
        if application is None:
            raise ApplicationNotFound()
        return application

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    async def create_application(
        self,
        db: AsyncSession,
        user_id: UUID,
        job_id: UUID,
        resume_id: UUID,
        name: Optional[str] = None,
        applied_at: Optional[datetime] = None
    ) -> ApplicationSchema:
        """
        Create an application for one of the user's jobs.

        A blank name falls back to the job title. New applications start
        with status "active", no stages and a null current stage.

        Raises:
            JobNotFound: If the job is absent or not owned by user_id
            ResumeNotFound: If the resume is absent or not owned by user_id
        """
        try:
            job = await self.job_repo.get_for_user(db, user_id, job_id)
            if job is None:
                raise JobNotFound()

            resume = await self.resume_repo.get_for_user(db, user_id, resume_id)
            if resume is None:
                raise ResumeNotFound()

            display_name = (name or "").strip() or (job.title or "").strip() or UNTITLED_APPLICATION

            application = await self.application_repo.create(db, {
                "user_id": user_id,
                "job_id": job.id,
                "resume_id": resume.id,
                "name": display_name,
                "status": ApplicationStatus.ACTIVE.value,
                "applied_at": applied_at or datetime.now(timezone.utc),
            })
            await db.commit()
            logger.info(f"Created application {application.id} for user {user_id}")

        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error creating application for user {user_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to create application")

        return await self._build_application(db, user_id, application)

    async def get_application(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID
    ) -> ApplicationDetail:
        """
        Get one application with its comments split into application-level
        and stage-level lists.

        Raises:
            ApplicationNotFound: If absent or not owned by user_id
        """
        try:
            application = await self._get_owned(db, user_id, application_id)
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error fetching application {application_id}: {e}")
            raise InternalError("Failed to retrieve application")

        base = await self._build_application(db, user_id, application)

        comments = []
        try:
            comments = await self.comment_repo.list_by_application(db, application.id)
        except Exception as e:
            logger.warning(f"Failed to load comments for application {application_id}: {e}")

        return ApplicationDetail(
            **base.model_dump(),
            application_comments=[CommentSchema.model_validate(c) for c in comments if c.stage_id is None],
            stage_comments=[CommentSchema.model_validate(c) for c in comments if c.stage_id is not None],
        )

    async def list_applications(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "applied_at",
        sort_dir: str = "desc"
    ) -> tuple[list[ApplicationSchema], int]:
        """
        Get a page of the user's applications.

        Args:
            sort_by: applied_at (default), created_at, status, name or last_activity
            sort_dir: asc or desc

        Returns:
            Tuple of (list of application DTOs, total count)
        """
        try:
            skip = calculate_offset(page, limit)
            applications, total = await self.application_repo.list_for_user(
                db, user_id, skip=skip, limit=limit, sort_by=sort_by, sort_dir=sort_dir
            )
        except Exception as e:
            logger.error(f"Error listing applications for user {user_id}: {e}")
            raise InternalError("Failed to retrieve applications")

        items = [await self._build_application(db, user_id, application) for application in applications]
        return items, total

    async def update_application(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID,
        new_status: Optional[str] = None,
        name: Optional[str] = None
    ) -> ApplicationSchema:
        """
        Update an application's coarse status and/or name.

        A blank name is ignored. The stage history is never touched.

        Raises:
            ApplicationNotFound: If absent or not owned by user_id
            InvalidStatus: If new_status is not an application status
        """
        try:
            application = await self._get_owned(db, user_id, application_id)

            changes = {}
            if new_status is not None:
                try:
                    changes["status"] = normalize_application_status(new_status)
                except ValueError:
                    raise InvalidStatus(details={"allowed": get_valid_application_statuses()})
            if name is not None and name.strip():
                changes["name"] = name.strip()

            if changes:
                application = await self.application_repo.update(db, application, changes)
                await db.commit()

        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error updating application {application_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to update application")

        return await self._build_application(db, user_id, application)

    async def delete_application(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID
    ) -> None:
        """
        Delete an application. Its stages and comments go with it (ON DELETE CASCADE).

        Raises:
            ApplicationNotFound: If absent or not owned by user_id
        """
        try:
            deleted = await self.application_repo.delete_for_user(db, user_id, application_id)
            if not deleted:
                raise ApplicationNotFound()
            await db.commit()
            logger.info(f"Deleted application {application_id} for user {user_id}")
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error deleting application {application_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to delete application")
