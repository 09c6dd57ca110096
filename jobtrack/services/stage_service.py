"""
Stage lifecycle service: the rules that move an application through its stages.

Every application keeps an ordered stage history and a pointer to its
current stage. This module owns both:

- append_stage closes the current stage, appends a new active one and
  moves the pointer
- update_stage_status / complete_stage change one stage's status and
  completion time without touching the pointer
- delete_stage hard-deletes a stage and, if it was current, re-points the
  application at the most recent meaningful stage

Each mutation locks the application row (SELECT ... FOR UPDATE) and commits
once, so concurrent calls against the same application serialise and a
failure part-way leaves nothing half-written.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from jobtrack.core.errors import (
    AppError,
    ApplicationNotFound,
    ApplicationStageNotFound,
    InternalError,
    InvalidStatus,
    StageTemplateNotFound,
)
from jobtrack.models.application import Application
from jobtrack.models.application_stage import ApplicationStage, StageStatus
from jobtrack.repositories.application_repository import ApplicationRepository
from jobtrack.repositories.application_stage_repository import ApplicationStageRepository
from jobtrack.repositories.comment_repository import CommentRepository
from jobtrack.repositories.stage_template_repository import StageTemplateRepository
from jobtrack.schemas.stage import ApplicationStage as ApplicationStageSchema
from jobtrack.services.stage_events import (
    LoggingStageEventRecorder,
    StageAction,
    StageEvent,
    StageEventRecorder,
)
from jobtrack.utils.status_mapper import get_valid_stage_statuses, normalize_stage_status

logger = logging.getLogger(__name__)

# Statuses that count as progress when re-pointing after a delete
PROGRESS_STATUSES = (StageStatus.ACTIVE.value, StageStatus.COMPLETED.value)
# Statuses that drop any completion time
OPEN_STATUSES = (StageStatus.PENDING.value, StageStatus.ACTIVE.value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_completed_at(
    current: Optional[datetime],
    new_status: Optional[str],
    explicit: Optional[datetime],
    now: datetime
) -> Optional[datetime]:
    """
    Completion time of a stage after a status update.

    - an explicit timestamp always wins
    - completed keeps an existing completion time, otherwise stamps now
    - pending/active clear it
    - skipped/cancelled (or no status change) leave it untouched

    Example:
        >>> resolve_completed_at(None, "skipped", None, now) is None
        True
    """
    if explicit is not None:
        return explicit
    if new_status == StageStatus.COMPLETED.value:
        return current if current is not None else now
    if new_status in OPEN_STATUSES:
        return None
    return current


def select_current_stage(stages: Sequence[ApplicationStage]) -> Optional[ApplicationStage]:
    """
    Pick the stage an application should point at, given its remaining stages.

    Scans from the most recently created stage backward for the first active
    or completed one. When none qualifies the newest remaining stage is used,
    so an application with stages never ends up without a current stage.

    Args:
        stages: Remaining stages, oldest created first

    Returns:
        The new current stage, or None if no stages remain
    """
    for stage in reversed(stages):
        if stage.status in PROGRESS_STATUSES:
            return stage
    # Never null while stages remain, even if all are pending/skipped/cancelled
    return stages[-1] if stages else None


class StageService:
    """
    Service for an application's stage history.

    All operations are scoped to the calling user: an application, stage or
    template owned by someone else behaves exactly like a missing one.
    """

    def __init__(
        self,
        application_repo: Optional[ApplicationRepository] = None,
        stage_repo: Optional[ApplicationStageRepository] = None,
        template_repo: Optional[StageTemplateRepository] = None,
        comment_repo: Optional[CommentRepository] = None,
        recorder: Optional[StageEventRecorder] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize service with repositories and collaborators.

        Args:
            application_repo: ApplicationRepository instance (creates new if None)
            stage_repo: ApplicationStageRepository instance (creates new if None)
            template_repo: StageTemplateRepository instance (creates new if None)
            comment_repo: CommentRepository used to attach notes (creates new if None)
            recorder: Audit sink for stage transitions (structlog-backed if None)
            clock: Returns the current UTC time; injectable for tests
        """
        self.application_repo = application_repo or ApplicationRepository()
        self.stage_repo = stage_repo or ApplicationStageRepository()
        self.template_repo = template_repo or StageTemplateRepository()
        self.comment_repo = comment_repo or CommentRepository()
        self.recorder = recorder or LoggingStageEventRecorder()
        self.clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    async def _get_application(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID,
        for_update: bool = False
    ) -> Application:
        application = await self.application_repo.get_for_user(
            db, user_id, application_id, for_update=for_update
        )
        if application is None:
            raise ApplicationNotFound()
        return application

    async def _get_owned_stage(
        self,
        db: AsyncSession,
        application: Application,
        stage_id: UUID
    ) -> ApplicationStage:
        stage = await self.stage_repo.get(db, stage_id)
        if stage is None or stage.application_id != application.id:
            raise ApplicationStageNotFound()
        return stage

    async def _resolve_stage_name(
        self,
        db: AsyncSession,
        user_id: UUID,
        template_id: UUID
    ) -> Optional[str]:
        """Display name for a stage; None if the template is gone or the lookup fails."""
        try:
            template = await self.template_repo.get_for_user(db, user_id, template_id)
        except Exception as e:
            logger.warning(f"Failed to resolve stage template {template_id}: {e}")
            return None
        if template is None:
            logger.info(f"Stage template {template_id} no longer exists")
            return None
        return template.name

    def _record(self, event: StageEvent) -> None:
        try:
            self.recorder.record(event)
        except Exception as e:
            logger.warning(f"Failed to record stage event {event.action}: {e}")

    async def _attach_note(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID,
        stage_id: UUID,
        content: str
    ) -> None:
        """
        Attach a note to a freshly created stage. Failures are logged, never raised.

        The insert runs in a SAVEPOINT so a failed flush rolls back only the
        comment and leaves the rest of the session's objects loaded.
        """
        try:
            async with db.begin_nested():
                await self.comment_repo.create(db, {
                    "user_id": user_id,
                    "application_id": application_id,
                    "stage_id": stage_id,
                    "content": content,
                })
        except Exception as e:
            logger.error(f"Failed to create comment for stage {stage_id}: {e}")
            return

        try:
            await db.commit()
        except Exception as e:
            logger.error(f"Failed to commit comment for stage {stage_id}: {e}")
            try:
                await db.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback after comment failure also failed: {rollback_error}")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    async def list_stages(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID
    ) -> list[ApplicationStageSchema]:
        """
        Stage history of an application, oldest first, with display names.

        Raises:
            ApplicationNotFound: If the application is absent or not owned by user_id
        """
        try:
            application = await self._get_application(db, user_id, application_id)
            stages = await self.stage_repo.list_by_application(db, application.id)
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error listing stages for application {application_id}: {e}")
            raise InternalError("Failed to retrieve stages")

        try:
            names = await self.template_repo.get_names(
                db, user_id, [stage.stage_template_id for stage in stages]
            )
        except Exception as e:
            logger.warning(f"Failed to resolve stage names for application {application_id}: {e}")
            names = {}

        return [
            ApplicationStageSchema.from_stage(stage, names.get(stage.stage_template_id))
            for stage in stages
        ]

    async def append_stage(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID,
        template_id: UUID,
        note: Optional[str] = None
    ) -> ApplicationStageSchema:
        """
        Append a new active stage to an application.

        The current stage (if any, and not already completed) is completed
        with completed_at = now, the new stage gets order = number of
        existing stages, and the application's current stage pointer moves
        to it. These writes commit together. A non-blank note is attached
        to the new stage afterwards on a best-effort basis.

        Args:
            db: Active database session
            user_id: Calling user
            application_id: Application to extend
            template_id: Stage template to instantiate
            note: Optional comment for the new stage

        Returns:
            The new stage with its template name

        Raises:
            ApplicationNotFound: Application absent or not owned by user_id
            StageTemplateNotFound: Template absent or not owned by user_id
            InternalError: Any unexpected failure (transaction rolled back)

        Example:
            stage = await service.append_stage(db, user_id, app_id, screening_id, note="Recruiter call booked")
        """
        previous_template_id: Optional[UUID] = None
        try:
            application = await self._get_application(db, user_id, application_id, for_update=True)

            template = await self.template_repo.get_for_user(db, user_id, template_id)
            if template is None:
                raise StageTemplateNotFound()

            existing = await self.stage_repo.list_by_application(db, application.id)
            order = len(existing)
            now = self.clock()

            if application.current_stage_id is not None:
                current = next(
                    (stage for stage in existing if stage.id == application.current_stage_id),
                    None
                )
                if current is None:
                    logger.warning(
                        f"Application {application.id} points at missing stage "
                        f"{application.current_stage_id}; nothing to close"
                    )
                elif current.status != StageStatus.COMPLETED.value:
                    closed_stage = await self.stage_repo.update(db, current, {
                        "status": StageStatus.COMPLETED.value,
                        "completed_at": now,
                    })
                    previous_template_id = closed_stage.stage_template_id

            stage = await self.stage_repo.create(db, {
                "application_id": application.id,
                "stage_template_id": template.id,
                "status": StageStatus.ACTIVE.value,
                "order": order,
                "started_at": now,
            })

            await self.application_repo.update(db, application, {"current_stage_id": stage.id})
            await db.commit()

        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error appending stage to application {application_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to add stage")

        # Plain values only from here on: a failed note rollback expires ORM state
        result = ApplicationStageSchema.from_stage(stage, template.name)

        if note is not None and note.strip():
            await self._attach_note(db, user_id, application_id, result.id, note.strip())

        if previous_template_id is not None:
            previous_name = await self._resolve_stage_name(db, user_id, previous_template_id)
            self._record(StageEvent(
                action=StageAction.CHANGE_STAGE,
                user_id=user_id,
                application_id=application_id,
                stage_id=result.id,
                stage_name=result.stage_name,
                previous_stage_name=previous_name,
                status=result.status,
            ))
        else:
            self._record(StageEvent(
                action=StageAction.ADD_STAGE,
                user_id=user_id,
                application_id=application_id,
                stage_id=result.id,
                stage_name=result.stage_name,
                status=result.status,
            ))

        return result

    async def update_stage_status(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID,
        stage_id: UUID,
        new_status: Optional[str] = None,
        completed_at: Optional[datetime] = None
    ) -> ApplicationStageSchema:
        """
        Change a stage's status and/or completion time.

        completed_at follows resolve_completed_at(): explicit values win,
        completed stamps now if unset, pending/active clear it, and
        skipped/cancelled are never auto-stamped. Setting a second stage to
        active is allowed; the current stage pointer is not touched.

        Raises:
            ApplicationNotFound: Application absent or not owned by user_id
            ApplicationStageNotFound: Stage absent or belonging to another application
            InvalidStatus: new_status is not a stage status
            InternalError: Any unexpected failure (transaction rolled back)
        """
        try:
            application = await self._get_application(db, user_id, application_id, for_update=True)
            stage = await self._get_owned_stage(db, application, stage_id)

            changes: dict = {}
            if new_status is not None:
                try:
                    changes["status"] = normalize_stage_status(new_status)
                except ValueError:
                    raise InvalidStatus(details={"allowed": get_valid_stage_statuses()})

            changes["completed_at"] = resolve_completed_at(
                stage.completed_at, changes.get("status"), completed_at, self.clock()
            )

            stage = await self.stage_repo.update(db, stage, changes)
            await db.commit()

        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error updating stage {stage_id} of application {application_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to update stage")

        stage_name = await self._resolve_stage_name(db, user_id, stage.stage_template_id)
        self._record(StageEvent(
            action=StageAction.UPDATE_STAGE_STATUS,
            user_id=user_id,
            application_id=application_id,
            stage_id=stage.id,
            stage_name=stage_name,
            status=stage.status,
        ))
        return ApplicationStageSchema.from_stage(stage, stage_name)

    async def complete_stage(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID,
        stage_id: UUID,
        completed_at: Optional[datetime] = None
    ) -> ApplicationStageSchema:
        """
        Mark a stage completed.

        Uses the supplied completion time, otherwise now. Completing a stage
        that is already completed keeps its completion time unless one is
        supplied, so repeating the call changes nothing.

        Raises:
            ApplicationNotFound: Application absent or not owned by user_id
            ApplicationStageNotFound: Stage absent or belonging to another application
            InternalError: Any unexpected failure (transaction rolled back)
        """
        try:
            application = await self._get_application(db, user_id, application_id, for_update=True)
            stage = await self._get_owned_stage(db, application, stage_id)

            if completed_at is None:
                already_done = (
                    stage.status == StageStatus.COMPLETED.value
                    and stage.completed_at is not None
                )
                completed_at = stage.completed_at if already_done else self.clock()

            stage = await self.stage_repo.update(db, stage, {
                "status": StageStatus.COMPLETED.value,
                "completed_at": completed_at,
            })
            await db.commit()

        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error completing stage {stage_id} of application {application_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to complete stage")

        stage_name = await self._resolve_stage_name(db, user_id, stage.stage_template_id)
        self._record(StageEvent(
            action=StageAction.COMPLETE_STAGE,
            user_id=user_id,
            application_id=application_id,
            stage_id=stage.id,
            stage_name=stage_name,
            status=stage.status,
        ))
        return ApplicationStageSchema.from_stage(stage, stage_name)

    async def delete_stage(
        self,
        db: AsyncSession,
        user_id: UUID,
        application_id: UUID,
        stage_id: UUID
    ) -> None:
        """
        Permanently delete a stage.

        If the stage was the application's current stage the pointer is
        recomputed with select_current_stage() over the remaining stages
        (null once none remain). Delete and re-point commit together.

        Raises:
            ApplicationNotFound: Application absent or not owned by user_id
            ApplicationStageNotFound: Stage absent or belonging to another application
            InternalError: Any unexpected failure (transaction rolled back)
        """
        try:
            application = await self._get_application(db, user_id, application_id, for_update=True)
            stage = await self._get_owned_stage(db, application, stage_id)

            was_current = application.current_stage_id == stage.id

            await self.stage_repo.delete(db, stage.id)

            if was_current:
                remaining = await self.stage_repo.list_by_application(db, application.id)
                # order can repeat after deletes; recency is created_at
                remaining = sorted(remaining, key=lambda s: s.created_at)
                new_current = select_current_stage(remaining)
                await self.application_repo.update(db, application, {
                    "current_stage_id": new_current.id if new_current is not None else None,
                })

            current_stage_id = application.current_stage_id
            await db.commit()

        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error deleting stage {stage_id} of application {application_id}: {e}")
            await db.rollback()
            raise InternalError("Failed to delete stage")

        self._record(StageEvent(
            action=StageAction.DELETE_STAGE,
            user_id=user_id,
            application_id=application_id,
            stage_id=stage_id,
            current_stage_id=current_stage_id,
        ))
