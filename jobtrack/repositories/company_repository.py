"""
Company repository for managing company data.

Besides plain lookups, this module computes the per-company application
aggregates (applications, active applications, deepest stage history,
latest activity) that the derived company status is built from. The
aggregates are always computed at query time and never stored.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID
from sqlalchemy import select, func, and_, case, distinct, asc, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from jobtrack.models.application import Application, ApplicationStatus
from jobtrack.models.application_stage import ApplicationStage
from jobtrack.models.comment import Comment
from jobtrack.models.company import Company
from jobtrack.models.job import Job
from .base import UserScopedRepository

logger = logging.getLogger(__name__)


@dataclass
class CompanyAggregates:
    """One company with the counts its derived status depends on."""
    company: Company
    applications_count: int
    active_applications_count: int
    max_stage_count: int
    last_activity_at: Optional[datetime]


class CompanyRepository(UserScopedRepository[Company]):
    """
    Repository for Company model with specialized queries.

    Provides methods for:
    - Tenant-scoped lookup
    - Company -> job -> application -> stage aggregation
    """

    def __init__(self):
        """Initialize with Company model."""
        super().__init__(Company)

    def _aggregate_query(self, user_id: UUID):
        """
        Build the grouped company aggregation statement.

        Stage counts and latest stage/comment timestamps are pre-aggregated
        per application so the outer join yields one row per application
        and the DISTINCT counts stay exact.
        """
        stage_stats = (
            select(
                ApplicationStage.application_id.label("application_id"),
                func.count(ApplicationStage.id).label("stages_count"),
                func.max(ApplicationStage.created_at).label("last_stage_at"),
            )
            .group_by(ApplicationStage.application_id)
            .subquery()
        )
        comment_stats = (
            select(
                Comment.application_id.label("application_id"),
                func.max(Comment.created_at).label("last_comment_at"),
            )
            .group_by(Comment.application_id)
            .subquery()
        )

        return (
            select(
                Company,
                func.count(distinct(Application.id)).label("applications_count"),
                func.count(
                    distinct(
                        case(
                            (Application.status == ApplicationStatus.ACTIVE.value, Application.id),
                        )
                    )
                ).label("active_applications_count"),
                func.coalesce(func.max(stage_stats.c.stages_count), 0).label("max_stage_count"),
                func.max(func.coalesce(Application.updated_at, Application.created_at)).label("last_app_at"),
                func.max(stage_stats.c.last_stage_at).label("last_stage_at"),
                func.max(comment_stats.c.last_comment_at).label("last_comment_at"),
            )
            .select_from(Company)
            .outerjoin(Job, and_(Job.company_id == Company.id, Job.user_id == Company.user_id))
            .outerjoin(Application, and_(Application.job_id == Job.id, Application.user_id == Job.user_id))
            .outerjoin(stage_stats, stage_stats.c.application_id == Application.id)
            .outerjoin(comment_stats, comment_stats.c.application_id == Application.id)
            .where(Company.user_id == user_id)
            .group_by(Company.id)
        )

    @staticmethod
    def _to_aggregates(row) -> CompanyAggregates:
        activity = [
            value for value in (row.last_app_at, row.last_stage_at, row.last_comment_at)
            if value is not None
        ]
        return CompanyAggregates(
            company=row.Company,
            applications_count=row.applications_count or 0,
            active_applications_count=row.active_applications_count or 0,
            max_stage_count=row.max_stage_count or 0,
            last_activity_at=max(activity) if activity else None,
        )

    async def get_with_aggregates(
        self,
        db: AsyncSession,
        user_id: UUID,
        company_id: UUID
    ) -> Optional[CompanyAggregates]:
        """
        Get one company with its application aggregates.

        Returns:
            CompanyAggregates, or None if the company is absent or not owned by user_id
        """
        try:
            stmt = self._aggregate_query(user_id).where(Company.id == company_id)
            row = (await db.execute(stmt)).one_or_none()
            return self._to_aggregates(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Error aggregating company {company_id} for user {user_id}: {e}")
            raise

    async def list_with_aggregates(
        self,
        db: AsyncSession,
        user_id: UUID,
        skip: int = 0,
        limit: int = 20,
        sort_by: str = "name",
        sort_dir: str = "asc"
    ) -> tuple[list[CompanyAggregates], int]:
        """
        Get a page of the user's companies with their aggregates.

        Args:
            sort_by: "name", "applications_count" or "created_at" (unknown values fall back to name)
            sort_dir: "asc" or "desc"

        Returns:
            Tuple of (list of CompanyAggregates, total company count)
        """
        try:
            direction = desc if (sort_dir or "").lower() == "desc" else asc
            if sort_by == "applications_count":
                order_column = func.count(distinct(Application.id))
            elif sort_by == "created_at":
                order_column = Company.created_at
            else:
                order_column = Company.name

            stmt = (
                self._aggregate_query(user_id)
                .order_by(direction(order_column), Company.id)
                .offset(skip)
                .limit(limit)
            )
            rows = (await db.execute(stmt)).all()

            total = await self.count_for_user(db, user_id)
            return [self._to_aggregates(row) for row in rows], total
        except SQLAlchemyError as e:
            logger.error(f"Error listing companies for user {user_id}: {e}")
            raise
