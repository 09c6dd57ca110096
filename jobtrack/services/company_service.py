"""
Company service: read-only company views with derived status.

The derived status ("idle", "active", "interviewing") is recomputed from
live aggregates on every call and never written back.
"""

from __future__ import annotations
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from jobtrack.core.errors import AppError, CompanyNotFound, InternalError
from jobtrack.repositories.company_repository import CompanyAggregates, CompanyRepository
from jobtrack.schemas.company import CompanyWithStatus
from jobtrack.utils.pagination import calculate_offset
from jobtrack.utils.status_mapper import derive_status

logger = logging.getLogger(__name__)


def to_company_with_status(aggregates: CompanyAggregates) -> CompanyWithStatus:
    company = aggregates.company
    return CompanyWithStatus(
        id=company.id,
        name=company.name,
        location=company.location,
        notes=company.notes,
        created_at=company.created_at,
        updated_at=company.updated_at,
        applications_count=aggregates.applications_count,
        active_applications_count=aggregates.active_applications_count,
        derived_status=derive_status(
            aggregates.applications_count,
            aggregates.active_applications_count,
            aggregates.max_stage_count,
        ),
        last_activity_at=aggregates.last_activity_at or company.updated_at,
    )


class CompanyService:
    """Service for company reads."""

    def __init__(self, company_repo: Optional[CompanyRepository] = None):
        """
        Initialize service with repositories.

        Args:
            company_repo: CompanyRepository instance (creates new if None)
        """
        self.company_repo = company_repo or CompanyRepository()

    async def get_company(
        self,
        db: AsyncSession,
        user_id: UUID,
        company_id: UUID
    ) -> CompanyWithStatus:
        """
        Get one company with application counts and derived status.

        Raises:
            CompanyNotFound: If absent or not owned by user_id
        """
        try:
            aggregates = await self.company_repo.get_with_aggregates(db, user_id, company_id)
            if aggregates is None:
                raise CompanyNotFound()
            return to_company_with_status(aggregates)
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error fetching company {company_id}: {e}")
            raise InternalError("Failed to retrieve company")

    async def list_companies(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "name",
        sort_dir: str = "asc"
    ) -> tuple[list[CompanyWithStatus], int]:
        """
        Get a page of the user's companies with derived status.

        Returns:
            Tuple of (list of companies, total count)
        """
        try:
            skip = calculate_offset(page, limit)
            rows, total = await self.company_repo.list_with_aggregates(
                db, user_id, skip=skip, limit=limit, sort_by=sort_by, sort_dir=sort_dir
            )
            return [to_company_with_status(row) for row in rows], total
        except Exception as e:
            logger.error(f"Error listing companies for user {user_id}: {e}")
            raise InternalError("Failed to retrieve companies")
