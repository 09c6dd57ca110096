from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from jobtrack.core.config import settings
from jobtrack.core.database import get_db
from jobtrack.api.deps import get_current_user_id, get_company_service
from jobtrack.schemas.company import CompanyList, CompanyWithStatus
from jobtrack.services.company_service import CompanyService
from jobtrack.utils.pagination import PaginationMeta
import uuid

router = APIRouter()


@router.get("/", response_model=CompanyList)
async def list_companies(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    page: int = Query(1, ge=1),
    sort_by: str = Query("name", pattern="^(name|applications_count|created_at)$"),
    sort_dir: str = Query("asc", pattern="^(asc|desc)$"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's companies with application counts and derived status"""
    items, total = await service.list_companies(
        db, user_id, page=page, limit=limit, sort_by=sort_by, sort_dir=sort_dir
    )
    return CompanyList(items=items, pagination=PaginationMeta.build(page, limit, total))


@router.get("/{company_id}", response_model=CompanyWithStatus)
async def get_company(
    company_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    db: AsyncSession = Depends(get_db)
):
    """Get one company with application counts and derived status"""
    return await service.get_company(db, user_id, company_id)
