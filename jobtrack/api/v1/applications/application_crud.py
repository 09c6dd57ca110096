from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from jobtrack.core.config import settings
from jobtrack.core.database import get_db
from jobtrack.api.deps import get_current_user_id, get_application_service
from jobtrack.schemas.application import (
    Application as ApplicationSchema,
    ApplicationCreate,
    ApplicationDetail,
    ApplicationList,
    ApplicationUpdate,
)
from jobtrack.services.application_service import ApplicationService
from jobtrack.utils.pagination import PaginationMeta
import uuid

router = APIRouter()


@router.post("/", response_model=ApplicationSchema, status_code=status.HTTP_201_CREATED)
async def create_application(
    payload: ApplicationCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
    db: AsyncSession = Depends(get_db)
):
    """Create an application for one of the caller's jobs"""
    return await service.create_application(
        db,
        user_id,
        job_id=payload.job_id,
        resume_id=payload.resume_id,
        name=payload.name,
        applied_at=payload.applied_at,
    )


@router.get("/", response_model=ApplicationList)
async def list_applications(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    page: int = Query(1, ge=1),
    sort_by: str = Query("applied_at", pattern="^(applied_at|created_at|status|name|last_activity)$"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's applications with pagination"""
    items, total = await service.list_applications(
        db, user_id, page=page, limit=limit, sort_by=sort_by, sort_dir=sort_dir
    )
    return ApplicationList(items=items, pagination=PaginationMeta.build(page, limit, total))


@router.get("/{application_id}", response_model=ApplicationDetail)
async def get_application(
    application_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
    db: AsyncSession = Depends(get_db)
):
    """Get one application with current stage, derived status and comments"""
    return await service.get_application(db, user_id, application_id)


@router.patch("/{application_id}", response_model=ApplicationSchema)
async def update_application(
    application_id: uuid.UUID,
    payload: ApplicationUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
    db: AsyncSession = Depends(get_db)
):
    """Update an application's status and/or name"""
    return await service.update_application(
        db, user_id, application_id, new_status=payload.status, name=payload.name
    )


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application(
    application_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
    db: AsyncSession = Depends(get_db)
):
    """Delete an application together with its stages and comments"""
    await service.delete_application(db, user_id, application_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
