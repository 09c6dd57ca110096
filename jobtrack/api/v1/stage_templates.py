from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from jobtrack.core.config import settings
from jobtrack.core.database import get_db
from jobtrack.api.deps import get_current_user_id, get_stage_template_service
from jobtrack.schemas.stage import (
    StageTemplate as StageTemplateSchema,
    StageTemplateCreate,
    StageTemplateList,
    StageTemplateUpdate,
)
from jobtrack.services.stage_template_service import StageTemplateService
from jobtrack.utils.pagination import PaginationMeta
import uuid

router = APIRouter()


@router.get("/", response_model=StageTemplateList)
async def list_stage_templates(
    limit: int = Query(settings.max_page_size, ge=1, le=settings.max_page_size),
    page: int = Query(1, ge=1),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageTemplateService = Depends(get_stage_template_service),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's stage templates ordered by display order"""
    items, total = await service.list_templates(db, user_id, page=page, limit=limit)
    return StageTemplateList(
        items=[StageTemplateSchema.model_validate(t) for t in items],
        pagination=PaginationMeta.build(page, limit, total),
    )


@router.post("/", response_model=StageTemplateSchema, status_code=status.HTTP_201_CREATED)
async def create_stage_template(
    payload: StageTemplateCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageTemplateService = Depends(get_stage_template_service),
    db: AsyncSession = Depends(get_db)
):
    """Create a stage template"""
    return await service.create_template(db, user_id, payload.name, order=payload.order)


@router.get("/{template_id}", response_model=StageTemplateSchema)
async def get_stage_template(
    template_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageTemplateService = Depends(get_stage_template_service),
    db: AsyncSession = Depends(get_db)
):
    """Get a stage template by ID"""
    return await service.get_template(db, user_id, template_id)


@router.patch("/{template_id}", response_model=StageTemplateSchema)
async def update_stage_template(
    template_id: uuid.UUID,
    payload: StageTemplateUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageTemplateService = Depends(get_stage_template_service),
    db: AsyncSession = Depends(get_db)
):
    """Rename and/or reorder a stage template"""
    return await service.update_template(
        db, user_id, template_id, name=payload.name, order=payload.order
    )


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stage_template(
    template_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageTemplateService = Depends(get_stage_template_service),
    db: AsyncSession = Depends(get_db)
):
    """Delete a stage template. Existing stages keep their template id but lose the name."""
    await service.delete_template(db, user_id, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
