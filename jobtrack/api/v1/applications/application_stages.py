from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from jobtrack.core.database import get_db
from jobtrack.api.deps import get_current_user_id, get_stage_service
from jobtrack.schemas.stage import (
    AddStageRequest,
    ApplicationStage as ApplicationStageSchema,
    CompleteStageRequest,
    UpdateStageRequest,
)
from jobtrack.services.stage_service import StageService
import uuid

router = APIRouter()


@router.get("/{application_id}/stages", response_model=List[ApplicationStageSchema])
async def list_stages(
    application_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageService = Depends(get_stage_service),
    db: AsyncSession = Depends(get_db)
):
    """Get the stage history of an application, oldest first"""
    return await service.list_stages(db, user_id, application_id)


@router.post(
    "/{application_id}/stages",
    response_model=ApplicationStageSchema,
    status_code=status.HTTP_201_CREATED
)
async def add_stage(
    application_id: uuid.UUID,
    payload: AddStageRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageService = Depends(get_stage_service),
    db: AsyncSession = Depends(get_db)
):
    """Move the application to a new stage, closing the current one"""
    return await service.append_stage(
        db, user_id, application_id, payload.stage_template_id, note=payload.comment
    )


@router.patch("/{application_id}/stages/{stage_id}", response_model=ApplicationStageSchema)
async def update_stage(
    application_id: uuid.UUID,
    stage_id: uuid.UUID,
    payload: UpdateStageRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageService = Depends(get_stage_service),
    db: AsyncSession = Depends(get_db)
):
    """Change a stage's status and/or completion time"""
    return await service.update_stage_status(
        db, user_id, application_id, stage_id,
        new_status=payload.status,
        completed_at=payload.completed_at,
    )


@router.put("/{application_id}/stages/{stage_id}/complete", response_model=ApplicationStageSchema)
async def complete_stage(
    application_id: uuid.UUID,
    stage_id: uuid.UUID,
    payload: Optional[CompleteStageRequest] = None,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageService = Depends(get_stage_service),
    db: AsyncSession = Depends(get_db)
):
    """Mark a stage completed (body optional)"""
    completed_at = payload.completed_at if payload is not None else None
    return await service.complete_stage(db, user_id, application_id, stage_id, completed_at=completed_at)


@router.delete("/{application_id}/stages/{stage_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stage(
    application_id: uuid.UUID,
    stage_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StageService = Depends(get_stage_service),
    db: AsyncSession = Depends(get_db)
):
    """Delete a stage; the current stage pointer is recomputed if needed"""
    await service.delete_stage(db, user_id, application_id, stage_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
