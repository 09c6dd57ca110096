from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from jobtrack.core.database import get_db
from jobtrack.api.deps import get_current_user_id, get_comment_service
from jobtrack.schemas.comment import Comment as CommentSchema, CommentCreate
from jobtrack.services.comment_service import CommentService
import uuid

router = APIRouter()


@router.get("/{application_id}/comments", response_model=List[CommentSchema])
async def list_comments(
    application_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
    db: AsyncSession = Depends(get_db)
):
    """Get all comments of an application, oldest first"""
    return await service.list_comments(db, user_id, application_id)


@router.post("/{application_id}/comments", response_model=CommentSchema, status_code=status.HTTP_201_CREATED)
async def create_comment(
    application_id: uuid.UUID,
    payload: CommentCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
    db: AsyncSession = Depends(get_db)
):
    """Add a comment to an application or one of its stages"""
    return await service.create_comment(
        db, user_id, application_id, payload.content, stage_id=payload.stage_id
    )
