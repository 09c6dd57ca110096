from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
import uuid

from jobtrack.utils.pagination import PaginationMeta


# ---------------------------------------------------------------------------
# Stage templates
# ---------------------------------------------------------------------------
class StageTemplateCreate(BaseModel):
    # Blank names are rejected by the service with STAGE_NAME_REQUIRED
    name: str = Field(..., max_length=255)
    order: int = 0


class StageTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    order: Optional[int] = None


class StageTemplate(BaseModel):
    id: uuid.UUID
    name: str
    order: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StageTemplateList(BaseModel):
    items: List[StageTemplate]
    pagination: PaginationMeta


# ---------------------------------------------------------------------------
# Application stages
# ---------------------------------------------------------------------------
class AddStageRequest(BaseModel):
    stage_template_id: uuid.UUID
    comment: Optional[str] = None  # Attached to the new stage when non-blank


class UpdateStageRequest(BaseModel):
    """Partial update. status is validated by the service (INVALID_STATUS)."""
    status: Optional[str] = None
    completed_at: Optional[datetime] = None


class CompleteStageRequest(BaseModel):
    completed_at: Optional[datetime] = None


class ApplicationStage(BaseModel):
    """Stage instance enriched with its template's display name"""
    id: uuid.UUID
    application_id: uuid.UUID
    stage_template_id: uuid.UUID
    stage_name: Optional[str] = None  # None when the template was deleted
    status: str
    order: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_stage(cls, stage, stage_name: Optional[str]) -> "ApplicationStage":
        return cls(
            id=stage.id,
            application_id=stage.application_id,
            stage_template_id=stage.stage_template_id,
            stage_name=stage_name,
            status=stage.status,
            order=stage.order,
            started_at=stage.started_at,
            completed_at=stage.completed_at,
            created_at=stage.created_at,
        )
