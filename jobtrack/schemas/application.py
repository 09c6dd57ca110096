from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
import uuid

from jobtrack.schemas.comment import Comment
from jobtrack.schemas.company import CompanyBasic
from jobtrack.schemas.stage import ApplicationStage
from jobtrack.utils.pagination import PaginationMeta


class ApplicationCreate(BaseModel):
    job_id: uuid.UUID
    resume_id: uuid.UUID
    name: Optional[str] = Field(default=None, max_length=255)  # Defaults to the job title
    applied_at: Optional[datetime] = None


class ApplicationUpdate(BaseModel):
    """Update application status and/or name. Status is validated by the service."""
    status: Optional[str] = None
    name: Optional[str] = Field(default=None, max_length=255)


class JobNested(BaseModel):
    """Job with optional company for application responses"""
    id: uuid.UUID
    title: str
    company: Optional[CompanyBasic] = None


class ResumeNested(BaseModel):
    id: uuid.UUID
    name: str


class Application(BaseModel):
    """Application with nested job/resume, current stage and derived status"""
    id: uuid.UUID
    name: str
    status: str
    derived_status: str
    applied_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None
    current_stage_id: Optional[uuid.UUID] = None
    current_stage: Optional[ApplicationStage] = None
    stages_count: int = 0
    job: Optional[JobNested] = None
    resume: Optional[ResumeNested] = None


class ApplicationDetail(Application):
    """Single-application view with comments split by scope"""
    application_comments: List[Comment] = []
    stage_comments: List[Comment] = []


class ApplicationList(BaseModel):
    items: List[Application]
    pagination: PaginationMeta
