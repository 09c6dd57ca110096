from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
import uuid

from jobtrack.utils.pagination import PaginationMeta


class CompanyBasic(BaseModel):
    """Company nested inside job/application responses"""
    id: uuid.UUID
    name: str
    location: Optional[str] = None

    class Config:
        from_attributes = True


class CompanyWithStatus(BaseModel):
    """Company enriched with read-time application aggregates"""
    id: uuid.UUID
    name: str
    location: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    applications_count: int = 0
    active_applications_count: int = 0
    derived_status: str
    last_activity_at: Optional[datetime] = None


class CompanyList(BaseModel):
    items: List[CompanyWithStatus]
    pagination: PaginationMeta
