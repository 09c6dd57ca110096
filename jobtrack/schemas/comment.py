from pydantic import BaseModel
from typing import Optional
from datetime import datetime
import uuid


class CommentCreate(BaseModel):
    stage_id: Optional[uuid.UUID] = None
    content: str


class Comment(BaseModel):
    id: uuid.UUID
    application_id: uuid.UUID
    stage_id: Optional[uuid.UUID] = None
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
