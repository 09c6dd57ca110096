from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import UUID
import enum
import uuid
from jobtrack.core.database import Base


class ApplicationStatus(str, enum.Enum):
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    REJECTED = "rejected"
    OFFER = "offer"
    ARCHIVED = "archived"


class Application(Base):
    __tablename__ = "applications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    job_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    resume_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    # Coarse outcome label, independent of stage status
    status = Column(String(20), nullable=False, default=ApplicationStatus.ACTIVE.value, index=True)

    # Maintained by the stage lifecycle engine only; null iff the application has no stages
    current_stage_id = Column(UUID(as_uuid=True), nullable=True)

    applied_at = Column(DateTime(timezone=True), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Application(id={self.id}, user_id={self.user_id}, status={self.status}, current_stage_id={self.current_stage_id})>"
