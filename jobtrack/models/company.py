from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import UUID
import enum
import uuid
from jobtrack.core.database import Base


class DerivedStatus(str, enum.Enum):
    """Read-time classification of a company or application. Never stored."""
    IDLE = "idle"                  # No applications, or none in progress
    ACTIVE = "active"              # Has active applications
    INTERVIEWING = "interviewing"  # Some application moved past its first stage


class Company(Base):
    __tablename__ = "companies"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    location = Column(String(255))
    notes = Column(Text)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Company(id={self.id}, name={self.name})>"
