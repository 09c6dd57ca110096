from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
import enum
import uuid
from jobtrack.core.database import Base


class StageStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApplicationStage(Base):
    __tablename__ = "application_stages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    application_id = Column(
        UUID(as_uuid=True),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Weak reference: templates may be deleted while instances keep the id
    stage_template_id = Column(UUID(as_uuid=True), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=StageStatus.PENDING.value, index=True)
    order = Column(Integer, nullable=False)

    started_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Set client-side with microsecond precision; breaks ties between equal "order" values
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    def __repr__(self):
        return f"<ApplicationStage(id={self.id}, application_id={self.application_id}, order={self.order}, status={self.status})>"
