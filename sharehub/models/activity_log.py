import enum
from datetime import datetime, timedelta

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String

from sharehub.database import Base
from sharehub.utils.timeutils import as_utc, utcnow

RETAIN_INDEFINITELY = -1


class ActorType(str, enum.Enum):
    ADMIN = "admin"
    ORGANIZER = "organizer"
    PARTICIPANT = "participant"
    SYSTEM = "system"


class ActivityLog(Base):
    """Append-only audit record. Expiry is computed, never enforced on read."""

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=True)
    actor_type = Column(String(20), nullable=False)
    actor_id = Column(String(50), nullable=True)
    action_type = Column(String(50), nullable=False)
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    retention_days = Column(Integer, nullable=False, default=90)

    __table_args__ = (
        Index("idx_activity_tenant_timestamp", "tenant_id", "timestamp"),
        Index("idx_activity_event_timestamp", "event_id", "timestamp"),
    )

    @property
    def expires_at(self) -> datetime | None:
        if self.retention_days is None or self.retention_days < 0:
            return None
        return as_utc(self.timestamp) + timedelta(days=self.retention_days)

    def is_expired(self, now: datetime | None = None) -> bool:
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return expires_at <= (now or utcnow())
