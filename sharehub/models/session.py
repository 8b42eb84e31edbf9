from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from sharehub.database import Base
from sharehub.utils.timeutils import utcnow


class EventSession(Base):
    """
    A time block inside an event ("Morning Session").

    display_order is nullable: None means "order by scheduled_time",
    an integer pins the session to a manual position.
    """

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    scheduled_time = Column(DateTime(timezone=True), nullable=True)
    display_order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("idx_sessions_event_order", "event_id", "display_order"),)
