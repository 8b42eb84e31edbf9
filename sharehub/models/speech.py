from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from sharehub.database import Base
from sharehub.utils.timeutils import utcnow


class Speech(Base):
    __tablename__ = "speeches"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    speaker_name = Column(String(255), nullable=False)
    duration_minutes = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    scheduled_time = Column(DateTime(timezone=True), nullable=True)
    display_order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("idx_speeches_session_order", "session_id", "display_order"),)
