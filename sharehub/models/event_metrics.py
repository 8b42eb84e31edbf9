from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer

from sharehub.database import Base


class EventMetrics(Base):
    """Per-event usage counters, seeded when the event is created."""

    __tablename__ = "event_metrics"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, unique=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    page_views = Column(Integer, nullable=False, default=0)
    unique_visitors = Column(Integer, nullable=False, default=0)
    total_slide_downloads = Column(Integer, nullable=False, default=0)
    visitor_hashes = Column(JSON, nullable=False, default=list)
    last_activity_at = Column(DateTime(timezone=True), nullable=True)
