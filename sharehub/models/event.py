import enum
import datetime as dt

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint

from sharehub.database import Base
from sharehub.utils.timeutils import today, utcnow


class EventVisibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class EventStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    PAST = "past"


class RetentionPolicy(str, enum.Enum):
    KEEP_FOREVER = "keep_forever"
    ARCHIVE_1YEAR = "archive_1year"
    DELETE_2YEARS = "delete_2years"


def _years_before(reference: dt.date, years: int) -> dt.date:
    try:
        return reference.replace(year=reference.year - years)
    except ValueError:
        # 29 February
        return reference.replace(year=reference.year - years, day=28)


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    slug = Column(String(100), nullable=False)
    name = Column(String(200), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    visibility = Column(String(20), nullable=False, default=EventVisibility.PUBLIC.value)
    token_expiration_date = Column(DateTime(timezone=True), nullable=True)
    retention_policy = Column(String(20), nullable=False, default=RetentionPolicy.KEEP_FOREVER.value)
    created_by = Column(Integer, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("tenant_id", "slug", name="uq_events_tenant_slug"),
        Index("idx_events_tenant_date", "tenant_id", "date"),
    )

    @property
    def is_past(self) -> bool:
        return self.date < today()

    @property
    def status(self) -> str:
        return EventStatus.PAST.value if self.is_past else EventStatus.UPCOMING.value

    @property
    def is_private(self) -> bool:
        return self.visibility == EventVisibility.PRIVATE.value

    def should_be_archived(self, reference: dt.date | None = None) -> bool:
        reference = reference or today()
        if self.retention_policy != RetentionPolicy.ARCHIVE_1YEAR.value:
            return False
        return self.date < _years_before(reference, 1)

    def should_be_deleted(self, reference: dt.date | None = None) -> bool:
        reference = reference or today()
        if self.retention_policy != RetentionPolicy.DELETE_2YEARS.value:
            return False
        return self.date < _years_before(reference, 2)
