import enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from sharehub.database import Base
from sharehub.utils.timeutils import utcnow


class TokenType(str, enum.Enum):
    ORGANIZER = "organizer"
    PARTICIPANT = "participant"


class AccessToken(Base):
    """
    Opaque per-event credential.

    Revocation is a soft delete: revoked_at/revoked_by are set and the row
    is kept for the audit trail.
    """

    __tablename__ = "access_tokens"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(21), nullable=False, unique=True, index=True)
    type = Column(String(20), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    use_count = Column(Integer, nullable=False, default=0)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    revoked_by = Column(Integer, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (Index("idx_access_tokens_event_type", "event_id", "type"),)

    @property
    def is_organizer(self) -> bool:
        return self.type == TokenType.ORGANIZER.value
