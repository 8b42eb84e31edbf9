"""
Tenant model.

Each Tenant is an isolated organisation (e.g. a hotel). Every other
tenant-owned table carries a tenant_id FK back to this row.
"""

import enum

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String

from sharehub.database import Base
from sharehub.utils.timeutils import utcnow


class TenantStatus(str, enum.Enum):
    active = "active"
    suspended = "suspended"


DEFAULT_BRANDING = {
    "primary_color": "#2563EB",
    "secondary_color": "#F59E0B",
    "logo_url": None,
}


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    status = Column(String(20), nullable=False, default=TenantStatus.active.value)
    branding = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_BRANDING))
    settings = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (Index("idx_tenant_status", "status"),)
