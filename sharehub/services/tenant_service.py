"""
Tenant Service

Lookups and branding updates for tenant organisations.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.context import TenantContext
from sharehub.exceptions import NotFoundError
from sharehub.models.tenant import DEFAULT_BRANDING, Tenant, TenantStatus
from sharehub.services import activity_service

logger = logging.getLogger(__name__)


async def get_tenant_by_id(tenant_id: int, db: AsyncSession) -> Tenant | None:
    """Return a Tenant by primary key, or None if not found."""
    result = await db.execute(select(Tenant).where(Tenant.id == tenant_id))
    return result.scalars().first()


async def get_active_tenant_by_slug(slug: str, db: AsyncSession) -> Tenant:
    """Suspended tenants are reported as missing."""
    result = await db.execute(
        select(Tenant).where(Tenant.slug == slug, Tenant.status == TenantStatus.active.value)
    )
    tenant = result.scalars().first()
    if tenant is None:
        raise NotFoundError("Tenant", slug)
    return tenant


async def get_current_tenant(ctx: TenantContext, db: AsyncSession) -> Tenant:
    tenant = await get_tenant_by_id(ctx.tenant_id, db)
    if tenant is None:
        raise NotFoundError("Tenant", ctx.tenant_id)
    return tenant


async def update_branding(ctx: TenantContext, updates: dict, db: AsyncSession) -> Tenant:
    """
    Merge branding fields into the tenant's branding.

    Only keys present in `updates` are changed.
    """
    tenant = await get_current_tenant(ctx, db)
    branding = {**DEFAULT_BRANDING, **(tenant.branding or {}), **updates}
    tenant.branding = branding
    await db.commit()
    await db.refresh(tenant)

    logger.info("Branding updated: tenant=%d fields=%s", tenant.id, sorted(updates))
    await activity_service.log_activity(ctx, "branding_updated", metadata={"fields": sorted(updates)})
    return tenant
